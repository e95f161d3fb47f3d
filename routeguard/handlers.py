# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Default handlers for validation failures.

Every handler has the signature ``(error, req, res, next)`` and may be sync
or async. Custom handlers replace these through ValidationConfig.

pydantic_bad_request_handler pairs with pydantic_adapter and reports the
failing fields instead of a generic body:

    {"errors": [{"location": ["body", "username"], "messages": ["Field required"]}]}
"""

from typing import Any, Dict, List, Tuple

from loguru import logger

from routeguard.errors import (
    BadRequestError,
    BadResponseError,
    MissingSchemaError,
    RequestErrorEntry,
)
from routeguard.http import PipelineRequest, PipelineResponse
from routeguard.pipeline import Next


async def default_bad_request_handler(
    error: BadRequestError,
    req: PipelineRequest,
    res: PipelineResponse,
    next: Next,
) -> None:
    """Answer with bad_request_status and a generic body. Region details are not leaked."""
    logger.debug(
        "[RequestValidator] Rejected ({}) {}: invalid {}",
        req.method,
        req.url,
        ", ".join(error.locations),
    )
    await res.status(error.status_code).json({"message": "Bad Request"})


def _entry_issues(entry: RequestErrorEntry) -> List[Tuple[List[Any], str]]:
    # pydantic reports a list of {"loc": (...), "msg": "..."} dicts per region
    if isinstance(entry.error, list) and all(
        isinstance(issue, dict) and "msg" in issue for issue in entry.error
    ):
        return [
            ([entry.location, *issue.get("loc", ())], str(issue["msg"]))
            for issue in entry.error
        ]
    return [([entry.location], str(entry.error))]


def group_request_issues(errors: List[RequestErrorEntry]) -> List[Dict[str, Any]]:
    """
    Group request validation issues by location.

    Args:
        errors: One RequestErrorEntry per failing region

    Returns:
        ``[{"location": [...], "messages": [...]}]`` in first-seen order
    """
    grouped: Dict[Tuple[Any, ...], Dict[str, Any]] = {}
    for entry in errors:
        for location, message in _entry_issues(entry):
            issue = grouped.setdefault(
                tuple(location), {"location": location, "messages": []}
            )
            issue["messages"].append(message)
    return list(grouped.values())


async def pydantic_bad_request_handler(
    error: BadRequestError,
    req: PipelineRequest,
    res: PipelineResponse,
    next: Next,
) -> None:
    """Answer with bad_request_status and the failing fields grouped by location."""
    issues = group_request_issues(error.errors)
    logger.debug(
        "[RequestValidator] Rejected ({}) {}: {} issue location(s)",
        req.method,
        req.url,
        len(issues),
    )
    await res.status(error.status_code).json({"errors": issues})


async def default_bad_response_handler(
    error: BadResponseError,
    req: PipelineRequest,
    res: PipelineResponse,
    next: Next,
) -> None:
    logger.warning(
        "[ResponseValidator] Bad {} Response at ({}) {}", res.status_code, req.method, req.url
    )
    await res.send_status(500)


async def default_missing_schema_handler(
    error: MissingSchemaError,
    req: PipelineRequest,
    res: PipelineResponse,
    next: Next,
) -> None:
    logger.warning(
        "[ResponseValidator] Missing {} Response Validator at ({}) {}",
        res.status_code,
        req.method,
        req.url,
    )
    await res.send_status(500)
