# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Route composition: response validator, request validator and route handler
folded into one pipeline stage.

Execution order:
  1. Response validator - arms the emit wrappers before anything can emit
  2. Request validator  - rejects bad requests before the route runs
  3. Route handler      - user code, sync or async

Exceptions raised by the route reach the response validator first (which
restores the emit operations) and then the error channel.
"""

from typing import Any, Callable, List, Optional

from routeguard.http import PipelineRequest, PipelineResponse
from routeguard.options import ValidationConfig
from routeguard.pipeline import Middleware, Next, compose, maybe_await
from routeguard.request_validator import RequestSchemaMap, create_request_validator
from routeguard.response_validator import ResponseSchemaMap, create_response_validator

RouteHandler = Callable[[PipelineRequest, PipelineResponse, Next], Any]


def route_validator(
    route: RouteHandler,
    *,
    request: Optional[RequestSchemaMap] = None,
    response: Optional[ResponseSchemaMap] = None,
    config: Optional[ValidationConfig] = None,
) -> Middleware:
    """
    Wrap a route handler with request and response validation.

    Args:
        route: Handler ``(req, res, next)``
        request: Region -> schema map (skipped when None)
        response: Status code -> schema map (skipped when None; pass {} to
            validate with global validators only)
        config: Validation options shared by both validators

    Returns:
        Single middleware stage

    Example:
        >>> stage = route_validator(
        ...     get_item,
        ...     request={"params": ItemParams},
        ...     response={200: Item},
        ...     config=ValidationConfig(validator=pydantic_adapter),
        ... )
    """
    cfg = config if config is not None else ValidationConfig()
    stages: List[Middleware] = []

    if response is not None:
        stages.append(create_response_validator(cfg)(response))
    if request is not None:
        stages.append(create_request_validator(cfg)(request))

    async def route_stage(req: PipelineRequest, res: PipelineResponse, next: Next) -> None:
        await maybe_await(route(req, res, next))

    stages.append(route_stage)
    chain = compose(*stages)

    async def validated_route(req: PipelineRequest, res: PipelineResponse, next: Next) -> None:
        try:
            await chain(req, res, next)
        except Exception as exc:
            await next(exc)

    return validated_route
