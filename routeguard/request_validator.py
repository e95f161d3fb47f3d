# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Request validation middleware.

Validates named request regions (body, query, params, headers or any extra
region) against a per-route schema map:

  1. Each region in the schema map is read from the request; absent regions
     are skipped.
  2. Every present region is run through the adapter. All regions are
     attempted so the caller gets one complete error report.
  3. On full success the validated values are written under the configured
     namespace and the next stage runs.
  4. Otherwise a BadRequestError with one entry per failing region goes to
     the bad request handler, or to next(error) when none is configured.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from routeguard.adapters import run_adapter
from routeguard.errors import BadRequestError, MissingValidatorError, RequestErrorEntry
from routeguard.http import MISSING, PipelineRequest, PipelineResponse
from routeguard.options import ValidationConfig
from routeguard.pipeline import Middleware, Next, call_handler
from routeguard.result import Err

RequestSchemaMap = Mapping[str, Any]
RequestAdapter = Callable[..., RequestSchemaMap]


def _identity_adapter(schemas: RequestSchemaMap) -> RequestSchemaMap:
    return schemas


async def _validate_regions(
    config: ValidationConfig,
    schemas: RequestSchemaMap,
    req: PipelineRequest,
) -> Tuple[Dict[str, Any], List[RequestErrorEntry]]:
    """Return (validated, errors) for every present region in schemas."""
    validated: Dict[str, Any] = {}
    errors: List[RequestErrorEntry] = []

    for location, schema in schemas.items():
        value = req.region(location)
        if value is MISSING:
            logger.debug("[RequestValidator] Region '{}' absent, skipping", location)
            continue

        result = await run_adapter(config.validator, value, schema)
        if isinstance(result, Err):
            errors.append(RequestErrorEntry(location=location, error=result.error))
        else:
            validated[location] = result.data

    return validated, errors


def create_request_validator(
    config: Optional[ValidationConfig] = None,
    adapter: Optional[RequestAdapter] = None,
) -> Callable[..., Middleware]:
    """
    Build a request validator factory bound to a configuration snapshot.

    Args:
        config: Validation options (default: ValidationConfig())
        adapter: Turns the factory's parameters into a RequestSchemaMap.
            Default takes a single mapping argument as is.

    Returns:
        Factory ``(*params) -> middleware``

    Example:
        >>> validate_request = create_request_validator(ValidationConfig(validator=pydantic_adapter))
        >>> middleware = validate_request({"query": QueryModel})
    """
    cfg = config if config is not None else ValidationConfig()
    build_schemas = adapter or _identity_adapter

    def factory(*params: Any) -> Middleware:
        schemas = dict(build_schemas(*params))

        async def request_validator(req: PipelineRequest, res: PipelineResponse, next: Next) -> None:
            if cfg.validator is None:
                await next(MissingValidatorError(method=req.method, url=req.url))
                return

            try:
                validated, errors = await _validate_regions(cfg, schemas, req)
            except Exception as exc:
                await next(exc)
                return

            if errors:
                error = BadRequestError(
                    errors, method=req.method, url=req.url, status_code=cfg.bad_request_status
                )
                req.validation_failed = True
                if cfg.bad_request_handler is None:
                    await next(error)
                else:
                    await call_handler(cfg.bad_request_handler, error, req, res, next)
                return

            req.write_validated(cfg.namespace, validated)
            await next()

        return request_validator

    return factory


def validate_request(
    schemas: RequestSchemaMap,
    config: Optional[ValidationConfig] = None,
) -> Middleware:
    """Shortcut for ``create_request_validator(config)(schemas)``."""
    return create_request_validator(config)(schemas)
