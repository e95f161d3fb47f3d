# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
FastAPI / Starlette binding.

Turns a middleware pipeline into a regular FastAPI endpoint:

    >>> app = FastAPI()
    >>> add_validated_route(
    ...     app.router,
    ...     "/items/{item_id}",
    ...     route_validator(get_item, request={"params": ItemParams}, response={200: Item}, config=cfg),
    ...     methods=["GET"],
    ... )

The incoming Starlette request is converted to a PipelineRequest, the
pipeline runs, and whatever the pipeline emitted on the PipelineResponse is
converted back into a Starlette response.
"""

import json
import sys
from typing import Awaitable, Callable, List, Optional, Sequence

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from loguru import logger

from routeguard import config as settings
from routeguard.http import MISSING, PipelineRequest, PipelineResponse
from routeguard.pipeline import ErrorHandler, Middleware, Pipeline


async def build_pipeline_request(request: Request) -> PipelineRequest:
    """
    Convert a Starlette request into a PipelineRequest.

    JSON bodies are decoded; malformed JSON and other content types are kept
    as text so schema validation rejects them like any other bad value.
    An empty body leaves the body region absent.
    """
    body = MISSING
    raw = await request.body()
    if raw:
        text = raw.decode("utf-8", errors="replace")
        content_type = request.headers.get("content-type", "")
        body = text
        if "json" in content_type:
            try:
                body = json.loads(text)
            except ValueError:
                logger.debug("[FastAPI] Malformed JSON body at {} {}", request.method, request.url.path)

    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    return PipelineRequest(
        request.method,
        url,
        body=body,
        query=dict(request.query_params),
        params=dict(request.path_params),
        headers=dict(request.headers),
    )


def to_starlette_response(res: PipelineResponse, req: Optional[PipelineRequest] = None) -> Response:
    """
    Convert an emitted PipelineResponse into a Starlette response.

    A pipeline that finished without emitting yields 500.
    """
    if not res.sent:
        logger.error(
            "[FastAPI] No response emitted at ({}) {}",
            req.method if req else "?",
            req.url if req else "?",
        )
        return JSONResponse({"message": "Internal Server Error"}, status_code=500)

    if res.media_type == "application/json":
        return JSONResponse(
            jsonable_encoder(res.body), status_code=res.status_code, headers=res.headers
        )
    if isinstance(res.body, str):
        return PlainTextResponse(res.body, status_code=res.status_code, headers=res.headers)
    if isinstance(res.body, (bytes, bytearray)):
        return Response(
            bytes(res.body),
            status_code=res.status_code,
            headers=res.headers,
            media_type=res.media_type,
        )
    return Response(status_code=res.status_code, headers=res.headers)


def validated_endpoint(
    *stages: Middleware,
    error_handlers: Sequence[ErrorHandler] = (),
) -> Callable[[Request], Awaitable[Response]]:
    """Build a FastAPI endpoint running the given stages as one pipeline."""
    pipeline = Pipeline(stages, error_handlers)

    async def endpoint(request: Request) -> Response:
        req = await build_pipeline_request(request)
        res = PipelineResponse()
        await pipeline.run(req, res)
        return to_starlette_response(res, req)

    return endpoint


def add_validated_route(
    router: APIRouter,
    path: str,
    *stages: Middleware,
    methods: Optional[List[str]] = None,
    error_handlers: Sequence[ErrorHandler] = (),
) -> None:
    """Register a validated pipeline endpoint on a router."""
    router.add_api_route(
        path,
        validated_endpoint(*stages, error_handlers=error_handlers),
        methods=methods or ["GET"],
    )


def setup_logging(level: Optional[str] = None) -> None:
    """Route loguru output to stderr at the given level (default: LOG_LEVEL)."""
    logger.remove()
    logger.add(sys.stderr, level=level or settings.LOG_LEVEL)


def create_app(**kwargs) -> FastAPI:
    """Create a FastAPI application titled and versioned from config."""
    kwargs.setdefault("title", settings.APP_TITLE)
    kwargs.setdefault("version", settings.APP_VERSION)
    return FastAPI(**kwargs)
