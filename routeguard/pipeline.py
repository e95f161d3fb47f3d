# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Middleware pipeline orchestrator.

Runs middleware stages in order and owns the continuation/error channel.

Continuation semantics:
  - ``await next()`` runs the rest of the chain. Exceptions raised further
    down propagate back to the awaiting stage, so a stage can wrap its call in
    try/except and forward with ``await next(exc)``.
  - ``await next(error)`` skips the remaining stages and hands the error to
    the error handlers.

Error handlers run in registration order. Inside an error handler,
``next(err)`` passes err on, ``next()`` passes the current error on, and an
exception raised by the handler replaces the error. When no handler is left
default_error_handler answers with status 500.
"""

import inspect
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from loguru import logger

from routeguard.errors import RouteValidationError
from routeguard.http import PipelineRequest, PipelineResponse

Next = Callable[..., Awaitable[None]]
Middleware = Callable[[PipelineRequest, PipelineResponse, Next], Any]
ErrorHandler = Callable[[Exception, PipelineRequest, PipelineResponse, Next], Any]


async def maybe_await(value: Any) -> Any:
    """Await value if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


async def call_handler(
    handler: ErrorHandler,
    error: Any,
    req: PipelineRequest,
    res: PipelineResponse,
    next: Next,
) -> None:
    """
    Invoke a user handler and forward anything it raises to next(exc).

    Sync and async handlers are both supported. Exceptions raised while the
    handler's awaitable resolves are caught by the same block.
    """
    try:
        await maybe_await(handler(error, req, res, next))
    except Exception as exc:
        await next(exc)


async def default_error_handler(
    error: Exception,
    req: PipelineRequest,
    res: PipelineResponse,
) -> None:
    """
    Last-resort error handler.

    Validation errors expose their message (it carries no payload data),
    anything else gets a generic "Internal Server Error".
    """
    if isinstance(error, RouteValidationError):
        message = error.message
        logger.warning(
            "[Pipeline] {} at ({}) {}: {}", error.kind.value, req.method, req.url, message
        )
    else:
        message = "Internal Server Error"
        logger.opt(exception=error).error(
            "[Pipeline] Unhandled error at ({}) {}: {}", req.method, req.url, error
        )

    if res.sent:
        logger.error(
            "[Pipeline] Response already sent at ({}) {}, cannot report error",
            req.method,
            req.url,
        )
        return

    try:
        await res.status(500).json({"message": message})
    except Exception as exc:
        logger.error(
            "[Pipeline] Failed to send error response at ({}) {}: {}",
            req.method,
            req.url,
            exc,
        )


class Pipeline:
    """
    Ordered middleware stages plus error handlers for one route.

    Example:
        >>> pipeline = Pipeline([route_validator(handler, response={200: int})])
        >>> await pipeline.run(PipelineRequest("GET", "/"), PipelineResponse())
    """

    def __init__(
        self,
        stages: Sequence[Middleware],
        error_handlers: Sequence[ErrorHandler] = (),
    ):
        self._stages: List[Middleware] = list(stages)
        self._error_handlers: List[ErrorHandler] = list(error_handlers)

    async def run(self, req: PipelineRequest, res: PipelineResponse) -> PipelineResponse:
        try:
            await self._run_stage(0, req, res)
        except Exception as exc:
            await self._dispatch_error(exc, req, res, 0)
        return res

    def _make_next(self, index: int, req: PipelineRequest, res: PipelineResponse) -> Next:
        async def next_(error: Optional[Exception] = None) -> None:
            if error is not None:
                await self._dispatch_error(error, req, res, 0)
                return
            await self._run_stage(index + 1, req, res)

        return next_

    async def _run_stage(self, index: int, req: PipelineRequest, res: PipelineResponse) -> None:
        if index >= len(self._stages):
            return
        stage = self._stages[index]
        await maybe_await(stage(req, res, self._make_next(index, req, res)))

    async def _dispatch_error(
        self,
        error: Exception,
        req: PipelineRequest,
        res: PipelineResponse,
        index: int,
    ) -> None:
        if index >= len(self._error_handlers):
            await default_error_handler(error, req, res)
            return

        async def next_(passed: Optional[Exception] = None) -> None:
            await self._dispatch_error(
                passed if passed is not None else error, req, res, index + 1
            )

        try:
            await maybe_await(self._error_handlers[index](error, req, res, next_))
        except Exception as exc:
            await self._dispatch_error(exc, req, res, index + 1)


def compose(*stages: Middleware) -> Middleware:
    """
    Fold several middleware stages into one.

    The last stage's next() continues with the outer pipeline; next(error)
    from any stage goes straight to the outer error channel.
    """

    async def composed(req: PipelineRequest, res: PipelineResponse, next: Next) -> None:
        async def dispatch(index: int) -> None:
            if index == len(stages):
                await next()
                return

            async def next_(error: Optional[Exception] = None) -> None:
                if error is not None:
                    await next(error)
                    return
                await dispatch(index + 1)

            await maybe_await(stages[index](req, res, next_))

        await dispatch(0)

    return composed
