# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Response validation middleware.

The middleware wraps the response's emit operations (send, json, send_status)
so the first emission is validated against the schema registered for the
status code current at that moment.

States:
    ARMED     - wrappers installed, nothing emitted yet
    FIRED     - one emission went through validation, originals restored
    BYPASSED  - one emission skipped validation (exempt status or rejected
                request), originals restored
    DISARMED  - originals restored without an emission (downstream raised)

On every wrapped emit the originals are restored first, before validation
runs. Handlers that emit again (the default ones send 500) therefore go
straight to the real emit operations, and the response is emitted at most
once through this layer.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from loguru import logger

from routeguard.adapters import run_adapter
from routeguard.errors import BadResponseError, MissingSchemaError, MissingValidatorError
from routeguard.http import EmitFn, PipelineRequest, PipelineResponse, reason_phrase
from routeguard.options import ValidationConfig
from routeguard.pipeline import ErrorHandler, Middleware, Next, call_handler
from routeguard.result import Err

ResponseSchemaMap = Mapping[int, Any]
ResponseAdapter = Callable[..., ResponseSchemaMap]


class EmissionState(str, Enum):
    """Lifecycle of one response interception."""

    ARMED = "armed"
    FIRED = "fired"
    BYPASSED = "bypassed"
    DISARMED = "disarmed"


def merge_validators(
    global_validators: ResponseSchemaMap,
    route_validators: ResponseSchemaMap,
) -> Dict[int, Any]:
    """Merge status code maps; route entries override global ones."""
    merged = {int(code): schema for code, schema in global_validators.items()}
    merged.update({int(code): schema for code, schema in route_validators.items()})
    return merged


class ResponseInterception:
    """
    Emission state for one request/response pair.

    Attributes:
        state: Current EmissionState (None before arm())
    """

    def __init__(
        self,
        config: ValidationConfig,
        validators: Mapping[int, Any],
        req: PipelineRequest,
        res: PipelineResponse,
        next: Next,
    ):
        self._config = config
        self._validators = validators
        self._req = req
        self._res = res
        self._next = next
        self._teardown: Optional[Callable[[], None]] = None
        self.state: Optional[EmissionState] = None

    def arm(self) -> None:
        """Capture the original emit operations and install the wrappers."""
        send_original = self._res.originals()["send"]
        self._teardown = self._res.install(
            {
                "send": self._intercept,
                "json": self._intercept,
                # Status only: set the code first, lookup is keyed by it
                "send_status": lambda _original: self._intercept_status(send_original),
            }
        )
        self.state = EmissionState.ARMED

    def disarm(self) -> None:
        """Restore the originals without emitting (downstream failed)."""
        if self.state is EmissionState.ARMED:
            self._restore()
            self.state = EmissionState.DISARMED

    def _restore(self) -> None:
        if self._teardown is not None:
            self._teardown()

    def _intercept(self, original: EmitFn) -> EmitFn:
        async def intercepted(body: Any = None) -> PipelineResponse:
            return await self._emit(original, body)

        return intercepted

    def _intercept_status(self, send_original: EmitFn) -> EmitFn:
        async def intercepted(code: int) -> PipelineResponse:
            self._res.status(code)
            return await self._emit(send_original, reason_phrase(code))

        return intercepted

    async def _dispatch(self, handler: Optional[ErrorHandler], error: Exception) -> None:
        if handler is None:
            await self._next(error)
        else:
            await call_handler(handler, error, self._req, self._res, self._next)

    async def _emit(self, original: EmitFn, body: Any) -> PipelineResponse:
        self._restore()
        self.state = EmissionState.FIRED

        req, res, cfg = self._req, self._res, self._config
        status_code = res.status_code

        # After a rejected request the emission is the rejection itself
        if cfg.is_exempt(status_code) or req.validation_failed:
            self.state = EmissionState.BYPASSED
            logger.debug(
                "[ResponseValidator] {} at ({}) {} sent without validation",
                status_code,
                req.method,
                req.url,
            )
            return await original(body)

        if status_code not in self._validators:
            if not cfg.require_validator:
                logger.debug(
                    "[ResponseValidator] No schema for {} at ({}) {}, passing through",
                    status_code,
                    req.method,
                    req.url,
                )
                return await original(body)
            error = MissingSchemaError(status_code=status_code, method=req.method, url=req.url)
            await self._dispatch(cfg.missing_schema_handler, error)
            return res

        try:
            result = await run_adapter(cfg.validator, body, self._validators[status_code])
        except Exception as exc:
            await self._next(exc)
            return res

        if isinstance(result, Err):
            error = BadResponseError(
                result.error, status_code=status_code, method=req.method, url=req.url
            )
            await self._dispatch(cfg.bad_response_handler, error)
            return res

        return await original(result.data)


def _identity_adapter(validators: ResponseSchemaMap) -> ResponseSchemaMap:
    return validators


def create_response_validator(
    config: Optional[ValidationConfig] = None,
    adapter: Optional[ResponseAdapter] = None,
) -> Callable[..., Middleware]:
    """
    Build a response validator factory bound to a configuration snapshot.

    Args:
        config: Validation options (default: ValidationConfig())
        adapter: Turns the factory's parameters into a status code -> schema
            map. Default takes a single mapping argument as is.

    Returns:
        Factory ``(*params) -> middleware``
    """
    cfg = config if config is not None else ValidationConfig()
    build_validators = adapter or _identity_adapter

    def factory(*params: Any) -> Middleware:
        validators = merge_validators(cfg.global_validators, build_validators(*params))

        async def response_validator(req: PipelineRequest, res: PipelineResponse, next: Next) -> None:
            if cfg.validator is None:
                await next(MissingValidatorError(method=req.method, url=req.url))
                return

            interception = ResponseInterception(cfg, validators, req, res, next)
            interception.arm()
            try:
                await next()
            except Exception as exc:
                interception.disarm()
                await next(exc)

        return response_validator

    return factory


def validate_response(
    validators: ResponseSchemaMap,
    config: Optional[ValidationConfig] = None,
) -> Middleware:
    """Shortcut for ``create_response_validator(config)(validators)``."""
    return create_response_validator(config)(validators)
