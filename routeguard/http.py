# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Framework-neutral request and response objects used by the pipeline.

PipelineRequest exposes named regions (body, query, params, headers, extras)
and a namespaced location for validated data.

PipelineResponse exposes three emit operations (send, json, send_status).
Each one dispatches through an emitter table that interceptors can replace
with install() and restore with the returned teardown callable. The
validators only go through that interface, they never reassign attributes.

The FastAPI binding (fastapi_binding.py) converts between these objects and
Starlette requests/responses.
"""

from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from routeguard.errors import ResponseAlreadySentError


class _Missing:
    """Marker for a request region that is not present."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

EmitFn = Callable[..., Awaitable["PipelineResponse"]]
Interceptor = Callable[[EmitFn], EmitFn]

EMIT_KINDS = ("send", "json", "send_status")


def reason_phrase(status_code: int) -> str:
    """Return the HTTP reason phrase for a status code ("OK" for 200)."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)


class PipelineRequest:
    """
    Inbound request as seen by middleware.

    Attributes:
        method: HTTP method (upper case)
        url: Original URL (path and query string)
        validation_failed: Set by the request validator when it rejected the request
    """

    def __init__(
        self,
        method: str = "GET",
        url: str = "/",
        *,
        body: Any = MISSING,
        query: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
        extras: Optional[Mapping[str, Any]] = None,
    ):
        self.method = method.upper()
        self.url = url
        self.validation_failed = False
        self._regions: Dict[str, Any] = {
            "query": dict(query or {}),
            "params": dict(params or {}),
            "headers": dict(headers or {}),
        }
        if body is not MISSING:
            self._regions["body"] = body
        if extras:
            self._regions.update(extras)
        self._scope: Dict[str, Any] = {}

    @property
    def body(self) -> Any:
        return self._regions.get("body", MISSING)

    @property
    def query(self) -> Dict[str, Any]:
        return self._regions["query"]

    @property
    def params(self) -> Dict[str, Any]:
        return self._regions["params"]

    @property
    def headers(self) -> Dict[str, Any]:
        return self._regions["headers"]

    def region(self, name: str) -> Any:
        """Return the region value, or MISSING when the request has no such region."""
        return self._regions.get(name, MISSING)

    def write_validated(self, namespace: str, data: Dict[str, Any]) -> None:
        """Store validated region data under the given namespace."""
        self._scope[namespace] = dict(data)

    def validated(self, namespace: str = "validated") -> Optional[Dict[str, Any]]:
        """Return validated data stored under namespace, or None if nothing was written."""
        return self._scope.get(namespace)


class PipelineResponse:
    """
    Outbound response with interceptable emit operations.

    A real emission records body, media_type and sets sent. Only one real
    emission is allowed per response object.
    """

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.body: Any = None
        self.media_type: Optional[str] = None
        self.sent = False
        self.headers: Dict[str, str] = {}
        self._emitters: Dict[str, EmitFn] = {
            "send": self._send,
            "json": self._json,
            "send_status": self._send_status,
        }

    def status(self, code: int) -> "PipelineResponse":
        self.status_code = code
        return self

    async def send(self, body: Any = None) -> "PipelineResponse":
        return await self._emitters["send"](body)

    async def json(self, body: Any = None) -> "PipelineResponse":
        return await self._emitters["json"](body)

    async def send_status(self, code: int) -> "PipelineResponse":
        return await self._emitters["send_status"](code)

    def originals(self) -> Dict[str, EmitFn]:
        """Return a snapshot of the emitters currently in effect."""
        return dict(self._emitters)

    def install(self, interceptors: Mapping[str, Interceptor]) -> Callable[[], None]:
        """
        Replace emit operations.

        Args:
            interceptors: Maps emit kind ("send", "json", "send_status") to a
                factory receiving the current emitter and returning its replacement

        Returns:
            Idempotent teardown callable restoring the emitters captured here
        """
        unknown = set(interceptors) - set(EMIT_KINDS)
        if unknown:
            raise KeyError(f"Unknown emit kinds: {sorted(unknown)}")

        captured = self.originals()
        for kind, factory in interceptors.items():
            self._emitters[kind] = factory(captured[kind])

        restored = False

        def teardown() -> None:
            nonlocal restored
            if restored:
                return
            restored = True
            for kind in interceptors:
                self._emitters[kind] = captured[kind]

        return teardown

    def _deliver(self, body: Any, media_type: Optional[str]) -> "PipelineResponse":
        if self.sent:
            raise ResponseAlreadySentError(
                f"Response already sent with status {self.status_code}"
            )
        self.sent = True
        self.body = body
        self.media_type = media_type
        return self

    async def _send(self, body: Any = None) -> "PipelineResponse":
        if body is None:
            media_type = None
        elif isinstance(body, (bytes, bytearray)):
            media_type = "application/octet-stream"
        elif isinstance(body, str):
            media_type = "text/plain"
        else:
            media_type = "application/json"
        return self._deliver(body, media_type)

    async def _json(self, body: Any = None) -> "PipelineResponse":
        return self._deliver(body, "application/json")

    async def _send_status(self, code: int) -> "PipelineResponse":
        self.status_code = code
        return self._deliver(reason_phrase(code), "text/plain")
