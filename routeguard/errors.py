# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Typed validation errors handed to handlers and to the error channel.

Architecture:
- ValidationErrorKind: Enum of the four failure kinds
- RouteValidationError: Base exception with request context and raw payload
- RequestErrorEntry: One failing request region (location + adapter error)

Errors are never raised past a middleware boundary. They are passed to the
configured handler for their kind, or to next(error) when no handler is set.

Example:
    >>> error = MissingSchemaError(status_code=201, method="GET", url="/items")
    >>> error.message
    'Response of 201 is missing a validation schema at (GET) /items'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationErrorKind(str, Enum):
    """Known validation failure kinds."""

    MISSING_VALIDATOR = "missing validator"
    MISSING_SCHEMA = "missing schema"
    BAD_REQUEST = "bad request"
    BAD_RESPONSE = "bad response"


@dataclass
class RequestErrorEntry:
    """
    A single request region that failed validation.

    Attributes:
        location: Region name (e.g. "body", "query")
        error: Error payload returned by the adapter for that region
    """

    location: str
    error: Any


class RouteValidationError(Exception):
    """
    Base class for all validation errors.

    Attributes:
        kind: ValidationErrorKind of this error
        message: Human-readable description
        status_code: Response status code at the time of failure (if any)
        method: Request method
        url: Request URL
        errors: Raw error payload from the adapter
    """

    kind: ValidationErrorKind

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        errors: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.method = method
        self.url = url
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a plain dict (safe to hand to a JSON encoder)."""
        data: Dict[str, Any] = {"type": self.kind.value, "message": self.message}
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.method is not None:
            data["method"] = self.method
        if self.url is not None:
            data["url"] = self.url
        return data


class MissingValidatorError(RouteValidationError):
    """No adapter configured when a validator middleware ran."""

    kind = ValidationErrorKind.MISSING_VALIDATOR

    def __init__(self, *, method: Optional[str] = None, url: Optional[str] = None):
        super().__init__("Validator not set", method=method, url=url)


class MissingSchemaError(RouteValidationError):
    """No schema registered for the response status code while one is required."""

    kind = ValidationErrorKind.MISSING_SCHEMA

    def __init__(self, *, status_code: int, method: str, url: str):
        super().__init__(
            f"Response of {status_code} is missing a validation schema at ({method}) {url}",
            status_code=status_code,
            method=method,
            url=url,
        )


class BadRequestError(RouteValidationError):
    """
    One or more request regions failed validation.

    status_code is the status the rejection should be answered with
    (ValidationConfig.bad_request_status).
    """

    kind = ValidationErrorKind.BAD_REQUEST

    def __init__(
        self,
        errors: List[RequestErrorEntry],
        *,
        method: str,
        url: str,
        status_code: int = 400,
    ):
        locations = ", ".join(entry.location for entry in errors)
        super().__init__(
            f"Request failed validation at ({method}) {url} in: {locations}",
            status_code=status_code,
            method=method,
            url=url,
            errors=errors,
        )

    @property
    def locations(self) -> List[str]:
        return [entry.location for entry in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["locations"] = self.locations
        return data


class BadResponseError(RouteValidationError):
    """Emitted response body failed validation against its registered schema."""

    kind = ValidationErrorKind.BAD_RESPONSE

    def __init__(self, error: Any, *, status_code: int, method: str, url: str):
        super().__init__(
            f"Response of {status_code} does not match the validation schema at ({method}) {url}",
            status_code=status_code,
            method=method,
            url=url,
            errors=error,
        )


class ResponseAlreadySentError(RuntimeError):
    """A second real emission was attempted on the same response object."""
