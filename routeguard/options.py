# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Validation options passed to middleware factories.

A ValidationConfig is an immutable snapshot. Each middleware closes over the
snapshot it was built with, so reconfiguring means building a new snapshot
with configure() and new middleware from it. Requests already in flight keep
the configuration their middleware was built with.

Example:
    >>> base = ValidationConfig(validator=pydantic_adapter)
    >>> strict = base.configure(require_validator=True)
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Collection, Mapping, Optional

from routeguard import config as settings
from routeguard.adapters import Adapter, pydantic_adapter
from routeguard.handlers import (
    default_bad_request_handler,
    default_bad_response_handler,
    default_missing_schema_handler,
    pydantic_bad_request_handler,
)
from routeguard.pipeline import ErrorHandler


@dataclass(frozen=True)
class ValidationConfig:
    """
    Configuration for request and response validators.

    Attributes:
        validator: Adapter ``(data, schema) -> Ok | Err``. Required before use;
            when None the validators report MissingValidatorError.
        bad_request_handler: Called with BadRequestError. None forwards the
            error to next(error).
        bad_response_handler: Called with BadResponseError. None forwards the
            error to next(error).
        missing_schema_handler: Called with MissingSchemaError when
            require_validator is set. None forwards the error to next(error).
        require_validator: Treat a status code without schema as an error
        global_validators: Status code -> schema map merged under every
            per-route response map (per-route entries win)
        namespace: Where validated request data is written on the request
        exempt_status_codes: Status codes sent without validation
        bad_request_status: Status the default bad request handler answers with
            (carried on BadRequestError.status_code)
    """

    validator: Optional[Adapter] = None
    bad_request_handler: Optional[ErrorHandler] = default_bad_request_handler
    bad_response_handler: Optional[ErrorHandler] = default_bad_response_handler
    missing_schema_handler: Optional[ErrorHandler] = default_missing_schema_handler
    require_validator: bool = field(default_factory=lambda: settings.REQUIRE_VALIDATOR)
    global_validators: Mapping[int, Any] = field(default_factory=dict)
    namespace: str = field(default_factory=lambda: settings.VALIDATED_NAMESPACE)
    exempt_status_codes: Collection[int] = field(
        default_factory=settings.get_exempt_status_codes
    )
    bad_request_status: int = field(default_factory=lambda: settings.BAD_REQUEST_STATUS)

    def __post_init__(self):
        # Freeze the map so a shared snapshot cannot be edited in place
        object.__setattr__(
            self, "global_validators", MappingProxyType(dict(self.global_validators))
        )

    def configure(self, **changes: Any) -> "ValidationConfig":
        """Return a new snapshot with the given options replaced."""
        return replace(self, **changes)

    def is_exempt(self, status_code: int) -> bool:
        return status_code in self.exempt_status_codes

    @classmethod
    def for_pydantic(cls, **changes: Any) -> "ValidationConfig":
        """
        Snapshot validating with pydantic_adapter and reporting request
        errors grouped by field (pydantic_bad_request_handler).

        Example:
            >>> config = ValidationConfig.for_pydantic(require_validator=True)
        """
        changes.setdefault("validator", pydantic_adapter)
        changes.setdefault("bad_request_handler", pydantic_bad_request_handler)
        return cls(**changes)
