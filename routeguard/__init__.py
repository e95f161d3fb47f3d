# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Route Guard - request and response validation middleware.

Validates inbound request regions and outbound response bodies against
user-supplied schemas. Schema checking is delegated to a pluggable adapter,
so any schema library can be used.

Modules:
    - config: Environment-driven defaults
    - options: ValidationConfig snapshots
    - result: Ok / Err validation results
    - adapters: Adapter contract and bundled adapters (pydantic, callables)
    - errors: Validation error taxonomy
    - http: Framework-neutral request/response objects
    - pipeline: Middleware pipeline and continuation/error channel
    - handlers: Default failure handlers
    - request_validator: Request region validation
    - response_validator: Response emission interception
    - route: Route composition
    - fastapi_binding: FastAPI endpoint integration
"""

from routeguard.config import APP_VERSION as __version__

# Results and adapters
from routeguard.result import Err, Ok, ValidationResult, is_err, is_ok
from routeguard.adapters import (
    Adapter,
    callable_adapter,
    is_error_payload,
    pydantic_adapter,
    run_adapter,
)

# Errors
from routeguard.errors import (
    BadRequestError,
    BadResponseError,
    MissingSchemaError,
    MissingValidatorError,
    RequestErrorEntry,
    ResponseAlreadySentError,
    RouteValidationError,
    ValidationErrorKind,
)

# Configuration
from routeguard.options import ValidationConfig
from routeguard.handlers import (
    default_bad_request_handler,
    default_bad_response_handler,
    default_missing_schema_handler,
    group_request_issues,
    pydantic_bad_request_handler,
)

# Pipeline
from routeguard.http import MISSING, PipelineRequest, PipelineResponse
from routeguard.pipeline import Pipeline, compose

# Validators
from routeguard.request_validator import create_request_validator, validate_request
from routeguard.response_validator import (
    EmissionState,
    ResponseInterception,
    create_response_validator,
    validate_response,
)
from routeguard.route import route_validator

__all__ = [
    # Version
    "__version__",

    # Results and adapters
    "Ok",
    "Err",
    "ValidationResult",
    "is_ok",
    "is_err",
    "Adapter",
    "run_adapter",
    "is_error_payload",
    "pydantic_adapter",
    "callable_adapter",

    # Errors
    "ValidationErrorKind",
    "RouteValidationError",
    "MissingValidatorError",
    "MissingSchemaError",
    "BadRequestError",
    "BadResponseError",
    "RequestErrorEntry",
    "ResponseAlreadySentError",

    # Configuration
    "ValidationConfig",
    "default_bad_request_handler",
    "default_bad_response_handler",
    "default_missing_schema_handler",
    "pydantic_bad_request_handler",
    "group_request_issues",

    # Pipeline
    "MISSING",
    "PipelineRequest",
    "PipelineResponse",
    "Pipeline",
    "compose",

    # Validators
    "create_request_validator",
    "validate_request",
    "create_response_validator",
    "validate_response",
    "EmissionState",
    "ResponseInterception",
    "route_validator",
]
