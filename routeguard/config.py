# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Route Guard Configuration.

Centralized storage for environment-driven defaults.
Loads environment variables and provides typed access to them.

These values only seed ValidationConfig defaults (see options.py). Middleware
never reads them directly, so changing the environment after a validator was
built has no effect on that validator.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _get_bool_env(var_name: str, default: str = "false") -> bool:
    """Read a boolean flag from the environment ("true", "1", "yes")."""
    return os.getenv(var_name, default).lower() in ("true", "1", "yes")


# ==================================================================================================
# Request Validation Settings
# ==================================================================================================

# Attribute namespace on the request where validated data is written.
# Validated regions are grouped under it: request.validated("validated")["body"]
# Never overwrites the raw request regions.
VALIDATED_NAMESPACE: str = os.getenv("ROUTEGUARD_VALIDATED_NAMESPACE", "validated")

# Status code sent by the default bad request handler.
# Any response emitted after the request validator rejected the request is
# sent unvalidated, whatever its status.
BAD_REQUEST_STATUS: int = int(os.getenv("ROUTEGUARD_BAD_REQUEST_STATUS", "400"))

# ==================================================================================================
# Response Validation Settings
# ==================================================================================================

# When true, a response whose status code has no registered schema is an error
# (missing schema handler fires). When false it passes through unchanged.
# Default: false
REQUIRE_VALIDATOR: bool = _get_bool_env("ROUTEGUARD_REQUIRE_VALIDATOR")

# Inclusive range of status codes sent without validation.
# Default: 500-511 (server errors must always be able to reach the client)
EXEMPT_STATUS_MIN: int = int(os.getenv("ROUTEGUARD_EXEMPT_STATUS_MIN", "500"))
EXEMPT_STATUS_MAX: int = int(os.getenv("ROUTEGUARD_EXEMPT_STATUS_MAX", "511"))

# ==================================================================================================
# Logging Settings
# ==================================================================================================

# Log level for the application
# Available levels: TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL
# Default: INFO
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ==================================================================================================
# Application Version
# ==================================================================================================

APP_VERSION: str = "0.4"
APP_TITLE: str = "Route Guard"


def get_exempt_status_codes() -> range:
    """Return the exempt status range as a range object (inclusive of max)."""
    return range(EXEMPT_STATUS_MIN, EXEMPT_STATUS_MAX + 1)
