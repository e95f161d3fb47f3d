# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Validation result types.

Every adapter call produces exactly one of:
    - Ok(data): validation passed, data is the (possibly coerced) value
    - Err(error): validation failed, error is the adapter-defined payload

Example:
    >>> result = Ok({"username": "first-last"})
    >>> is_ok(result)
    True
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful validation carrying the validated value."""

    data: T


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed validation carrying the adapter's error payload."""

    error: E


ValidationResult = Union[Ok[T], Err[E]]


def is_ok(result: Any) -> bool:
    return isinstance(result, Ok)


def is_err(result: Any) -> bool:
    return isinstance(result, Err)
