# -*- coding: utf-8 -*-

# Route Guard
# Copyright (C) 2025 Route Guard contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Validator adapters: the single integration point for schema libraries.

An adapter is any callable ``(data, schema) -> ValidationResult`` that may also
return an awaitable. The core never inspects schemas itself; it hands them to
the adapter configured in ValidationConfig.validator.

Bundled adapters:
    - pydantic_adapter: schema is anything pydantic.TypeAdapter accepts
    - callable_adapter: schema is itself a validator function
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, Union

from pydantic import TypeAdapter, ValidationError

from routeguard.result import Err, Ok, ValidationResult

Adapter = Callable[[Any, Any], Union[ValidationResult, Awaitable[ValidationResult]]]

# TypeAdapter construction builds a core schema, keep one per schema object
_type_adapters: Dict[Any, TypeAdapter] = {}


async def run_adapter(adapter: Adapter, data: Any, schema: Any) -> ValidationResult:
    """
    Run an adapter and await its result when it is pending.

    Args:
        adapter: Configured adapter function
        data: Value to validate
        schema: Opaque schema value for the adapter

    Returns:
        Ok or Err produced by the adapter

    Raises:
        TypeError: If the adapter returned something other than Ok/Err
    """
    result = adapter(data, schema)
    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, (Ok, Err)):
        raise TypeError(
            f"Adapter must return Ok or Err, got {type(result).__name__}"
        )
    return result


def is_error_payload(error: Any) -> bool:
    """
    Decide whether a raw error payload denotes a failure.

    Empty lists, None, False, "" and 0 are not errors. Anything else
    (non-empty list, True, non-empty string, non-zero number, objects) is.
    """
    if isinstance(error, list) and len(error) == 0:
        return False
    return bool(error)


def _get_type_adapter(schema: Any) -> TypeAdapter:
    try:
        cached = _type_adapters.get(schema)
    except TypeError:
        # Unhashable schema, build on every call
        return TypeAdapter(schema)
    if cached is None:
        cached = TypeAdapter(schema)
        _type_adapters[schema] = cached
    return cached


def pydantic_adapter(data: Any, schema: Any) -> ValidationResult:
    """
    Validate data with pydantic.

    The schema may be a BaseModel subclass or any type annotation
    (int, List[str], Annotated[...]). Validation runs in python mode, so
    pydantic's lax coercion applies ("123" -> 123 for int).

    Returns:
        Ok with the validated value, or Err with ``exc.errors()``
    """
    try:
        return Ok(_get_type_adapter(schema).validate_python(data))
    except ValidationError as exc:
        return Err(exc.errors())


async def callable_adapter(data: Any, schema: Callable[[Any], Any]) -> ValidationResult:
    """
    Treat the schema as a validator function.

    The function receives the data and returns Ok/Err, or a ``(data, error)``
    tuple where error is judged with is_error_payload(). Async functions are
    awaited.
    """
    outcome = schema(data)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    if isinstance(outcome, (Ok, Err)):
        return outcome
    if isinstance(outcome, tuple) and len(outcome) == 2:
        value, error = outcome
        if is_error_payload(error):
            return Err(error)
        return Ok(value)
    raise TypeError(
        f"Validator function must return Ok, Err or (data, error), got {type(outcome).__name__}"
    )
