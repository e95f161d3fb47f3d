# -*- coding: utf-8 -*-

"""
Shared fixtures for Route Guard tests.
"""

import inspect
from typing import Any, Callable, List, Optional

import pytest

from routeguard.adapters import callable_adapter, pydantic_adapter
from routeguard.http import PipelineRequest, PipelineResponse
from routeguard.options import ValidationConfig


class RecordingNext:
    """
    Continuation stand-in.

    next() runs on_proceed, next(error) runs on_error. Every call is recorded.
    """

    def __init__(
        self,
        on_proceed: Optional[Callable[[], Any]] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
    ):
        self.on_proceed = on_proceed
        self.on_error = on_error
        self.calls: List[Optional[Exception]] = []

    async def __call__(self, error: Optional[Exception] = None) -> None:
        self.calls.append(error)
        if error is not None:
            if self.on_error is not None:
                outcome = self.on_error(error)
                if inspect.isawaitable(outcome):
                    await outcome
        elif self.on_proceed is not None:
            outcome = self.on_proceed()
            if inspect.isawaitable(outcome):
                await outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def errors(self) -> List[Exception]:
        return [call for call in self.calls if call is not None]


@pytest.fixture
def make_next():
    """Factory for RecordingNext continuations."""
    return RecordingNext


@pytest.fixture
def req():
    """Plain GET request without body."""
    return PipelineRequest("GET", "/items")


@pytest.fixture
def res():
    """Fresh response with status 200."""
    return PipelineResponse()


@pytest.fixture
def callable_config():
    """Config whose schemas are validator functions."""
    return ValidationConfig(validator=callable_adapter)


@pytest.fixture
def pydantic_config():
    """Config validating with pydantic."""
    return ValidationConfig(validator=pydantic_adapter)
