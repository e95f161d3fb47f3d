# -*- coding: utf-8 -*-

"""
Unit tests for route_validator() composition.
"""

import pytest

from routeguard.http import PipelineRequest, PipelineResponse
from routeguard.options import ValidationConfig
from routeguard.pipeline import Pipeline
from routeguard.result import Err, Ok
from routeguard.route import route_validator


def passthrough(value):
    return Ok(value)


def require_name(body):
    if isinstance(body, dict) and "name" in body:
        return Ok(body)
    return Err("name is required")


class TestRouteComposition:
    """Tests for the combined request/response/route stage."""

    @pytest.mark.asyncio
    async def test_validated_route_round_trip(self, callable_config, make_next):
        """
        What it does: Verifies the route sees validated data and its output is validated.
        Purpose: Both validators wrap one handler.
        """
        seen = []

        async def create_item(req, res, next):
            seen.append(req.validated())
            await res.status(201).json({"id": 1, **req.validated()["body"]})

        stage = route_validator(
            create_item,
            request={"body": require_name},
            response={201: passthrough},
            config=callable_config,
        )
        req = PipelineRequest("POST", "/items", body={"name": "widget"})
        res = PipelineResponse()

        await stage(req, res, make_next())

        assert seen == [{"body": {"name": "widget"}}]
        assert res.status_code == 201
        assert res.body == {"id": 1, "name": "widget"}

    @pytest.mark.asyncio
    async def test_sync_route_handler(self, callable_config, make_next):
        """What it does: plain functions work as route handlers."""

        def handler(req, res, next):
            return res.json({"sync": True})

        res = PipelineResponse()
        await route_validator(handler, response={200: passthrough}, config=callable_config)(
            PipelineRequest(), res, make_next()
        )

        assert res.body == {"sync": True}

    @pytest.mark.asyncio
    async def test_rejected_request_is_answered_with_400(self, make_next):
        """
        What it does: Verifies the 400 from the request validator is not re-validated.
        Purpose: No 400 schema is needed even when every status requires one.
        """
        route_calls = []
        config = ValidationConfig(validator=lambda data, schema: schema(data), require_validator=True)

        stage = route_validator(
            lambda req, res, next: route_calls.append(True),
            request={"body": require_name},
            response={200: passthrough},
            config=config,
        )
        res = PipelineResponse()
        await stage(PipelineRequest("POST", "/items", body={}), res, make_next())

        assert route_calls == []
        assert res.status_code == 400
        assert res.body == {"message": "Bad Request"}

    @pytest.mark.asyncio
    async def test_rejected_request_uses_configured_status(self, callable_config, make_next):
        """
        What it does: Verifies bad_request_status reaches the client unvalidated.
        Purpose: A rejection answered with 422 must not turn into 500.
        """
        config = callable_config.configure(bad_request_status=422, require_validator=True)
        stage = route_validator(
            lambda req, res, next: None,
            request={"body": require_name},
            response={200: passthrough},
            config=config,
        )
        res = PipelineResponse()

        await stage(PipelineRequest("POST", "/items", body={}), res, make_next())

        print(f"Verify: status {res.status_code}")
        assert res.status_code == 422
        assert res.body == {"message": "Bad Request"}

    @pytest.mark.asyncio
    async def test_custom_rejection_status_is_not_validated(self, callable_config, make_next):
        """What it does: a custom bad request handler may answer with any status."""

        async def conflict(error, req, res, next):
            await res.status(409).json({"conflict": error.locations})

        config = callable_config.configure(bad_request_handler=conflict, require_validator=True)
        stage = route_validator(
            lambda req, res, next: None,
            request={"body": require_name},
            response={200: passthrough},
            config=config,
        )
        res = PipelineResponse()

        await stage(PipelineRequest("POST", "/items", body={}), res, make_next())

        assert res.status_code == 409
        assert res.body == {"conflict": ["body"]}

    @pytest.mark.asyncio
    async def test_request_only(self, callable_config, make_next):
        """What it does: without response schemas the route emits directly."""

        async def handler(req, res, next):
            await res.status(299).json({"unchecked": True})

        res = PipelineResponse()
        await route_validator(handler, request={"query": passthrough}, config=callable_config)(
            PipelineRequest(), res, make_next()
        )

        assert res.status_code == 299
        assert res.body == {"unchecked": True}


class TestRouteErrors:
    """Tests for exceptions raised by route handlers."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("is_async", [False, True])
    async def test_route_exception_reaches_error_channel(self, callable_config, is_async):
        """
        What it does: Verifies route exceptions end in the error handlers.
        Purpose: The error handler emits through the restored operations.
        """

        def sync_route(req, res, next):
            raise RuntimeError("Error in sync function")

        async def async_route(req, res, next):
            raise RuntimeError("Error in async function")

        handled = []

        async def on_error(error, req, res, next):
            handled.append(error)
            await res.status(500).json({"message": str(error)})

        stage = route_validator(
            async_route if is_async else sync_route,
            response={200: passthrough},
            config=callable_config,
        )
        res = PipelineResponse()
        pristine = res.originals()

        await Pipeline([stage], [on_error]).run(PipelineRequest(), res)

        assert len(handled) == 1
        assert res.originals() == pristine
        assert res.status_code == 500
        assert res.body["message"].startswith("Error in")

    @pytest.mark.asyncio
    async def test_route_exception_without_response_validation(self, callable_config, make_next):
        """What it does: exceptions are forwarded even with no interception armed."""

        def broken(req, res, next):
            raise ValueError("broken")

        next = make_next()
        await route_validator(broken, config=callable_config)(PipelineRequest(), PipelineResponse(), next)

        assert isinstance(next.errors[0], ValueError)

    @pytest.mark.asyncio
    async def test_unconfigured_validator_reports_through_pipeline(self):
        """What it does: a config without adapter ends in a 500 naming the problem."""
        stage = route_validator(lambda req, res, next: None, response={200: passthrough})
        res = PipelineResponse()

        await Pipeline([stage]).run(PipelineRequest(), res)

        assert res.status_code == 500
        assert res.body == {"message": "Validator not set"}
