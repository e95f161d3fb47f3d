# -*- coding: utf-8 -*-

"""
Unit tests for the configuration module.
Verifies loading settings from environment variables.
"""

import importlib
import os
from unittest.mock import patch

import routeguard.config as config_module
from routeguard.options import ValidationConfig


def reload_config():
    importlib.reload(config_module)
    return config_module


class TestRequestSettings:
    """Tests for request validation settings."""

    def test_default_namespace(self):
        """
        What it does: Verifies the validated namespace defaults to "validated".
        Purpose: Validated data never overwrites raw regions by default.
        """
        print("Setup: Removing ROUTEGUARD_VALIDATED_NAMESPACE...")
        env = {k: v for k, v in os.environ.items() if k != "ROUTEGUARD_VALIDATED_NAMESPACE"}

        with patch.dict(os.environ, env, clear=True):
            config = reload_config()
            print(f"Comparing: Expected 'validated', Got '{config.VALIDATED_NAMESPACE}'")
            assert config.VALIDATED_NAMESPACE == "validated"

        reload_config()

    def test_namespace_from_environment(self):
        """What it does: the namespace can be changed through the environment."""
        with patch.dict(os.environ, {"ROUTEGUARD_VALIDATED_NAMESPACE": "checked"}):
            config = reload_config()
            assert config.VALIDATED_NAMESPACE == "checked"
            assert ValidationConfig().namespace == "checked"

        reload_config()


class TestResponseSettings:
    """Tests for response validation settings."""

    def test_require_validator_defaults_to_false(self):
        """What it does: a missing schema passes through unless configured."""
        env = {k: v for k, v in os.environ.items() if k != "ROUTEGUARD_REQUIRE_VALIDATOR"}

        with patch.dict(os.environ, env, clear=True):
            assert reload_config().REQUIRE_VALIDATOR is False

        reload_config()

    def test_require_validator_true_values(self):
        """
        What it does: Verifies accepted spellings of true.
        Purpose: "1", "yes" and "TRUE" all enable the flag.
        """
        for value in ("1", "yes", "TRUE"):
            print(f"Setup: ROUTEGUARD_REQUIRE_VALIDATOR={value}")
            with patch.dict(os.environ, {"ROUTEGUARD_REQUIRE_VALIDATOR": value}):
                assert reload_config().REQUIRE_VALIDATOR is True

        reload_config()

    def test_exempt_range_is_inclusive(self):
        """What it does: both bounds of the exempt range are exempt."""
        with patch.dict(
            os.environ,
            {"ROUTEGUARD_EXEMPT_STATUS_MIN": "502", "ROUTEGUARD_EXEMPT_STATUS_MAX": "504"},
        ):
            codes = reload_config().get_exempt_status_codes()
            assert list(codes) == [502, 503, 504]

        reload_config()

    def test_default_exempt_range(self):
        """What it does: 500 through 511 are exempt by default."""
        env = {
            k: v
            for k, v in os.environ.items()
            if k not in ("ROUTEGUARD_EXEMPT_STATUS_MIN", "ROUTEGUARD_EXEMPT_STATUS_MAX")
        }

        with patch.dict(os.environ, env, clear=True):
            codes = reload_config().get_exempt_status_codes()
            assert 500 in codes
            assert 511 in codes
            assert 512 not in codes
            assert 499 not in codes

        reload_config()


class TestLogLevelConfig:
    """Tests for LOG_LEVEL configuration."""

    def test_log_level_uppercase_conversion(self):
        """
        What it does: Verifies LOG_LEVEL conversion to uppercase.
        Purpose: Ensure that lowercase value is converted to uppercase.
        """
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            config = reload_config()
            print(f"Comparing: Expected 'WARNING', Got '{config.LOG_LEVEL}'")
            assert config.LOG_LEVEL == "WARNING"

        reload_config()
