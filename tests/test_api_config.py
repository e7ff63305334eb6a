"""Tests for indexer callback service configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from ismp_indexer.api.config import Settings


REQUIRED_ENV = {
    "RELAYER_SERVICE_URL": "https://relayer.internal",
    "HYPERBRIDGE_SERVICE_URL": "https://hyperbridge.internal",
    "WORKER_API_KEY": "worker-secret-123",
}


class TestApiConfig:
    def test_config_loads_from_env(self):
        env = {**REQUIRED_ENV, "INDEXER_CHAIN_KIND": "evm", "EVM_CHAIN_ID": "421614"}
        with patch.dict(os.environ, env, clear=False):
            settings = Settings()
            assert settings.RELAYER_SERVICE_URL == "https://relayer.internal"
            assert settings.HYPERBRIDGE_SERVICE_URL == "https://hyperbridge.internal"
            assert settings.WORKER_API_KEY == "worker-secret-123"
            assert settings.EVM_CHAIN_ID == 421614

    def test_config_defaults(self):
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings()
            assert settings.INDEXER_CHAIN_KIND == "evm"
            assert settings.EVM_CHAIN_ID is None
            assert settings.HTTP_TIMEOUT_SECONDS == 30
            assert settings.MAX_RETRIES == 2
            assert settings.SERVICE_API_KEY == ""

    def test_max_retries_bounded(self):
        env = {**REQUIRED_ENV, "MAX_RETRIES": "9"}
        with patch.dict(os.environ, env, clear=False):
            with pytest.raises(ValidationError):
                Settings()
