"""
Tests for RentCast client configuration and settings.
"""

import pytest
from pydantic import ValidationError

from property_lookup.clients.base.exceptions import ClientConfigurationError, ClientError
from property_lookup.clients.factory import ClientFactory
from property_lookup.clients.rentcast import (
    RentCastClient,
    RentCastClientConfig,
    RentCastSettings,
)


class TestRentCastClientConfig:
    def test_defaults(self):
        config = RentCastClientConfig(api_key="key")

        assert config.properties_url == "https://api.rentcast.io/v1/properties"
        assert config.result_limit == 1
        assert config.headers == {"X-Api-Key": "key", "Accept": "application/json"}

    def test_validate_requires_api_key(self):
        with pytest.raises(ClientConfigurationError):
            RentCastClientConfig().validate_config()

    def test_validate_rejects_bad_url(self):
        with pytest.raises(ClientConfigurationError):
            RentCastClientConfig(api_key="key", base_url="ftp://example").validate_config()


class TestRentCastSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RENTCAST_API_KEY", " env-key ")
        monkeypatch.setenv("RENTCAST_API_URL", "https://rentcast.test/v1/")
        monkeypatch.setenv("RENTCAST_TIMEOUT", "20")

        config = RentCastSettings(_env_file=None).to_client_config()

        assert config.api_key == "env-key"
        assert config.base_url == "https://rentcast.test/v1"
        assert config.timeout == 20

    def test_missing_key_yields_unconfigured_client(self, monkeypatch):
        monkeypatch.delenv("RENTCAST_API_KEY", raising=False)

        config = RentCastSettings(_env_file=None).to_client_config()

        assert config.has_credentials is False

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            RentCastSettings(_env_file=None, rentcast_timeout=0)


class TestClientFactory:
    def test_builds_and_reuses_client(self):
        factory = ClientFactory()
        config = RentCastClientConfig(api_key="key")

        client = factory.get_client("rentcast", config=config)

        assert isinstance(client, RentCastClient)
        assert factory.get_client("rentcast") is client

    def test_unknown_client(self):
        with pytest.raises(ClientError):
            ClientFactory().get_client("zillow")

    @pytest.mark.asyncio
    async def test_close_all(self):
        factory = ClientFactory()
        client = factory.get_client("rentcast", config=RentCastClientConfig(api_key="key"))
        await client.initialize()

        await factory.close_all()

        assert client.is_initialized is False
