"""
Tests for the RentCast API client.
"""

import asyncio
import json

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from property_lookup.clients.base.exceptions import (
    ClientConfigurationError,
    ClientConnectionError,
    ClientTimeoutError,
    PropertyNotFoundError,
    RentCastAPIError,
)
from property_lookup.clients.rentcast import RentCastClient, RentCastClientConfig


def _response(status=200, payload=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)
    return response


def _session(response=None, error=None):
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if error is not None:
        session.get.return_value.__aenter__.side_effect = error
    else:
        session.get.return_value.__aenter__.return_value = response
    return session


@pytest.fixture
def config():
    return RentCastClientConfig(api_key="test-rentcast-key")


@pytest.fixture
def rentcast_client(config):
    client = RentCastClient(config)
    client._initialized = True
    return client


class TestRentCastClient:
    @pytest.mark.asyncio
    async def test_fetch_returns_first_record(self, rentcast_client, rentcast_record):
        other = dict(rentcast_record, id="other")
        session = _session(_response(payload=[rentcast_record, other]))
        rentcast_client._session = session

        result = await rentcast_client.fetch_by_address("11760 Baltimore Ave, Beltsville, MD 20705")

        assert result["id"] == rentcast_record["id"]
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.rentcast.io/v1/properties"
        assert kwargs["headers"]["X-Api-Key"] == "test-rentcast-key"
        assert kwargs["params"] == {
            "address": "11760 Baltimore Ave, Beltsville, MD 20705",
            "limit": 1,
        }

    @pytest.mark.asyncio
    async def test_address_is_sent_unnormalized(self, rentcast_client, rentcast_record):
        session = _session(_response(payload=[rentcast_record]))
        rentcast_client._session = session

        await rentcast_client.fetch_by_address("  11760 BALTIMORE Ave ")

        assert session.get.call_args.kwargs["params"]["address"] == "  11760 BALTIMORE Ave "

    @pytest.mark.asyncio
    async def test_single_object_response(self, rentcast_client, rentcast_record):
        rentcast_client._session = _session(_response(payload=rentcast_record))

        result = await rentcast_client.fetch_by_address("11760 Baltimore Ave")

        assert result["formattedAddress"] == rentcast_record["formattedAddress"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [[], {}, None, {"message": "No data found"}, [{"message": "No data found"}], ["x", 3]],
    )
    async def test_empty_result_is_not_found(self, rentcast_client, payload):
        rentcast_client._session = _session(_response(payload=payload))

        with pytest.raises(PropertyNotFoundError) as exc_info:
            await rentcast_client.fetch_by_address("1 Nowhere Rd")

        assert exc_info.value.kind == "not_found"

    @pytest.mark.asyncio
    async def test_non_record_items_are_skipped(self, rentcast_client, rentcast_record):
        payload = [{"message": "partial match"}, rentcast_record]
        rentcast_client._session = _session(_response(payload=payload))

        result = await rentcast_client.fetch_by_address("11760 Baltimore Ave")

        assert result["id"] == rentcast_record["id"]

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_any_request(self):
        client = RentCastClient(RentCastClientConfig(api_key="  "))
        session = _session(_response(payload=[]))
        client._session = session
        client._initialized = True

        with pytest.raises(ClientConfigurationError):
            await client.fetch_by_address("123 Main St")

        session.get.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 404, 429, 500])
    async def test_http_errors_carry_status(self, rentcast_client, status_code):
        rentcast_client._session = _session(_response(status=status_code, text="error"))

        with pytest.raises(RentCastAPIError) as exc_info:
            await rentcast_client.fetch_by_address("123 Main St")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.kind == "upstream"

    @pytest.mark.asyncio
    async def test_invalid_json(self, rentcast_client):
        response = _response()
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "", 0))
        rentcast_client._session = _session(response)

        with pytest.raises(RentCastAPIError, match="Invalid JSON"):
            await rentcast_client.fetch_by_address("123 Main St")

    @pytest.mark.asyncio
    async def test_timeout(self, rentcast_client):
        rentcast_client._session = _session(error=asyncio.TimeoutError())

        with pytest.raises(ClientTimeoutError) as exc_info:
            await rentcast_client.fetch_by_address("123 Main St")

        assert exc_info.value.kind == "upstream"
        assert exc_info.value.timeout_duration is not None

    @pytest.mark.asyncio
    async def test_connection_error(self, rentcast_client):
        rentcast_client._session = _session(error=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(ClientConnectionError):
            await rentcast_client.fetch_by_address("123 Main St")

    @pytest.mark.asyncio
    async def test_close_releases_session(self, rentcast_client):
        session = _session()
        rentcast_client._session = session

        await rentcast_client.close()

        session.close.assert_awaited_once()
        assert rentcast_client.is_initialized is False

    @pytest.mark.asyncio
    async def test_health_check_spends_no_request(self, rentcast_client):
        session = _session()
        rentcast_client._session = session

        health = await rentcast_client.health_check()

        assert health["status"] == "healthy"
        assert health["api_key_configured"] is True
        assert rentcast_client.last_health_check is not None
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_health_check_reports_missing_key(self):
        health = await RentCastClient(RentCastClientConfig()).health_check()

        assert health["status"] == "misconfigured"
        assert health["api_key_configured"] is False
