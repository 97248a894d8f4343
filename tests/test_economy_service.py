"""Tests for the result-returning EconomyService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import API_KEY
from discordhub.core.exceptions import ServiceRejectedError, TransportError
from discordhub.core.models import UserExpLevel
from discordhub.core.results import Ok, Rejected, TransportFailed
from discordhub.providers.discordhub.client import DHClient
from discordhub.services.economy_service import EconomyService

USER = 1001
OTHER = 1002
GUILD = 9001


@pytest.fixture()
def service(client):
    return EconomyService(client)


@pytest.mark.asyncio
async def test_success_is_ok(service):
    result = await service.give_points(USER, GUILD, 10)
    assert result == Ok(10)
    assert result.unwrap() == 10


@pytest.mark.asyncio
async def test_rejection_carries_message_and_status(service, client, hub, messages):
    hub.respond("/points/remove", 400, {"message": "insufficient funds"})
    client.errored.subscribe(messages.append)
    result = await service.remove_points(USER, GUILD, 10)
    assert result == Rejected("insufficient funds", 400)
    # The structured API never goes through the broadcast channel.
    assert messages == []
    with pytest.raises(ServiceRejectedError) as exc_info:
        result.unwrap()
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_unreachable_service_is_transport_failure():
    async with DHClient(API_KEY, base_url="http://127.0.0.1:1/api") as dh:
        result = await EconomyService(dh).get_balance(USER, GUILD)
    assert isinstance(result, TransportFailed)
    assert not result.ok
    assert result.value_or_none() is None
    with pytest.raises(TransportError):
        result.unwrap()


@pytest.mark.asyncio
async def test_timeout_is_transport_failure():
    provider = MagicMock()
    provider.request = AsyncMock(side_effect=asyncio.TimeoutError())
    result = await EconomyService(provider).give_exp(USER, GUILD, 5)
    assert isinstance(result, TransportFailed)
    assert result.message == "TimeoutError"


@pytest.mark.asyncio
async def test_operations_map_to_named_requests():
    provider = MagicMock()
    provider.request = AsyncMock(return_value=Ok(7))
    svc = EconomyService(provider)
    await svc.give_item(USER, GUILD, 3)
    await svc.remove_exp(USER, GUILD, 4)
    assert provider.request.await_args_list[0].args == ("give_item",)
    assert provider.request.await_args_list[0].kwargs == {
        "user_id": USER,
        "server_id": GUILD,
        "item_id": 3,
    }
    assert provider.request.await_args_list[1].args == ("remove_exp",)


@pytest.mark.asyncio
async def test_give_item_refusal_is_ok_false(service, hub):
    hub.item_message = "Not enough stock"
    assert await service.give_item(USER, GUILD, 3) == Ok(False)


@pytest.mark.asyncio
async def test_exp_info_is_ok_record(service, hub):
    hub.exp[(USER, GUILD)] = 342
    result = await service.get_exp_info(USER, GUILD)
    assert result == Ok(UserExpLevel(level=3, total_exp=342, exp_percent=42))


# ---------------------------------------------------------------------------
# Exchange
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_exchange_success(service, hub):
    hub.points[(USER, GUILD)] = 50
    outcome = await service.exchange_points(USER, OTHER, GUILD, 20)
    assert outcome.ok
    assert not outcome.partial
    assert outcome.removed == Ok(30)
    assert outcome.given == Ok(20)
    assert hub.paths == ["/points/remove", "/points/add"]


@pytest.mark.asyncio
async def test_exchange_stops_when_removal_is_rejected(service, hub):
    outcome = await service.exchange_points(USER, OTHER, GUILD, 20)
    assert outcome.removed == Rejected("insufficient funds", 400)
    assert outcome.given is None
    assert not outcome.ok
    assert not outcome.partial
    assert hub.paths == ["/points/remove"]
    assert (OTHER, GUILD) not in hub.points


@pytest.mark.asyncio
async def test_exchange_reports_partial_transfer(service, hub):
    hub.points[(USER, GUILD)] = 50
    hub.respond("/points/add", 500, {"message": "Database error"})
    outcome = await service.exchange_points(USER, OTHER, GUILD, 20)
    assert outcome.partial
    assert outcome.given == Rejected("Database error", 500)
    # No compensating call is made.
    assert hub.paths == ["/points/remove", "/points/add"]
    assert hub.points[(USER, GUILD)] == 30
