"""Event publishing: Redis envelope and event store append."""

import json
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.events import AuthorisationCreated, AuthorisationRejected
from app.publisher import EVENTS_CHANNEL, EventStorePublisher, RedisEventPublisher


def _make_session_factory():
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context), session


@pytest.mark.asyncio
async def test_redis_publisher_sends_envelope():
    redis = AsyncMock()
    merchant_id, authorisation_id = uuid4(), uuid4()
    event = AuthorisationCreated(merchant_id=merchant_id, authorisation_id=authorisation_id)

    await RedisEventPublisher(redis).publish(event)

    redis.publish.assert_awaited_once()
    channel, message = redis.publish.await_args.args
    assert channel == EVENTS_CHANNEL
    body = json.loads(message)
    assert body["event_type"] == "AuthorisationCreated"
    assert body["version"] == 0
    assert body["data"]["merchant_id"] == str(merchant_id)
    assert body["data"]["authorisation_id"] == str(authorisation_id)
    assert body["data"]["event_id"] == str(event.event_id)
    assert "version" not in body["data"]


@pytest.mark.asyncio
async def test_rejected_envelope_carries_card_number():
    redis = AsyncMock()
    event = AuthorisationRejected(merchant_id=uuid4(), credit_card_number="4111111111111111")

    await RedisEventPublisher(redis, channel="custom").publish(event)

    channel, message = redis.publish.await_args.args
    assert channel == "custom"
    body = json.loads(message)
    assert body["event_type"] == "AuthorisationRejected"
    assert body["data"]["credit_card_number"] == "4111111111111111"


@pytest.mark.asyncio
async def test_event_store_publisher_appends_commits_then_publishes():
    session_factory, session = _make_session_factory()
    redis_publisher = AsyncMock()
    event = AuthorisationCreated(merchant_id=uuid4(), authorisation_id=uuid4())

    await EventStorePublisher(session_factory, redis_publisher).publish(event)

    session.execute.assert_awaited_once()
    params = session.execute.await_args.args[1]
    assert params["event_id"] == str(event.event_id)
    assert params["evt_type"] == "AuthorisationCreated"
    assert params["merchant_id"] == str(event.merchant_id)
    assert params["version"] == 0
    session.commit.assert_awaited_once()
    redis_publisher.publish.assert_awaited_once_with(event)


@pytest.mark.asyncio
async def test_event_store_failure_skips_redis_publish():
    session_factory, session = _make_session_factory()
    session.execute.side_effect = RuntimeError("insert failed")
    redis_publisher = AsyncMock()
    event = AuthorisationRejected(merchant_id=uuid4(), credit_card_number="4111111111111111")

    with pytest.raises(RuntimeError):
        await EventStorePublisher(session_factory, redis_publisher).publish(event)

    session.commit.assert_not_awaited()
    redis_publisher.publish.assert_not_awaited()
