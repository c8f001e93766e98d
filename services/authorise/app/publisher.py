"""
Authorise Service: イベント発行

RedisEventPublisher: authorisation_events チャネルに JSON を発行する。
EventStorePublisher: イベントストアに追記・コミットしてから Redis に発行する。

注意: Redis Pub/Sub は fire-and-forget 方式。
購読者がダウンしている間のイベントは失われる（イベントストアには残る）。
"""

import json

import redis.asyncio as aioredis
from sqlalchemy.orm import sessionmaker

from . import event_store
from .events import Event

EVENTS_CHANNEL = "authorisation_events"


def to_message(event: Event) -> str:
    return json.dumps(
        {
            "event_type": event.event_type,
            "version": event.version,
            "data": event.payload(),
        },
        default=str,
    )


class RedisEventPublisher:

    def __init__(self, redis: aioredis.Redis, channel: str = EVENTS_CHANNEL):
        self.redis = redis
        self.channel = channel

    async def publish(self, event: Event) -> None:
        await self.redis.publish(self.channel, to_message(event))


class EventStorePublisher:

    def __init__(self, async_session_factory: sessionmaker, redis_publisher: RedisEventPublisher):
        self.async_session_factory = async_session_factory
        self.redis_publisher = redis_publisher

    async def publish(self, event: Event) -> None:
        # 1. イベントストアに追記
        async with self.async_session_factory() as session:
            await event_store.append_event(session, event)
            await session.commit()

        # 2. Redis Pub/Sub で他サービスへ通知
        await self.redis_publisher.publish(event)
