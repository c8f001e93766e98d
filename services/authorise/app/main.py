"""
Authorise Service: FastAPI エントリーポイント

Redis Pub/Sub で authorisation_commands を購読し、
バックグラウンドでオーソリ判定を実行する。
結果イベントはイベントストアに追記され、authorisation_events に発行される。

┌─────────────┐ authorisation_commands ┌──────────────────┐ authorisation_events
│ 上流サービス │ ────── Redis ────────▶ │ Authorise Service │ ────── Redis ──────▶
└─────────────┘        Pub/Sub          └────────┬─────────┘
                                                 │ HTTP
                                        ┌────────▼─────────┐
                                        │ Merchant Service │
                                        └──────────────────┘
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from uuid import UUID

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from . import event_store
from .commands import AuthoriseService
from .exceptions import InvalidAuthorisationCommand
from .factory import UuidAuthorisationFactory
from .models import AuthorisationCommand
from .publisher import EventStorePublisher, RedisEventPublisher
from .subscriber import run_subscriber
from .validators import HttpMerchantValidator, LocalCreditCardValidator

DATABASE_URL = os.environ["DATABASE_URL"]
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379")
MERCHANT_SERVICE_URL = os.environ["MERCHANT_SERVICE_URL"]
MERCHANT_TIMEOUT_SECONDS = float(os.environ.get("MERCHANT_TIMEOUT_SECONDS", "5.0"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

engine = create_async_engine(DATABASE_URL, echo=False)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
service: AuthoriseService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """協調者を組み立て、コマンドのサブスクライバを開始する。"""
    global service
    redis_pool = aioredis.from_url(REDIS_URL, decode_responses=True)
    http_client = httpx.AsyncClient(timeout=MERCHANT_TIMEOUT_SECONDS)
    service = AuthoriseService(
        publisher=EventStorePublisher(async_session, RedisEventPublisher(redis_pool)),
        factory=UuidAuthorisationFactory(),
        card_validator=LocalCreditCardValidator(),
        merchant_validator=HttpMerchantValidator(http_client, MERCHANT_SERVICE_URL),
    )

    shutdown_event = asyncio.Event()
    subscriber_task = asyncio.create_task(
        run_subscriber(REDIS_URL, service, shutdown_event)
    )
    yield
    shutdown_event.set()
    subscriber_task.cancel()
    try:
        await subscriber_task
    except asyncio.CancelledError:
        pass
    await http_client.aclose()
    await redis_pool.aclose()
    await engine.dispose()


app = FastAPI(title="Authorise Service", lifespan=lifespan)


# ── Command Endpoints ────────────────────────────

@app.post("/commands/authorisations")
async def cmd_authorise(command: AuthorisationCommand):
    """オーソリ要求コマンド（Pub/Sub を経由しない同期実行）"""
    try:
        outcome = await service.authorise(command)
    except InvalidAuthorisationCommand as e:
        raise HTTPException(422, str(e))
    return {"transaction_id": str(command.transaction_id), "outcome": outcome.value}


# ── Event Store ──────────────────────────────────

@app.get("/events")
async def get_all_events():
    """イベントストアの全イベントを返す"""
    async with async_session() as session:
        return await event_store.load_all_events(session)


@app.get("/events/merchants/{merchant_id}")
async def get_merchant_events(merchant_id: UUID):
    """指定加盟店のイベントを返す"""
    async with async_session() as session:
        return await event_store.load_events(session, merchant_id)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "authorise-service"}
