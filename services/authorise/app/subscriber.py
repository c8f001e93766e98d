"""
Authorise Service: Redis Pub/Sub サブスクライバー

authorisation_commands チャネルを購読し、受信したコマンドを
オーソリ判定ワークフローに渡す。

メッセージ形式:
    {"command_type": "Authorise", "data": {AuthorisationCommand のフィールド}}

不正なメッセージは記録して破棄する。1 件の失敗でループを止めない。
"""

import asyncio
import json
import logging

import redis.asyncio as aioredis
from pydantic import ValidationError

from .commands import AuthorisationOutcome, AuthoriseService
from .exceptions import InvalidAuthorisationCommand
from .models import AuthorisationCommand

logger = logging.getLogger(__name__)

COMMANDS_CHANNEL = "authorisation_commands"
AUTHORISE_COMMAND_TYPE = "Authorise"


async def handle_message(
    service: AuthoriseService, raw: str
) -> AuthorisationOutcome | None:
    """
    1 件のメッセージを処理する。破棄した場合は None を返す。

    カード番号を含むため、生のメッセージはログに出さない。
    """
    try:
        envelope = json.loads(raw)
        command_type = envelope.get("command_type")
        if command_type != AUTHORISE_COMMAND_TYPE:
            logger.warning(
                "[Authorise] Dropping message with unknown command_type: %r",
                command_type,
            )
            return None
        command = AuthorisationCommand.model_validate(envelope.get("data", {}))
    except (json.JSONDecodeError, AttributeError, ValidationError):
        logger.warning(
            "[Authorise] Dropping malformed command message (%d chars)", len(raw)
        )
        return None

    try:
        return await service.authorise(command)
    except InvalidAuthorisationCommand as e:
        logger.warning("[Authorise] Dropping invalid command: %s", e)
        return None


async def run_subscriber(
    redis_url: str,
    service: AuthoriseService,
    shutdown_event: asyncio.Event,
) -> None:
    """
    authorisation_commands チャネルを購読し、コマンドを処理する。
    shutdown_event がセットされるまで無限ループで待機する。
    """
    redis_conn = aioredis.from_url(redis_url, decode_responses=True)
    pubsub = redis_conn.pubsub()
    await pubsub.subscribe(COMMANDS_CHANNEL)
    logger.info("[Authorise] Subscribed to %s channel", COMMANDS_CHANNEL)

    try:
        while not shutdown_event.is_set():
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=1.0
            )
            if message and message["type"] == "message":
                try:
                    outcome = await handle_message(service, message["data"])
                    if outcome is not None:
                        logger.info("[Authorise] Processed command: %s", outcome.value)
                except Exception:
                    logger.exception("[Authorise] Failed to process command")
            else:
                await asyncio.sleep(0.1)
    finally:
        await pubsub.unsubscribe(COMMANDS_CHANNEL)
        await pubsub.aclose()
        await redis_conn.aclose()
