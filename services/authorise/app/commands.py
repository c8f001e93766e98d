"""
Authorise Service: コマンドハンドラ (オーソリ判定ワークフロー)

1 つのコマンドに対して、必ず以下のいずれか 1 つで終了する:

  ┌──────────────────────────────────────────────────────────────┐
  │  0. amount <= 0       → InvalidAuthorisationCommand を送出     │
  │  1. カード検証                                                 │
  │     └─ 無効 → AuthorisationRejected (加盟店検証は呼ばない)     │
  │  2. 加盟店検証 (await)                                         │
  │     └─ 無効 → AuthorisationRejected                            │
  │  3. ファクトリでオーソリ作成 → AuthorisationCreated            │
  │  *  1〜3 で例外 → イベントなし、ERROR ログのみ (呼び出し元へは │
  │     伝播させない)                                              │
  └──────────────────────────────────────────────────────────────┘
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from .events import AuthorisationCreated, AuthorisationRejected
from .exceptions import InvalidAuthorisationCommand
from .models import AuthorisationCommand
from .ports import (
    AuthorisationFactory,
    CreditCardValidator,
    EventPublisher,
    MerchantValidator,
)

logger = logging.getLogger(__name__)


class AuthorisationOutcome(str, Enum):
    CREATED = "CREATED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthoriseService:
    """オーソリ判定ワークフロー（協調者の参照以外に状態を持たない）"""

    def __init__(
        self,
        publisher: EventPublisher,
        factory: AuthorisationFactory,
        card_validator: CreditCardValidator,
        merchant_validator: MerchantValidator,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.publisher = publisher
        self.factory = factory
        self.card_validator = card_validator
        self.merchant_validator = merchant_validator
        self.clock = clock

    async def authorise(self, command: AuthorisationCommand) -> AuthorisationOutcome:
        """
        オーソリ要求を判定し、結果イベントを 1 つだけ発行する。

        入力不正のみ例外として呼び出し元に返す。
        それ以降の例外はすべてここで封じ込める。
        """
        if command.amount <= 0:
            raise InvalidAuthorisationCommand(
                f"amount must be greater than zero, got {command.amount} "
                f"(transaction_id={command.transaction_id})"
            )

        try:
            if not await self._is_approved(command):
                logger.warning(
                    "[Authorise] Authorisation rejected for merchant with id: %s",
                    command.merchant_id,
                )
                await self.publisher.publish(
                    AuthorisationRejected(
                        merchant_id=command.merchant_id,
                        credit_card_number=command.credit_card.number,
                    )
                )
                return AuthorisationOutcome.REJECTED

            authorisation = self.factory.create(
                command.merchant_id,
                command.credit_card,
                command.currency,
                command.amount,
            )
            await self.publisher.publish(
                AuthorisationCreated(
                    merchant_id=command.merchant_id,
                    authorisation_id=authorisation.id,
                )
            )
            logger.info(
                "[Authorise] Authorisation created with id: %s", authorisation.id
            )
            return AuthorisationOutcome.CREATED
        except Exception:
            logger.exception(
                "[Authorise] Error when trying to authorise command for merchant with id: %s",
                command.merchant_id,
            )
            return AuthorisationOutcome.FAILED

    async def _is_approved(self, command: AuthorisationCommand) -> bool:
        # カードが無効なら加盟店照会は行わない
        if not self.card_validator.is_valid(command.credit_card, self.clock()):
            return False
        return await self.merchant_validator.is_valid(command.merchant_id)
