"""
Authorise Service: 外部ケイパビリティの契約

ワークフローはこれらの狭いインターフェース越しにのみ協調者を呼び出す。
実装は差し替え可能（validators.py / factory.py / publisher.py を参照）。
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from .aggregate import Authorisation
from .events import Event
from .models import CreditCard, Currency


class CreditCardValidator(Protocol):
    """カードの有効性を判定する（同期・副作用なし）"""

    def is_valid(self, card: CreditCard, as_of: datetime) -> bool: ...


class MerchantValidator(Protocol):
    """加盟店の有効性を判定する（外部照会のため非同期）"""

    async def is_valid(self, merchant_id: UUID) -> bool: ...


class AuthorisationFactory(Protocol):
    """検証済みの入力からオーソリを作成する。失敗し得る。"""

    def create(
        self,
        merchant_id: UUID,
        credit_card: CreditCard,
        currency: Currency,
        amount: Decimal,
    ) -> Authorisation: ...


class EventPublisher(Protocol):
    """結果イベントを発行する（fire-and-forget）"""

    async def publish(self, event: Event) -> None: ...
