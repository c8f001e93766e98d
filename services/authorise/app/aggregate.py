"""
Authorise Service: オーソリ集約 (Authorisation)

ワークフローが参照するのは id のみ。
id はファクトリが生成時に採番し、ワークフローからは不透明な値として扱う。
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from .models import CreditCard, Currency


class Authorisation:
    """カードと加盟店の両方の検証を通過した結果として作られるレコード"""

    def __init__(
        self,
        id: UUID,
        merchant_id: UUID,
        credit_card: CreditCard,
        currency: Currency,
        amount: Decimal,
        created_at: datetime,
    ) -> None:
        self.id = id
        self.merchant_id = merchant_id
        self.credit_card = credit_card
        self.currency = currency
        self.amount = amount
        self.created_at = created_at

    def __repr__(self) -> str:
        return f"Authorisation(id={self.id}, merchant_id={self.merchant_id})"
