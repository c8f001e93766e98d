"""
Authorise Service: コマンドと値オブジェクト

AuthorisationCommand は上流のサービスが生成する不変の入力。
ワークフローに一度だけ渡され、消費される。

amount > 0 の不変条件はここでは検証しない。
ワークフローが業務ロジックの前に検証し、違反時は例外を送出する。
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class Currency(str, Enum):
    """ISO 4217 通貨コード"""
    GBP = "GBP"
    EUR = "EUR"
    USD = "USD"
    JPY = "JPY"
    CHF = "CHF"
    CAD = "CAD"
    AUD = "AUD"


class CreditCard(BaseModel):
    """クレジットカード（値オブジェクト、常にコマンドに所有される）"""
    model_config = ConfigDict(frozen=True)

    number: str
    expiry: date
    holder: str


class AuthorisationCommand(BaseModel):
    """オーソリ要求コマンド"""
    model_config = ConfigDict(frozen=True)

    transaction_id: UUID
    merchant_id: UUID
    credit_card: CreditCard
    currency: Currency
    amount: Decimal
