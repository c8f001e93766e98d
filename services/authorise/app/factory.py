"""
Authorise Service: オーソリファクトリ

uuid4 で id を採番してオーソリを作成する。
永続化はイベントストア側の責務（publisher.EventStorePublisher）。
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from .aggregate import Authorisation
from .models import CreditCard, Currency


class UuidAuthorisationFactory:

    def create(
        self,
        merchant_id: UUID,
        credit_card: CreditCard,
        currency: Currency,
        amount: Decimal,
    ) -> Authorisation:
        return Authorisation(
            id=uuid4(),
            merchant_id=merchant_id,
            credit_card=credit_card,
            currency=currency,
            amount=amount,
            created_at=datetime.now(timezone.utc),
        )
