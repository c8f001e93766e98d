"""Shared fixtures for the authorise service tests."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from app.models import AuthorisationCommand, CreditCard, Currency


@pytest.fixture
def credit_card():
    return CreditCard(
        number="4111111111111111",
        expiry=date(2030, 12, 1),
        holder="Jane Doe",
    )


@pytest.fixture
def command(credit_card):
    return AuthorisationCommand(
        transaction_id=uuid4(),
        merchant_id=uuid4(),
        credit_card=credit_card,
        currency=Currency.USD,
        amount=Decimal("100.00"),
    )

