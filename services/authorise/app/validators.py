"""
Authorise Service: バリデータ実装

LocalCreditCardValidator: 桁数・Luhn チェックサム・有効期限によるローカル判定。
  カードネットワークへの照会は行わない。
HttpMerchantValidator: Merchant Service のリードモデルに HTTP で問い合わせる。
"""

import calendar
import logging
from datetime import date, datetime
from uuid import UUID

import httpx

from .models import CreditCard

logger = logging.getLogger(__name__)


def luhn_checksum_ok(digits: str) -> bool:
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def _end_of_month(d: date) -> date:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=last_day)


class LocalCreditCardValidator:
    """
    カードが有効と判定される条件:
      - 番号が 12〜19 桁の数字（空白とハイフンは無視）
      - Luhn チェックサムが一致
      - 名義人が空でない
      - as_of 時点で有効期限切れでない（有効期限月の末日まで有効）
    """

    def is_valid(self, card: CreditCard, as_of: datetime) -> bool:
        digits = card.number.replace(" ", "").replace("-", "")
        # ASCII の 0-9 のみ
        if not (digits.isascii() and digits.isdecimal()) or not 12 <= len(digits) <= 19:
            return False
        if not luhn_checksum_ok(digits):
            return False
        if not card.holder.strip():
            return False
        return as_of.date() <= _end_of_month(card.expiry)


class HttpMerchantValidator:
    """
    GET {base_url}/queries/merchants/{merchant_id}

      200 + {"active": true}  → 有効
      404                     → 無効
      それ以外の HTTP エラー   → 例外 (ワークフロー側で封じ込められる)
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def is_valid(self, merchant_id: UUID) -> bool:
        resp = await self.client.get(f"{self.base_url}/queries/merchants/{merchant_id}")
        if resp.status_code == 404:
            logger.info("[Authorise] Merchant not found: %s", merchant_id)
            return False
        resp.raise_for_status()
        return resp.json().get("active") is True
