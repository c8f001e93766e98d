"""
Authorise Service: イベント定義

オーソリ判定の結果として発行される事実(イベント)を定義する。
イベントは過去形で命名し、不変(immutable)として扱う。

version はスキーマのリビジョン番号であり、シーケンス番号ではない。
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_VERSION = 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """すべての結果イベントの基底クラス"""
    model_config = ConfigDict(frozen=True)

    version: int = SCHEMA_VERSION
    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def payload(self) -> dict:
        """エンベロープの data 部分（version は外側に出す）"""
        return self.model_dump(mode="json", exclude={"version"})


class AuthorisationCreated(Event):
    """オーソリが作成された"""
    merchant_id: UUID
    authorisation_id: UUID


class AuthorisationRejected(Event):
    """オーソリが拒否された（カードまたは加盟店が無効）"""
    merchant_id: UUID
    credit_card_number: str
