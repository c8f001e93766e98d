"""
Authorise Service: イベントストア

発行した結果イベントを PostgreSQL に追記する。
オーソリ判定は 1 コマンド 1 イベントで完結するため、
集約バージョンによる楽観的ロックは使わず event_id を主キーとする。

テーブル:
    authorisation_event_store (
        event_id UUID PRIMARY KEY,
        event_type TEXT,
        merchant_id UUID,
        event_data JSONB,
        version INT,        -- スキーマのリビジョン
        created_at TIMESTAMPTZ
    )
"""

import json
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .events import AuthorisationCreated, AuthorisationRejected, Event


async def append_event(session: AsyncSession, event: Event) -> None:
    """イベントをストアに追記する。コミットは呼び出し側で行う。"""
    if not isinstance(event, (AuthorisationCreated, AuthorisationRejected)):
        raise TypeError(f"Unsupported event type: {event.event_type}")

    await session.execute(
        text("""
            INSERT INTO authorisation_event_store
                (event_id, event_type, merchant_id, event_data, version, created_at)
            VALUES
                (:event_id, :evt_type, :merchant_id, :evt_data, :version, :now)
        """),
        {
            "event_id": str(event.event_id),
            "evt_type": event.event_type,
            "merchant_id": str(event.merchant_id),
            "evt_data": json.dumps(event.payload(), default=str),
            "version": event.version,
            "now": datetime.now(timezone.utc),
        },
    )


def _row_to_dict(row) -> dict:
    return {
        "event_id": str(row.event_id),
        "event_type": row.event_type,
        "merchant_id": str(row.merchant_id),
        "event_data": json.loads(row.event_data) if isinstance(row.event_data, str) else row.event_data,
        "version": row.version,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


async def load_events(session: AsyncSession, merchant_id: UUID) -> list[dict]:
    """指定した加盟店の結果イベントを時系列順に読み出す。"""
    result = await session.execute(
        text("""
            SELECT event_id, event_type, merchant_id, event_data, version, created_at
            FROM authorisation_event_store
            WHERE merchant_id = :merchant_id
            ORDER BY created_at ASC
        """),
        {"merchant_id": str(merchant_id)},
    )
    return [_row_to_dict(row) for row in result.fetchall()]


async def load_all_events(session: AsyncSession) -> list[dict]:
    """すべてのイベントを時系列順に返す（デバッグ用）。"""
    result = await session.execute(
        text("""
            SELECT event_id, event_type, merchant_id, event_data, version, created_at
            FROM authorisation_event_store
            ORDER BY created_at ASC
        """),
    )
    return [_row_to_dict(row) for row in result.fetchall()]
