"""
Conversation state store - checklist persistence per conversation id

SQLite through aiosqlite, WAL mode for concurrent readers. The stored
payload is the checklist exactly as the structured-answer branch produced
it; it is never interpreted here.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import aiosqlite
from loguru import logger
from pydantic import TypeAdapter

from chatter.agents.structured.schemas import ChecklistItem
from chatter.config.settings import settings

_checklist_adapter = TypeAdapter(List[ChecklistItem])

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS conversation_state (
    conversation_id TEXT PRIMARY KEY,
    checklist TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class ConversationStateStore:
    """Reads and writes the checklist associated with a conversation."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Args:
            db_path: Path to SQLite database (defaults to settings.conversation_db_path)
        """
        self.db_path = Path(db_path) if db_path else settings.resolve_path(settings.conversation_db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(str(self.db_path), timeout=10.0)
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute("PRAGMA busy_timeout=5000")
        return conn

    async def init(self) -> None:
        """Create the table if needed (idempotent)."""
        if self._initialized:
            return
        conn = await self._connect()
        try:
            await conn.execute(_CREATE_TABLE)
            await conn.commit()
        finally:
            await conn.close()
        self._initialized = True
        logger.info(f"Conversation state store ready at {self.db_path}")

    async def load(self, conversation_id: str) -> Optional[List[ChecklistItem]]:
        """Stored checklist for `conversation_id`, or None if nothing was saved."""
        await self.init()
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "SELECT checklist FROM conversation_state WHERE conversation_id = ?",
                (conversation_id,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        finally:
            await conn.close()

        if row is None:
            return None
        checklist = _checklist_adapter.validate_json(row[0])
        logger.debug(f"Loaded checklist for {conversation_id}: {len(checklist)} items")
        return checklist

    async def save(self, conversation_id: str, checklist: List[ChecklistItem]) -> None:
        await self.init()
        payload = _checklist_adapter.dump_json(list(checklist)).decode("utf-8")
        now = datetime.now(timezone.utc).isoformat()
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO conversation_state (conversation_id, checklist, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(conversation_id) DO UPDATE SET
                    checklist = excluded.checklist,
                    updated_at = excluded.updated_at
                """,
                (conversation_id, payload, now),
            )
            await conn.commit()
        finally:
            await conn.close()
        logger.debug(f"Saved checklist for {conversation_id}: {len(checklist)} items")

    async def delete(self, conversation_id: str) -> bool:
        """Forget a conversation's checklist. Returns True if a row was removed."""
        await self.init()
        conn = await self._connect()
        try:
            cursor = await conn.execute(
                "DELETE FROM conversation_state WHERE conversation_id = ?",
                (conversation_id,),
            )
            deleted = cursor.rowcount > 0
            await conn.commit()
        finally:
            await conn.close()
        return deleted
