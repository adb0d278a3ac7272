"""
Conversation History Store

Two flat JSON tables under the data directory:
- conversations.json: "<channel>:<thread_ts>" -> {team, messages[]}
- channel-settings.json: channel id -> team key

Every operation reads and rewrites the whole table. Writes are serialised
with one asyncio.Lock per table so concurrent handlers in this process do
not lose updates.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.models.thread import (
    ConversationMessage,
    ConversationRole,
    ThreadRecord,
    ThreadTable,
    Turn,
    thread_key,
)

logger = logging.getLogger(__name__)

HISTORY_FILE = "conversations.json"
SETTINGS_FILE = "channel-settings.json"
DEFAULT_MAX_TURNS = 20


def _read_json(path: Path) -> dict:
    """Missing file means an empty table; a corrupt file is logged and treated as empty."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {path}, starting from an empty table: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


class HistoryStore:
    """Capped, thread-scoped conversation log plus channel -> team settings."""

    def __init__(self, data_dir: str | Path, max_turns: int = DEFAULT_MAX_TURNS):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.data_dir = Path(data_dir)
        self.max_turns = max_turns
        self.history_path = self.data_dir / HISTORY_FILE
        self.settings_path = self.data_dir / SETTINGS_FILE
        self._history_lock = asyncio.Lock()
        self._settings_lock = asyncio.Lock()

    def initialize(self) -> None:
        """Create the data directory and empty tables if they do not exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.history_path, self.settings_path):
            if not path.exists():
                path.write_text("{}", encoding="utf-8")
        logger.info(f"History store ready at {self.data_dir}")

    # ------------------------------------------------------------------
    # Thread history
    # ------------------------------------------------------------------

    def _load_threads(self) -> ThreadTable:
        table: ThreadTable = {}
        for key, raw in _read_json(self.history_path).items():
            try:
                table[key] = ThreadRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed thread record {key}: {e}")
        return table

    def _save_threads(self, table: ThreadTable) -> None:
        data = {key: record.model_dump(mode="json") for key, record in table.items()}
        _write_json(self.history_path, data)

    def _append_turn(
        self,
        channel_id: str,
        thread_ts: str,
        team: Optional[str],
        role: ConversationRole,
        content: str,
    ) -> ThreadRecord:
        table = self._load_threads()
        key = thread_key(channel_id, thread_ts)
        record = table.setdefault(key, ThreadRecord())
        record.assign_team(team)
        record.append(Turn(role=role, content=content), self.max_turns)
        self._save_threads(table)
        return record

    async def save_turn(
        self,
        channel_id: str,
        thread_ts: str,
        team: Optional[str],
        role: ConversationRole,
        content: str,
    ) -> ThreadRecord:
        """Append a turn to a thread, creating the record on first use."""
        async with self._history_lock:
            return await asyncio.to_thread(
                self._append_turn, channel_id, thread_ts, team, role, content
            )

    async def get_thread(self, channel_id: str, thread_ts: str) -> Optional[ThreadRecord]:
        table = await asyncio.to_thread(self._load_threads)
        return table.get(thread_key(channel_id, thread_ts))

    async def get_history(self, channel_id: str, thread_ts: str) -> List[ConversationMessage]:
        """Stored turns of a thread, oldest first."""
        record = await self.get_thread(channel_id, thread_ts)
        if record is None:
            return []
        return [turn.to_message() for turn in record.messages]

    async def get_thread_team(self, channel_id: str, thread_ts: str) -> Optional[str]:
        record = await self.get_thread(channel_id, thread_ts)
        return record.team if record else None

    # ------------------------------------------------------------------
    # Channel settings
    # ------------------------------------------------------------------

    def _load_settings(self) -> Dict[str, str]:
        return {
            str(channel): str(team)
            for channel, team in _read_json(self.settings_path).items()
            if team
        }

    def _update_settings(self, channel_id: str, team_key: Optional[str]) -> None:
        settings = self._load_settings()
        if team_key:
            settings[channel_id] = team_key
        else:
            settings.pop(channel_id, None)
        _write_json(self.settings_path, settings)

    async def set_channel_team(self, channel_id: str, team_key: str) -> None:
        async with self._settings_lock:
            await asyncio.to_thread(self._update_settings, channel_id, team_key)
        logger.info(f"Channel {channel_id} set to team {team_key}")

    async def get_channel_team_setting(self, channel_id: str) -> Optional[str]:
        settings = await asyncio.to_thread(self._load_settings)
        return settings.get(channel_id)

    async def clear_channel_team(self, channel_id: str) -> None:
        async with self._settings_lock:
            await asyncio.to_thread(self._update_settings, channel_id, None)
        logger.info(f"Channel {channel_id} team setting cleared")
