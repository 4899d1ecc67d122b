"""
Insight memory.

Keeps generated insights across sessions in a single JSON blob, skipping
repeats of the same (type, title) within the dedup window and capping how
many entries are retained. Memory is advisory: read and write failures are
logged and absorbed, never raised.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from budget_oracle.core.config import settings
from budget_oracle.db.storage import KeyValueStore, StorageError
from budget_oracle.models.insight import Insight, OracleMemory, StoredInsight
from budget_oracle.models.records import naive_local

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 50
MAX_CONVERSATIONS = 20
DEDUP_WINDOW_HOURS = 24


class InsightMemory:
    def __init__(
        self,
        store: KeyValueStore,
        key: str = "budgeify-oracle-memory",
        max_insights: int = MAX_INSIGHTS,
        max_conversations: int = MAX_CONVERSATIONS,
        dedup_window_hours: int = DEDUP_WINDOW_HOURS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._key = key
        self._max_insights = max_insights
        self._max_conversations = max_conversations
        self._dedup_window = timedelta(hours=dedup_window_hours)
        self._clock = clock or datetime.now

    @classmethod
    def from_settings(cls, store: KeyValueStore, config=None) -> "InsightMemory":
        config = config or settings
        return cls(
            store,
            key=config.MEMORY_KEY,
            max_insights=config.MAX_INSIGHTS,
            max_conversations=config.MAX_CONVERSATIONS,
            dedup_window_hours=config.DEDUP_WINDOW_HOURS,
        )

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def _load(self) -> OracleMemory:
        try:
            raw = self._store.get(self._key)
        except StorageError as e:
            logger.warning(f"Could not read insight memory, starting empty: {e}")
            return OracleMemory()
        if not raw:
            return OracleMemory()
        try:
            return OracleMemory.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Corrupted insight memory under {self._key!r}, resetting: {e}")
            return OracleMemory()

    def _write(self, memory: OracleMemory) -> None:
        self._store.set(self._key, memory.model_dump_json(by_alias=True))

    def _save(self, memory: OracleMemory) -> None:
        try:
            self._write(memory)
            return
        except StorageError as e:
            logger.warning(f"Insight memory write failed, pruning and retrying: {e}")

        memory.insights = memory.insights[-(self._max_insights // 2):]
        try:
            self._write(memory)
        except StorageError as e:
            logger.warning(f"Insight memory write failed after pruning, dropping update: {e}")

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def _is_recent_duplicate(self, memory: OracleMemory, insight: Insight, cutoff: datetime) -> bool:
        for stored in memory.insights:
            if stored.insight.type != insight.type or stored.insight.title != insight.title:
                continue
            try:
                # blobs written by other clients may carry a UTC offset ("...Z")
                if naive_local(datetime.fromisoformat(stored.shown_at)) > cutoff:
                    return True
            except (TypeError, ValueError):
                continue
        return False

    def store_insights(self, insights: Iterable[Insight]) -> None:
        memory = self._load()
        now = self._clock()
        now_iso = now.isoformat()
        cutoff = now - self._dedup_window

        for insight in insights:
            if self._is_recent_duplicate(memory, insight, cutoff):
                logger.debug(f"Skipping duplicate insight {insight.type}/{insight.title!r}")
                continue
            memory.insights.append(StoredInsight(insight=insight, shown_at=now_iso, dismissed=False))

        if len(memory.insights) > self._max_insights:
            memory.insights = memory.insights[-self._max_insights:]

        memory.last_analysis = now_iso
        self._save(memory)

    def get_recent_insights(self, count: int = 5) -> List[Insight]:
        if count <= 0:
            return []
        visible = [s.insight for s in self._load().insights if not s.dismissed]
        return visible[-count:]

    def get_last_analysis_time(self) -> Optional[str]:
        return self._load().last_analysis

    def get_conversation_count(self) -> int:
        return self._load().conversation_count

    def increment_conversation_count(self) -> int:
        memory = self._load()
        memory.conversation_count = min(memory.conversation_count + 1, self._max_conversations)
        self._save(memory)
        return memory.conversation_count

    def dismiss_insight(self, insight_id: str) -> bool:
        """Mark the most recently stored insight with ``insight_id`` as dismissed."""
        memory = self._load()
        for stored in reversed(memory.insights):
            if stored.insight.id == insight_id and not stored.dismissed:
                stored.dismissed = True
                self._save(memory)
                return True
        return False

    def clear(self) -> None:
        self._save(OracleMemory())
