from functools import lru_cache

from budget_oracle.core.config import settings
from budget_oracle.db.storage import KeyValueStore, get_key_value_store
from budget_oracle.utils.memory import InsightMemory


@lru_cache(maxsize=1)
def get_storage() -> KeyValueStore:
    return get_key_value_store(settings)


def get_insight_memory() -> InsightMemory:
    return InsightMemory.from_settings(get_storage(), settings)
