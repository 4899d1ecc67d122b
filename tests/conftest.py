from datetime import datetime

import pytest

from budget_oracle.db.storage import InMemoryKeyValueStore
from budget_oracle.utils.memory import InsightMemory

NOW = datetime(2026, 10, 15, 12, 0, 0)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def memory(kv_store):
    return InsightMemory(kv_store, key="test-memory", clock=lambda: NOW)
