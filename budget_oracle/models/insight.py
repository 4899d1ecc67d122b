from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

InsightType = Literal["summary", "trend", "anomaly", "health", "goal", "tip"]
ConfidenceLevel = Literal["high", "medium", "low", "insufficient"]


class _CamelModel(BaseModel):
    # Persisted and served with camelCase keys; snake_case accepted on input.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Insight(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    type: InsightType
    title: str
    content: str
    confidence: ConfidenceLevel
    priority: int = Field(..., ge=1, le=10)  # higher = more important
    created_at: str


class StoredInsight(_CamelModel):
    insight: Insight
    shown_at: str
    dismissed: bool = False


class OracleMemory(_CamelModel):
    insights: List[StoredInsight] = Field(default_factory=list)
    last_analysis: Optional[str] = None
    conversation_count: int = 0
