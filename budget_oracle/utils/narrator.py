"""
Optional prose layer over synthesized insights.

A narrator only rewords; every number it shows must already be in the
insights it receives. ``TemplateNarrator`` is the default and needs nothing
beyond the insights themselves.
"""
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from budget_oracle.models.insight import Insight


class InsightNarrator(ABC):
    @abstractmethod
    def narrate(self, insights: Iterable[Insight], language: Optional[str] = None) -> str:
        ...


class TemplateNarrator(InsightNarrator):
    def __init__(self, separator: str = "\n\n") -> None:
        self.separator = separator

    def narrate(self, insights: Iterable[Insight], language: Optional[str] = None) -> str:
        return self.separator.join(f"{i.title}: {i.content}" for i in insights)
