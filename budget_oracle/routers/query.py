"""
Query Router
Answers free-text questions from the same heuristics the insights use
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from budget_oracle.db.records import RecordStore
from budget_oracle.models.records import MonthSelector, RecordBundle
from budget_oracle.routers.dependencies import get_insight_memory
from budget_oracle.utils.memory import InsightMemory
from budget_oracle.utils.query import answer_query, classify_query
from budget_oracle.utils.snapshot import get_financial_snapshot

router = APIRouter()
logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    records: RecordBundle = Field(default_factory=RecordBundle)
    year: Optional[int] = Field(default=None, ge=1970, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    language: Optional[str] = Field(default=None, pattern="^(en|tr)$")


@router.post("/query")
def ask(request: QueryRequest, memory: InsightMemory = Depends(get_insight_memory)) -> Dict:
    selector = None
    if request.year is not None and request.month is not None:
        selector = MonthSelector(year=request.year, month=request.month)
    elif request.year is not None or request.month is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="year and month must be given together",
        )

    try:
        snapshot = get_financial_snapshot(RecordStore.from_bundle(request.records), month=selector)
        answer = answer_query(request.text, snapshot, language=request.language)
    except Exception as e:
        logger.error(f"Error answering query: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to answer query")

    conversation_count = memory.increment_conversation_count()
    return {
        "topic": classify_query(request.text),
        "answer": answer,
        "conversation_count": conversation_count,
    }
