"""
Insights Router
Builds snapshots, synthesizes insights and exposes the insight memory
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from budget_oracle.db.records import RecordStore
from budget_oracle.models.insight import Insight
from budget_oracle.models.records import MonthSelector, RecordBundle
from budget_oracle.routers.dependencies import get_insight_memory
from budget_oracle.utils.confidence import estimate_confidence
from budget_oracle.utils.insights import generate_insights
from budget_oracle.utils.memory import InsightMemory
from budget_oracle.utils.snapshot import get_financial_snapshot

router = APIRouter()
logger = logging.getLogger(__name__)


def parse_month(year: Optional[int] = None, month: Optional[int] = None) -> Optional[MonthSelector]:
    """Both or neither: a lone year or month is rejected."""
    if year is None and month is None:
        return None
    if year is None or month is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="year and month must be given together",
        )
    try:
        return MonthSelector(year=year, month=month)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/snapshot")
def build_snapshot_endpoint(
    records: RecordBundle,
    selector: Optional[MonthSelector] = Depends(parse_month),
) -> Dict:
    """
    Aggregate view of the posted records, with a confidence estimate per insight type.
    """
    snapshot = get_financial_snapshot(RecordStore.from_bundle(records), month=selector)
    summary = snapshot.to_summary()
    summary["confidence"] = {
        kind: estimate_confidence(snapshot.data_availability, kind).to_dict()
        for kind in ("summary", "trend", "anomaly", "health", "goal")
    }
    return summary


@router.post("/insights", response_model=List[Insight])
def create_insights(
    records: RecordBundle,
    selector: Optional[MonthSelector] = Depends(parse_month),
    store: bool = Query(default=True, description="Persist the generated insights to memory"),
    memory: InsightMemory = Depends(get_insight_memory),
):
    try:
        snapshot = get_financial_snapshot(RecordStore.from_bundle(records), month=selector)
        insights = generate_insights(snapshot)
    except Exception as e:
        logger.error(f"Error generating insights: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate insights")

    logger.info(f"Generated {len(insights)} insights for {snapshot.period[0]}-{snapshot.period[1]:02d}")
    if store:
        memory.store_insights(insights)
    return insights


@router.get("/insights/recent", response_model=List[Insight])
def recent_insights(
    n: int = Query(default=5, ge=1, le=1000),
    memory: InsightMemory = Depends(get_insight_memory),
):
    return memory.get_recent_insights(n)


@router.get("/insights/last-analysis")
def last_analysis(memory: InsightMemory = Depends(get_insight_memory)) -> Dict:
    return {"last_analysis": memory.get_last_analysis_time()}


@router.post("/insights/{insight_id}/dismiss")
def dismiss_insight(insight_id: str, memory: InsightMemory = Depends(get_insight_memory)) -> Dict:
    if not memory.dismiss_insight(insight_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Insight not found")
    return {"dismissed": insight_id}
