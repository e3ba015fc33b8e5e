#!/usr/bin/env python3
"""
Roaster endpoints - view roaster statistics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..models.responses import RoasterStatsResponse
from ..utils import safe_float, parse_uuid
from core.roaster_stats import RoasterStatsService

router = APIRouter(prefix="/api/roasters", tags=["roasters"])


@router.get("/{roaster_id}/stats", response_model=RoasterStatsResponse)
def get_roaster_stats(roaster_id: str, db: Session = Depends(get_db)):
    """
    Get live statistics for a roaster.

    Computed from applications and feedback, not from the profile counters.
    """
    stats = RoasterStatsService(db).compute(parse_uuid(roaster_id, "roaster ID"))
    return RoasterStatsResponse(
        success=True,
        stats={
            'roaster_id': str(stats.roaster_id),
            'completed_roasts': stats.completed_roasts,
            'total_earned': safe_float(stats.total_earned),
            'current_active': stats.current_active,
            'completion_rate': stats.completion_rate
        }
    )
