#!/usr/bin/env python3
"""
Auto-selection sweep.

Finds requests whose application window has elapsed without the creator
selecting anyone and runs SelectionService.auto_select on each, one unit
of work per request so a failure on one never rolls back another.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database.repositories import RoastRequestRepository
from database.uow import marketplace_uow
from core.config_loader import SelectionConfig
from core.errors import MarketplaceError
from core.selection import SelectionService

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    due: int = 0
    selected: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0


def run_auto_selection_sweep(
    config: SelectionConfig,
    session_factory: Optional[sessionmaker] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> SweepReport:
    """Auto-select every request whose first application is older than the delay."""
    clock = clock or (lambda: datetime.now(timezone.utc))
    start = time.time()
    report = SweepReport()

    cutoff = clock() - timedelta(hours=config.auto_select_delay_hours)
    with marketplace_uow(session_factory) as session:
        due_ids = RoastRequestRepository(session).find_due_for_auto_selection(
            cutoff, limit=config.sweep_batch_size
        )
    report.due = len(due_ids)

    if not due_ids:
        logger.debug(f"No requests due for auto-selection (cutoff {cutoff.isoformat()})")
        return report

    logger.info(f"=== AUTO-SELECTION: {len(due_ids)} request(s) due ===")
    for request_id in due_ids:
        try:
            with marketplace_uow(session_factory) as session:
                result = SelectionService(session, clock=clock).auto_select(request_id, expect_unselected=True)
            report.selected.append(str(request_id))
            logger.info(f"Request {request_id}: auto-selected {result.selected_count} roaster(s)")
        except MarketplaceError as e:
            # Creator acted between the query and the selection
            report.failed.append(str(request_id))
            logger.warning(f"Request {request_id} skipped: {e.kind}: {e.message}")
        except SQLAlchemyError as e:
            report.failed.append(str(request_id))
            logger.error(f"Database error auto-selecting request {request_id}: {e}", exc_info=True)

    report.elapsed_seconds = time.time() - start
    logger.info(
        f"AUTO-SELECTION completed: {len(report.selected)} selected, "
        f"{len(report.failed)} failed in {report.elapsed_seconds:.2f}s"
    )
    return report
