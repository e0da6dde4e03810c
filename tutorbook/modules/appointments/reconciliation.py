"""Time-based reconciliation of appointments whose date has passed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from tutorbook.core.metrics import RECONCILIATION_FAILURES_TOTAL, record_reconciliation
from tutorbook.modules.appointments.repository import AppointmentsRepository
from tutorbook.shared.utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationResult:
    canceled: int = 0
    completed: int = 0


class AppointmentReconciler:
    """Move expired appointments to their terminal status.

    pending -> canceled and approved -> completed, once per record: rows
    already flagged ``auto_updated`` are never touched again.
    """

    def __init__(self, repository: AppointmentsRepository, *, now_provider=utc_now) -> None:
        self.repository = repository
        self.now_provider = now_provider

    async def reconcile(self, now: datetime | None = None) -> ReconciliationResult:
        """Run one pass; errors propagate to the caller."""
        now = now or self.now_provider()
        canceled, completed = await self.repository.auto_transition_expired(now)
        record_reconciliation(canceled, completed)
        if canceled or completed:
            logger.info(
                "Appointments reconciled: canceled %s pending, completed %s approved",
                canceled,
                completed,
            )
        return ReconciliationResult(canceled=canceled, completed=completed)

    async def reconcile_safely(self, now: datetime | None = None) -> ReconciliationResult | None:
        """Run one pass before a read; a failure is logged and swallowed."""
        try:
            return await self.reconcile(now)
        except Exception:
            RECONCILIATION_FAILURES_TOTAL.inc()
            logger.exception("Appointment reconciliation failed; continuing with stale statuses")
            return None
