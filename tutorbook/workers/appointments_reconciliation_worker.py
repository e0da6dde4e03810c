"""Executable worker that reconciles expired appointments and prunes past slots."""

from __future__ import annotations

import asyncio
import logging
import os

from tutorbook.core.database import SessionLocal
from tutorbook.modules.appointments.reconciliation import AppointmentReconciler
from tutorbook.modules.appointments.repository import AppointmentsRepository
from tutorbook.modules.scheduling.repository import SchedulingRepository
from tutorbook.shared.utils import utc_now

logger = logging.getLogger(__name__)


async def run_cycle() -> dict[str, int]:
    """Run a single reconciliation cycle in one DB transaction."""
    async with SessionLocal() as session:
        now = utc_now()
        result = await AppointmentReconciler(AppointmentsRepository(session)).reconcile(now)
        pruned = await SchedulingRepository(session).delete_slots_up_to(None, now)
        await session.commit()
        return {"canceled": result.canceled, "completed": result.completed, "pruned_slots": pruned}


async def main() -> None:
    """Run once or keep polling according to worker mode."""
    logging.basicConfig(level=os.getenv("RECONCILIATION_WORKER_LOG_LEVEL", "INFO"))
    mode = os.getenv("RECONCILIATION_WORKER_MODE", "once").strip().lower()
    poll_seconds = int(os.getenv("RECONCILIATION_WORKER_POLL_SECONDS", "60"))

    if mode == "once":
        stats = await run_cycle()
        logger.info("Appointments reconciliation worker stats: %s", stats)
        return

    while True:
        try:
            stats = await run_cycle()
            logger.info("Appointments reconciliation worker stats: %s", stats)
        except Exception:
            logger.exception("Appointments reconciliation worker cycle failed")
        await asyncio.sleep(poll_seconds)


if __name__ == "__main__":
    asyncio.run(main())
