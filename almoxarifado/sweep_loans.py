"""
Mark overdue loans from a scheduler (cron, systemd timer).

    python -m almoxarifado.sweep_loans
"""
from almoxarifado.core.database import get_db_context
from almoxarifado.logging_config import get_logger
from almoxarifado.services.loans import sweep_overdue_loans

logger = get_logger("sweep_loans")


def sweep() -> int:
    with get_db_context() as db:
        updated = sweep_overdue_loans(db)
    logger.info(f"[SWEEP] Scheduled sweep finished, {updated} loan(s) now overdue")
    return updated


if __name__ == "__main__":
    sweep()
