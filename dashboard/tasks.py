"""
Background jobs: writing and removing reservation workbooks.
"""

import logging
import time

from dashboard.celery_worker import celery_app
from dashboard.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(OSError,),
    retry_backoff=True,
)
def export_reservations_to_excel(self, restaurant_id: int, reservations: list) -> dict:
    """
    Write ``reservations`` (JSON dicts) into the restaurant's workbook.

    The ExcelManager result is returned with the task id and the elapsed
    time added.
    """
    started = time.monotonic()
    result = ExcelManager.export_reservations(restaurant_id, reservations)
    result["task_id"] = self.request.id
    result["processing_time_seconds"] = round(time.monotonic() - started, 3)

    if result["success"]:
        logger.info(
            f"Exported {result.get('count', 0)} reservations of restaurant #{restaurant_id} "
            f"in {result['processing_time_seconds']}s"
        )
    else:
        logger.warning(f"Export of restaurant #{restaurant_id} failed: {result['message']}")
    return result


@celery_app.task
def clear_reservation_export(restaurant_id: int) -> dict:
    removed = ExcelManager.clear(restaurant_id)
    return {
        "success": removed,
        "restaurant_id": restaurant_id,
        "message": "Export cleared" if removed else "Failed to clear export",
    }
