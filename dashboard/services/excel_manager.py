"""
Excel File Manager with Concurrency Control

Thread-safe spreadsheet export of a restaurant's reservations. One workbook
per restaurant under the data directory; every write happens under a file
lock so a Celery worker and the web process never interleave.

Re-exporting a reservation replaces its row, so the workbook always holds
the latest known state of each reservation.

Version: 1.0.0
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from filelock import FileLock, Timeout

from dashboard.core.config import get_settings

logger = logging.getLogger(__name__)


class ExcelManager:
    """Per-restaurant reservation workbooks, one FileLock per workbook."""

    RESERVATION_COLUMNS = [
        "reservation_id",
        "reservation_date",
        "start_time",
        "end_time",
        "table_id",
        "table_name",
        "customer_name",
        "customer_phone",
        "customer_email",
        "guest_count",
        "status",
        "notes",
        "exported_at",
    ]

    @classmethod
    def data_dir(cls) -> Path:
        return Path(get_settings().data_directory)

    @classmethod
    def reservations_file(cls, restaurant_id: int) -> Path:
        return cls.data_dir() / f"reservations_{restaurant_id}.xlsx"

    @classmethod
    def _lock_file(cls, restaurant_id: int) -> Path:
        return cls.data_dir() / f"reservations_{restaurant_id}.xlsx.lock"

    @classmethod
    def _ensure_data_dir(cls) -> None:
        """Make sure the export directory exists."""
        data_dir = cls.data_dir()
        if not data_dir.exists():
            data_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {data_dir}")

    @classmethod
    def _load_or_create_df(cls, file_path: Path, columns: list) -> pd.DataFrame:
        """Read the workbook, or start an empty sheet when it is missing or unreadable."""
        if file_path.exists():
            try:
                return pd.read_excel(file_path, engine="openpyxl")
            except (ValueError, OSError) as e:
                logger.warning(f"Error reading {file_path}: {e}")
                return pd.DataFrame(columns=columns)
        return pd.DataFrame(columns=columns)

    @classmethod
    def _row(cls, reservation: dict[str, Any], export_time: str) -> dict[str, Any]:
        return {
            "reservation_id": reservation.get("id"),
            "reservation_date": str(reservation.get("reservation_date", "")),
            "start_time": reservation.get("start_time"),
            "end_time": reservation.get("end_time"),
            "table_id": reservation.get("table_id"),
            "table_name": reservation.get("table_name"),
            "customer_name": reservation.get("customer_name"),
            "customer_phone": reservation.get("customer_phone"),
            "customer_email": reservation.get("customer_email"),
            "guest_count": reservation.get("guest_count"),
            "status": reservation.get("status"),
            "notes": reservation.get("notes"),
            "exported_at": export_time,
        }

    @classmethod
    def export_reservations(
        cls,
        restaurant_id: int,
        reservations: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """
        Export reservations to the restaurant's workbook with file locking.

        Args:
            restaurant_id: Restaurant the reservations belong to
            reservations: Reservation records as plain dicts

        Returns:
            dict: ``success``, ``message``, ``count``, ``file`` and ``exported_at``
        """
        cls._ensure_data_dir()

        file_path = cls.reservations_file(restaurant_id)
        result = {
            "success": False,
            "message": "",
            "restaurant_id": restaurant_id,
            "count": 0,
            "file": str(file_path),
            "exported_at": None,
        }

        lock_timeout = get_settings().excel_lock_timeout
        try:
            lock = FileLock(str(cls._lock_file(restaurant_id)), timeout=lock_timeout)

            with lock:
                logger.debug(f"Lock acquired for restaurant #{restaurant_id} export")

                df = cls._load_or_create_df(file_path, cls.RESERVATION_COLUMNS)

                export_time = datetime.now().isoformat()
                new_rows = pd.DataFrame(
                    [cls._row(r, export_time) for r in reservations],
                    columns=cls.RESERVATION_COLUMNS,
                )

                if not df.empty:
                    df = df[~df["reservation_id"].isin(new_rows["reservation_id"])]
                frames = [frame for frame in (df, new_rows) if not frame.empty]
                if frames:
                    df = pd.concat(frames, ignore_index=True)
                else:
                    df = pd.DataFrame(columns=cls.RESERVATION_COLUMNS)
                df = df.sort_values(["reservation_date", "start_time"], kind="stable")
                df.to_excel(str(file_path), index=False, engine="openpyxl")

                logger.info(
                    f"{len(new_rows)} reservations of restaurant #{restaurant_id} exported to Excel"
                )

                result["success"] = True
                result["count"] = len(new_rows)
                result["message"] = f"{len(new_rows)} reservations exported"
                result["exported_at"] = export_time

            logger.debug(f"Lock released for restaurant #{restaurant_id} export")

        except Timeout:
            result["message"] = f"Lock timeout ({lock_timeout}s)"
            logger.error(f"Lock timeout for restaurant #{restaurant_id} export")

        except OSError as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting reservations of restaurant #{restaurant_id}")

        return result

    @classmethod
    def get_reservations(cls, restaurant_id: int) -> list[dict[str, Any]]:
        """Get all exported reservations of a restaurant."""
        file_path = cls.reservations_file(restaurant_id)
        if not file_path.exists():
            return []

        try:
            df = pd.read_excel(file_path, engine="openpyxl")
            return df.to_dict("records")
        except (ValueError, OSError) as e:
            logger.error(f"Error reading {file_path}: {e}")
            return []

    @classmethod
    def clear(cls, restaurant_id: int) -> bool:
        """Delete a restaurant's workbook and its lock file."""
        try:
            for f in (cls.reservations_file(restaurant_id), cls._lock_file(restaurant_id)):
                if f.exists():
                    f.unlink()
            logger.info(f"Export of restaurant #{restaurant_id} cleared")
            return True
        except OSError as e:
            logger.error(f"Error clearing export files: {e}")
            return False
