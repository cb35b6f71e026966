"""
Tests for the spreadsheet export of reservations.
"""

import asyncio

from dashboard.services.excel_manager import ExcelManager
from dashboard.tasks import clear_reservation_export, export_reservations_to_excel


def reservation(id, day="2024-06-05", start="19:00", status="pending"):
    return {
        "id": id,
        "reservation_date": day,
        "start_time": start,
        "end_time": "21:00",
        "table_id": 1,
        "table_name": "Table 1",
        "customer_name": "Ivan Petrov",
        "customer_phone": "+79001112233",
        "customer_email": None,
        "guest_count": 2,
        "status": status,
        "notes": None,
    }


class TestExcelManager:

    def test_export_writes_workbook(self):
        result = ExcelManager.export_reservations(1, [reservation(1), reservation(2, start="12:00")])
        assert result["success"] is True
        assert result["count"] == 2
        assert ExcelManager.reservations_file(1).exists()

        rows = ExcelManager.get_reservations(1)
        assert [row["reservation_id"] for row in rows] == [2, 1]

    def test_reexport_replaces_rows(self):
        ExcelManager.export_reservations(1, [reservation(1), reservation(2)])
        ExcelManager.export_reservations(1, [reservation(1, status="confirmed")])

        rows = {row["reservation_id"]: row for row in ExcelManager.get_reservations(1)}
        assert set(rows) == {1, 2}
        assert rows[1]["status"] == "confirmed"

    def test_restaurants_use_separate_files(self):
        ExcelManager.export_reservations(1, [reservation(1)])
        assert ExcelManager.get_reservations(2) == []

    def test_clear(self):
        ExcelManager.export_reservations(1, [reservation(1)])
        assert ExcelManager.clear(1) is True
        assert not ExcelManager.reservations_file(1).exists()
        assert ExcelManager.get_reservations(1) == []


class TestExportTasks:
    """Tasks run eagerly in development."""

    def test_export_task_result(self):
        result = export_reservations_to_excel.delay(1, [reservation(1)]).get()
        assert result["success"] is True
        assert result["count"] == 1
        assert "processing_time_seconds" in result

    def test_clear_task(self):
        export_reservations_to_excel.delay(1, [reservation(1)]).get()
        assert clear_reservation_export.delay(1).get()["success"] is True


class TestExportRoute:

    def test_export_returns_result_inline(self, manager_client):
        response = manager_client.post("/api/reservations/export")
        assert response.status_code == 200
        body = response.json()
        assert body["data"]["success"] is True
        assert body["data"]["count"] == 5
        assert {row["reservation_id"] for row in ExcelManager.get_reservations(1)} == {1, 2, 3, 4, 5}

    def test_clear_removes_workbook(self, manager_client):
        manager_client.post("/api/reservations/export")
        response = manager_client.delete("/api/reservations/export")
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert not ExcelManager.reservations_file(1).exists()

    def test_export_runs_off_the_event_loop(self, manager_client, monkeypatch):
        """The eager workbook write happens in a worker thread, not in the request loop."""
        seen = {}
        original = ExcelManager.export_reservations.__func__

        def recording(cls, restaurant_id, reservations):
            try:
                asyncio.get_running_loop()
                seen["in_event_loop"] = True
            except RuntimeError:
                seen["in_event_loop"] = False
            return original(cls, restaurant_id, reservations)

        monkeypatch.setattr(ExcelManager, "export_reservations", classmethod(recording))
        response = manager_client.post("/api/reservations/export")
        assert response.status_code == 200
        assert seen == {"in_event_loop": False}
