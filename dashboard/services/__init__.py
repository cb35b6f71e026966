"""
                        Services Module

Contains the dashboard's service layer. Backend-facing services follow the
hybrid pattern: an in-memory mock in development and the real backend in
production/staging.

Services:
    - api: Restaurant backend client and per-resource wrappers
    - cache: Memory / Redis cache stores
    - query: Keyed query cache with stale times and polling
    - reservations, chat, ordering, subscriptions, analytics: screen logic
    - excel_manager: Thread-safe reservation spreadsheet export
"""

from dashboard.services.excel_manager import ExcelManager

__all__ = ["ExcelManager"]
