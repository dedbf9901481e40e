from __future__ import annotations

from ..models import DashboardSummary
from .base import BaseClient, parse_record


class DashboardClient(BaseClient):
    def get_dashboard(self) -> DashboardSummary:
        data = self._request(
            "GET",
            "/api/dashboard",
            operation="dashboard.get",
            fallback_message="Failed to load dashboard",
        )
        return parse_record(data, DashboardSummary, operation="dashboard.get")

    def get_stats(self) -> DashboardSummary:
        return self.get_dashboard()
