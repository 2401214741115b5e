"""
Metrics collection and Prometheus-compatible exposition.

Counts resolutions and the diagnostics they raise, and gauges the shape of
the most recent view.
"""

from __future__ import annotations

import time
from collections import defaultdict

from .schemas import AccessView

PREFIX = "range_access_"


class MetricsCollector:
    """Counters and gauges with Prometheus text format export."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._gauges: dict[str, float] = {}
        self._start_time = time.time()

    def inc(self, name: str, value: int = 1) -> None:
        self._counters[f"{PREFIX}{name}"] += value

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[f"{PREFIX}{name}"] = value

    def get(self, name: str) -> int | float:
        full = f"{PREFIX}{name}"
        if full in self._gauges:
            return self._gauges[full]
        return self._counters.get(full, 0)

    def record_resolution(self, view: AccessView) -> None:
        """Fold one resolved view into the counters and gauges."""
        orgs = view.organizations
        self.inc("resolutions_total")
        self.inc("diagnostics_total", len(view.diagnostics))
        for diagnostic in view.diagnostics:
            self.inc(f"diagnostics_{diagnostic.code.value}_total")
        self.set_gauge("organizations_visible", len(orgs))
        self.set_gauge("organizations_full_permission", sum(1 for o in orgs if o.has_full_permission))
        self.set_gauge("organizations_context_only", sum(1 for o in orgs if o.is_context_only))

    def to_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        lines = []
        for name, value in sorted(self._counters.items()):
            lines.append(f"# TYPE {name} counter")
            lines.append(f"{name} {value}")
        for name, value in sorted(self._gauges.items()):
            lines.append(f"# TYPE {name} gauge")
            lines.append(f"{name} {value}")
        uptime = time.time() - self._start_time
        lines.append(f"# TYPE {PREFIX}uptime_seconds gauge")
        lines.append(f"{PREFIX}uptime_seconds {uptime:.1f}")
        return "\n".join(lines) + "\n"
