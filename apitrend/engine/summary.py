from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class SummaryError(ValueError):
    pass


@dataclass(frozen=True)
class RunSummary:
    total_requests: int
    failed_requests: int
    total_assertions: int
    failed_assertions: int
    iterations: int = 0
    duration_ms: int = 0

    @property
    def passed_assertions(self) -> int:
        return self.total_assertions - self.failed_assertions

    @property
    def success_rate(self) -> float:
        """Passed assertions as a percentage, one decimal. No assertions counts as 100."""
        if self.total_assertions == 0:
            return 100.0
        return round(self.passed_assertions * 100 / self.total_assertions, 1)

    @property
    def ok(self) -> bool:
        return self.failed_assertions == 0

    @classmethod
    def from_newman(cls, report: Mapping[str, Any]) -> "RunSummary":
        try:
            stats = report["run"]["stats"]
            return cls(
                total_requests=int(stats["requests"]["total"]),
                failed_requests=int(stats["requests"]["failed"]),
                total_assertions=int(stats["assertions"]["total"]),
                failed_assertions=int(stats["assertions"]["failed"]),
                iterations=int(stats.get("iterations", {}).get("total", 0)),
                duration_ms=_duration_ms(report["run"].get("timings") or {}),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SummaryError(f"newman report has no usable run.stats: {e}") from e


def _duration_ms(timings: Mapping[str, Any]) -> int:
    started, completed = timings.get("started"), timings.get("completed")
    if isinstance(started, (int, float)) and isinstance(completed, (int, float)):
        return max(0, int(completed - started))
    return 0
