"""
Size budget checks over an analysis result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from chunkgroups.core.config import KB, BudgetConfig
from chunkgroups.core.models import ChunkGroup, SizeTotals


class BudgetSeverity(Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class BudgetViolation:
    """Usage of one budget. Sizes are in bytes."""

    type: str
    actual: int
    budget: int
    exceeded: int
    percentage: float
    severity: BudgetSeverity
    target: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "actual": self.actual,
            "budget": self.budget,
            "exceeded": self.exceeded,
            "percentage": self.percentage,
            "severity": self.severity.value,
        }
        if self.target is not None:
            data["target"] = self.target
        return data


@dataclass
class BudgetReport:
    violations: List[BudgetViolation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not any(v.severity is BudgetSeverity.ERROR for v in self.violations)

    @property
    def summary(self) -> str:
        return "All budgets passed" if self.passed else "Budget exceeded!"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "summary": self.summary,
            "violations": [v.to_dict() for v in self.violations],
        }


def create_violation(
    type: str,
    actual: int,
    budget: int,
    warn_threshold: float = 0.9,
    target: Optional[str] = None,
) -> BudgetViolation:
    """Measure ``actual`` against ``budget`` and grade the usage."""
    percentage = actual / budget
    if percentage >= 1:
        severity = BudgetSeverity.ERROR
    elif percentage >= warn_threshold:
        severity = BudgetSeverity.WARNING
    else:
        severity = BudgetSeverity.OK

    return BudgetViolation(
        type=type,
        actual=actual,
        budget=budget,
        exceeded=max(0, actual - budget),
        percentage=percentage,
        severity=severity,
        target=target,
    )


def limit_to_bytes(limit_kb: float) -> int:
    """Convert a KB budget to bytes; sub-byte limits round up to one byte."""
    return max(1, round(limit_kb * KB))


def check_budgets(groups: List[ChunkGroup], budget: BudgetConfig) -> BudgetReport:
    """
    Check suggested groups against configured size budgets.

    Total, gzip and brotli budgets are always reported when set. Per-chunk
    budgets only report chunks at or above the warning threshold.

    Args:
        groups: Suggested chunk groups
        budget: Budget limits in KB

    Returns:
        Budget report; ``passed`` is False when any budget is exceeded
    """
    report = BudgetReport()
    threshold = budget.warn_threshold
    totals = SizeTotals.sum(
        SizeTotals(group.estimated_size, group.gzip_size, group.brotli_size) for group in groups
    )

    for kind, limit, actual in (
        ("total", budget.total_size, totals.total_size),
        ("gzip", budget.gzip_size, totals.gzip_size),
        ("brotli", budget.brotli_size, totals.brotli_size),
    ):
        if limit is not None:
            report.violations.append(create_violation(kind, actual, limit_to_bytes(limit), threshold))

    if budget.chunk_size is not None:
        chunk_limit = limit_to_bytes(budget.chunk_size)
        for group in groups:
            violation = create_violation("chunk", group.estimated_size, chunk_limit, threshold, group.name)
            if violation.severity is not BudgetSeverity.OK:
                report.violations.append(violation)

    return report
