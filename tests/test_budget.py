"""Tests for size budget checks."""

from chunkgroups.core.budget import BudgetSeverity, check_budgets, create_violation, limit_to_bytes
from chunkgroups.core.config import BudgetConfig
from chunkgroups.core.models import ChunkGroup

KB = 1024


def _group(name, size, gzip=0, brotli=0):
    return ChunkGroup(name, [name], size, gzip, brotli, "")


class TestCreateViolation:
    def test_severity_levels(self):
        assert create_violation("total", 50, 100).severity is BudgetSeverity.OK
        assert create_violation("total", 90, 100).severity is BudgetSeverity.WARNING
        assert create_violation("total", 100, 100).severity is BudgetSeverity.ERROR

    def test_exceeded_amount(self):
        violation = create_violation("gzip", 150, 100)
        assert violation.exceeded == 50
        assert violation.percentage == 1.5
        assert create_violation("gzip", 10, 100).exceeded == 0


class TestCheckBudgets:
    def test_totals_in_kb(self):
        groups = [_group("a", 60 * KB, 20 * KB, 10 * KB), _group("b", 50 * KB, 10 * KB, 5 * KB)]
        report = check_budgets(groups, BudgetConfig(total_size=100, gzip_size=100))

        assert [v.type for v in report.violations] == ["total", "gzip"]
        assert report.violations[0].actual == 110 * KB
        assert report.violations[0].budget == 100 * KB
        assert report.passed is False
        assert report.summary == "Budget exceeded!"

    def test_chunk_budget_reports_only_large_chunks(self):
        groups = [_group("small", 10 * KB), _group("near", 95 * KB), _group("big", 200 * KB)]
        report = check_budgets(groups, BudgetConfig(chunk_size=100))

        assert [(v.target, v.severity) for v in report.violations] == [
            ("near", BudgetSeverity.WARNING),
            ("big", BudgetSeverity.ERROR),
        ]

    def test_all_passed(self):
        report = check_budgets([_group("a", KB)], BudgetConfig(total_size=100))

        assert report.passed is True
        assert report.summary == "All budgets passed"
        assert report.to_dict()["violations"][0]["severity"] == "ok"

    def test_no_budgets(self):
        assert check_budgets([_group("a", KB)], BudgetConfig()).violations == []


class TestLimitConversion:
    def test_kb_to_bytes(self):
        assert limit_to_bytes(100) == 100 * KB
        assert limit_to_bytes(0.5) == 512

    def test_sub_byte_limit_is_one_byte(self):
        assert limit_to_bytes(0.0005) == 1

    def test_tiny_chunk_budget_reports_errors(self):
        report = check_budgets([_group("g", 10, 5, 4)], BudgetConfig(chunk_size=0.0005))

        assert report.passed is False
        assert report.violations[0].budget == 1
        assert report.violations[0].severity is BudgetSeverity.ERROR
