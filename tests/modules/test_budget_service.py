"""
Tests for BudgetService.

Covers:
- Budget payload validation and cleaning
- Newest-budget selection
- Area mappings and adjustments
- Cost-code and area comparisons over stored entries
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from labor_engines.types import ADJUSTMENT_CODE, UNSPECIFIED_CODE, ResidualPolicy
from labor_kernel.exceptions import InvalidInputError, ProjectNotFoundError
from labor_modules.budget.models import BudgetPayload
from labor_modules.budget.service import DEFAULT_BUDGET_FILENAME, BudgetService
from labor_modules.projects.models import ProjectDraft
from labor_modules.projects.service import ProjectService
from labor_modules.repository import SqlLaborRepository


@pytest.fixture
def project(session, clock):
    return ProjectService(session, clock=clock).create_project(ProjectDraft(name="North Campus"))


@pytest.fixture
def budgets(session, clock):
    return BudgetService(session, clock=clock)


def _seed_entries(session, project_id, entries):
    repo = SqlLaborRepository(session)
    upload = repo.create_upload(project_id, "week1.pdf", repo.get_project(project_id).created_at)
    repo.add_entries(project_id, upload.id, entries)
    session.commit()


class TestRecordBudget:
    """Payload validation and cleaning."""

    def test_codes_normalized_and_summed(self, budgets, project, clock):
        record = budgets.record_budget(
            project.id,
            BudgetPayload(
                cost_code_hours={"1200": 8, "01-200": "2", "09170": Decimal("40")},
                filename="estimate.xlsx",
            ),
        )

        assert record.cost_code_hours == {"01-200": Decimal("10"), "09-170": Decimal("40")}
        assert record.filename == "estimate.xlsx"
        assert record.upload_date == clock.now()

    def test_non_numeric_hours_skipped(self, budgets, project):
        record = budgets.record_budget(
            project.id,
            BudgetPayload(cost_code_hours={"09-170": "40", "02-100": "tbd", "05-500": None}),
        )
        assert record.cost_code_hours == {"09-170": Decimal("40")}

    def test_default_filename(self, budgets, project):
        record = budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"09-170": 1}))
        assert record.filename == DEFAULT_BUDGET_FILENAME

    @pytest.mark.parametrize("raw", [{}, None, ["09-170"]])
    def test_missing_cost_code_hours(self, budgets, project, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            budgets.record_budget(project.id, BudgetPayload(cost_code_hours=raw))
        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.field == "cost_code_hours"

    def test_no_payload(self, budgets, project):
        with pytest.raises(InvalidInputError):
            budgets.record_budget(project.id, None)

    def test_no_valid_code(self, budgets, project):
        with pytest.raises(InvalidInputError):
            budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"n/a": 5, "1200": "x"}))
        assert budgets.list_budgets(project.id) == []

    def test_area_data_cleaned(self, budgets, project):
        record = budgets.record_budget(
            project.id,
            BudgetPayload(
                cost_code_hours={"09-170": 30},
                area_hours={" Bldg 1 ": "20", "": 5, "Bldg 2": "n/a", "Bldg 3": 10},
                area_cost_code_hours={"Bldg 1": {"9170": 20, "junk": 1}, "Bldg 9": {"junk": 1}},
                cost_code_names={"9170": "Drywall"},
            ),
        )

        assert record.area_hours == {"Bldg 1": Decimal("20"), "Bldg 3": Decimal("10")}
        assert record.area_cost_code_hours == {"Bldg 1": {"09-170": Decimal("20")}}
        assert record.cost_code_names == {"09-170": "Drywall"}

    def test_unknown_project(self, budgets):
        with pytest.raises(ProjectNotFoundError):
            budgets.record_budget(uuid4(), BudgetPayload(cost_code_hours={"09-170": 1}))

    def test_newest_listed_first(self, budgets, project, clock):
        budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"09-170": 1}, filename="v1"))
        clock.advance(3600)
        budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"09-170": 2}, filename="v2"))

        assert [b.filename for b in budgets.list_budgets(project.id)] == ["v2", "v1"]

    def test_recorded_logged(self, budgets, project, captured_logs):
        budgets.record_budget(
            project.id,
            BudgetPayload(cost_code_hours={"09-170": 1, "n/a": 2}, filename="estimate.xlsx"),
        )

        recorded = [r for r in captured_logs() if r["message"] == "budget_recorded"]
        assert recorded[0]["budget_filename"] == "estimate.xlsx"
        assert recorded[0]["skipped_codes"] == 1
        assert recorded[0]["project_id"] == str(project.id)


class TestAreaConfiguration:

    def test_mappings_trimmed_and_blanks_dropped(self, budgets, project):
        config = budgets.save_area_mappings(
            project.id, {" Building One ": " Bld 1 ", "Building Two": "  ", "": "Bld 3"}
        )
        assert config.mappings == {"Building One": "Bld 1"}
        assert budgets.get_area_config(project.id).mappings == {"Building One": "Bld 1"}

    def test_mappings_must_be_mapping(self, budgets, project):
        with pytest.raises(InvalidInputError):
            budgets.save_area_mappings(project.id, [("a", "b")])

    def test_adjustments_saved(self, budgets, project):
        config = budgets.save_area_adjustments(
            project.id,
            budget_adjustments={"Bld 1": "4.5"},
            actual_adjustments={"Bld 2": -2},
        )

        assert config.budget_adjustments == {"Bld 1": Decimal("4.5")}
        assert config.actual_adjustments == {"Bld 2": Decimal("-2")}

    def test_non_numeric_adjustment(self, budgets, project):
        with pytest.raises(InvalidInputError) as exc_info:
            budgets.save_area_adjustments(project.id, budget_adjustments={"Bld 1": "lots"})
        assert exc_info.value.field == "budget_adjustments"

    def test_unknown_project(self, budgets):
        with pytest.raises(ProjectNotFoundError):
            budgets.get_area_config(uuid4())


class TestCostCodeComparison:

    def test_budget_vs_actual(self, budgets, project, session, entry_factory):
        _seed_entries(
            session,
            project.id,
            [
                entry_factory(hours="6", cost_code="09-170"),
                entry_factory(hours="4", cost_code="09170"),
                entry_factory(hours="3", cost_code="01-200"),
                entry_factory(hours="5", cost_code=None),
            ],
        )
        budgets.record_budget(
            project.id,
            BudgetPayload(cost_code_hours={"9170": 8, "05-500": 6}, cost_code_names={"9170": "Drywall"}),
        )

        comparison = budgets.cost_code_comparison(project.id)
        rows = {r.key: r for r in comparison.rows}

        assert set(rows) == {"01-200", "05-500", "09-170"}
        assert rows["09-170"].actual_hours == Decimal("10")
        assert rows["09-170"].budget_hours == Decimal("8")
        assert rows["09-170"].variance_hours == Decimal("2")
        assert rows["09-170"].variance_percent == Decimal("25")
        assert rows["09-170"].label == "Drywall"
        assert rows["01-200"].variance_percent is None
        assert comparison.actual_hours == Decimal("13")

    def test_uses_newest_budget(self, budgets, project, clock):
        budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"09-170": 1}))
        clock.advance(60)
        budgets.record_budget(project.id, BudgetPayload(cost_code_hours={"02-100": 7}))

        comparison = budgets.cost_code_comparison(project.id)
        assert [(r.key, r.budget_hours) for r in comparison.rows] == [("02-100", Decimal("7"))]

    def test_no_budget(self, budgets, project, session, entry_factory):
        _seed_entries(session, project.id, [entry_factory(hours="2")])

        comparison = budgets.cost_code_comparison(project.id)
        assert comparison.budgeted_hours == Decimal("0")
        assert comparison.rows[0].actual_hours == Decimal("2")

    def test_unknown_project(self, budgets):
        with pytest.raises(ProjectNotFoundError):
            budgets.cost_code_comparison(uuid4())


class TestAreaComparison:

    def test_mapped_adjusted_area(self, budgets, project, session, entry_factory):
        _seed_entries(
            session,
            project.id,
            [
                entry_factory(hours="6", cost_code="09-170", job="Cuy Fal Bld 1", work_date=date(2023, 10, 2)),
                entry_factory(hours="2", cost_code=None, job="cuy fal bld 1", work_date=date(2023, 10, 3)),
            ],
        )
        budgets.record_budget(
            project.id,
            BudgetPayload(
                cost_code_hours={"09-170": 20},
                area_hours={"Building One": 20},
                area_cost_code_hours={"Building One": {"09-170": 16}},
            ),
        )
        budgets.save_area_mappings(project.id, {"Building One": "Cuy Fal Bld 1"})
        budgets.save_area_adjustments(project.id, budget_adjustments={"Cuy Fal Bld 1": 5})

        result = budgets.area_comparison(project.id)

        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.label == "Cuy Fal Bld 1"
        assert row.budget_hours == Decimal("25")
        assert row.actual_hours == Decimal("8")

        breakdown = {e.key: e for e in result.breakdowns["cuy fal bld 1"].entries}
        assert breakdown[ADJUSTMENT_CODE].budget_hours == Decimal("5")
        assert breakdown["09-170"].budget_hours == Decimal("16")
        # 4 unallocated hours land on the last code in sort order
        assert breakdown[UNSPECIFIED_CODE].budget_hours == Decimal("4")
        assert breakdown[UNSPECIFIED_CODE].actual_hours == Decimal("2")
        assert sum(e.budget_hours for e in breakdown.values()) == Decimal("25")

    def test_residual_policy_applied(self, session, clock, project):
        service = BudgetService(session, clock=clock, residual_policy=ResidualPolicy.PROPORTIONAL)
        service.record_budget(
            project.id,
            BudgetPayload(
                cost_code_hours={"02-100": 2, "09-170": 6},
                area_hours={"A": 12},
                area_cost_code_hours={"A": {"02-100": 2, "09-170": 6}},
            ),
        )

        entries = {e.key: e.budget_hours for e in service.area_comparison(project.id).breakdowns["a"].entries}
        assert entries == {"02-100": Decimal("3.00"), "09-170": Decimal("9")}

    def test_no_data(self, budgets, project):
        result = budgets.area_comparison(project.id)
        assert result.rows == ()
        assert result.breakdowns == {}
