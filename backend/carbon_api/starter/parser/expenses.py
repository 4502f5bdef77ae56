from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from carbon_api.schemas.starter import EntrySubmissionData, ExpenseUsage
from carbon_api.starter.parser.data_validator import DataValidator

EXPENSES_SCHEMA_NAME = "TRANSACTION"

_validator = DataValidator(EXPENSES_SCHEMA_NAME)


def expense_date(data: EntrySubmissionData) -> datetime:
    """Midpoint of the covered period, in whole days (truncated) after the start."""
    start = data.time_period.start
    end = data.time_period.end
    duration_days = int((end - start).total_seconds() / 86400)
    return start + timedelta(days=int(duration_days / 2))


def format_iso_utc(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_single_expense(expense: ExpenseUsage, on_date: datetime) -> dict[str, Any]:
    row: dict[str, Any] = {
        "cost": expense.spend.value,
        "currency": expense.spend.unit,
        "date": format_iso_utc(on_date),
        "vat": "dummy",
    }
    if expense.description is not None:
        row["description"] = expense.description
    if expense.norm_id is not None:
        row["normId"] = expense.norm_id
    return row


def parse_expenses_data(data: EntrySubmissionData) -> Optional[list[dict[str, Any]]]:
    """One transaction row per expense, all dated at the middle of the time period."""
    if not data.expenses:
        return None

    on_date = expense_date(data)
    rows: list[dict[str, Any]] = []
    for expense in data.expenses:
        row = _parse_single_expense(expense, on_date)
        _validator.validate(data, row)
        rows.append(row)
    return rows
