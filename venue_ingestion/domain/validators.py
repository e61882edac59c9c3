"""
Per-source-type field schemas and row validation.

Each source type declares its logical fields, their kind (date, amount,
time, text) and which are required.  ``validate_row`` converts the mapped
strings into tagged parsed values once and reports one ``RowError`` per
failed check; a row with any error never reaches an upserter.

Architecture: venue_ingestion/domain.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from venue_ingestion.domain.types import RowError, SourceType
from venue_ingestion.domain.values import (
    AmountValue,
    DateValue,
    ParsedValue,
    TextValue,
    TimeValue,
    parse_amount,
    parse_date,
    parse_time,
)


# Width of sales.source_id, which holds the transaction id.
SOURCE_ID_MAX_LENGTH = 100


class FieldKind(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    TIME = "time"
    TEXT = "text"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    required: bool = False
    max_length: int | None = None


SALES_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("date", FieldKind.DATE, required=True),
    FieldSpec("time", FieldKind.TIME),
    FieldSpec("total", FieldKind.AMOUNT, required=True),
    FieldSpec("subtotal", FieldKind.AMOUNT),
    FieldSpec("tax", FieldKind.AMOUNT),
    FieldSpec("discounts", FieldKind.AMOUNT),
    FieldSpec("comps", FieldKind.AMOUNT),
    FieldSpec("payment_method", FieldKind.TEXT),
    FieldSpec("channel", FieldKind.TEXT),
    FieldSpec("server", FieldKind.TEXT),
    FieldSpec("item_name", FieldKind.TEXT),
    FieldSpec("quantity", FieldKind.AMOUNT),
    FieldSpec("transaction_id", FieldKind.TEXT, max_length=SOURCE_ID_MAX_LENGTH),
)

LABOR_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("period_start", FieldKind.DATE, required=True),
    FieldSpec("period_end", FieldKind.DATE, required=True),
    FieldSpec("total_wages", FieldKind.AMOUNT, required=True),
    FieldSpec("superannuation", FieldKind.AMOUNT),
    FieldSpec("tax_withheld", FieldKind.AMOUNT),
    FieldSpec("hours_worked", FieldKind.AMOUNT),
    FieldSpec("hourly_rate", FieldKind.AMOUNT),
    FieldSpec("employee_name", FieldKind.TEXT),
)

INVENTORY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("snapshot_date", FieldKind.DATE, required=True),
    FieldSpec("item_name", FieldKind.TEXT, required=True),
    FieldSpec("quantity", FieldKind.AMOUNT, required=True),
    FieldSpec("unit_cost", FieldKind.AMOUNT, required=True),
    FieldSpec("unit", FieldKind.TEXT),
    FieldSpec("category", FieldKind.TEXT),
    FieldSpec("total_value", FieldKind.AMOUNT),
)

FIELD_SCHEMAS: dict[SourceType, tuple[FieldSpec, ...]] = {
    SourceType.SALES: SALES_FIELDS,
    SourceType.LABOR: LABOR_FIELDS,
    SourceType.INVENTORY: INVENTORY_FIELDS,
}


def logical_fields(source_type: SourceType) -> frozenset[str]:
    return frozenset(spec.name for spec in FIELD_SCHEMAS[source_type])


# -----------------------------------------------------------------------------
# Field-level conversion
# -----------------------------------------------------------------------------


def _convert(spec: FieldSpec, raw: str) -> ParsedValue | RowError:
    if spec.kind is FieldKind.DATE:
        try:
            day, time_of_day = parse_date(raw)
        except ValueError:
            return RowError(
                code="INVALID_DATE",
                message=f"invalid date format for {spec.name}: {raw}",
                field=spec.name,
            )
        return DateValue(raw=raw, value=day, time_of_day=time_of_day)

    if spec.kind is FieldKind.AMOUNT:
        try:
            return AmountValue(raw=raw, value=parse_amount(raw))
        except ValueError:
            return RowError(
                code="INVALID_NUMBER",
                message=f"invalid numeric value for {spec.name}: {raw}",
                field=spec.name,
            )

    if spec.kind is FieldKind.TIME:
        try:
            return TimeValue(raw=raw, value=parse_time(raw))
        except ValueError:
            return RowError(
                code="INVALID_TIME",
                message=f"invalid time format for {spec.name}: {raw}",
                field=spec.name,
            )

    if spec.max_length is not None and len(raw) > spec.max_length:
        return RowError(
            code="VALUE_TOO_LONG",
            message=f"value too long for {spec.name}: {len(raw)} characters, at most {spec.max_length}",
            field=spec.name,
        )
    return TextValue(raw=raw, value=raw)


# -----------------------------------------------------------------------------
# Cross-field rules
# -----------------------------------------------------------------------------


def _labor_period_order(values: dict[str, ParsedValue]) -> list[RowError]:
    start = values.get("period_start")
    end = values.get("period_end")
    if isinstance(start, DateValue) and isinstance(end, DateValue) and end.value < start.value:
        return [
            RowError(
                code="INVALID_PERIOD",
                message=f"period_end {end.value.isoformat()} is before period_start {start.value.isoformat()}",
                field="period_end",
            )
        ]
    return []


CROSS_FIELD_RULES: dict[SourceType, tuple[Callable[[dict[str, ParsedValue]], list[RowError]], ...]] = {
    SourceType.SALES: (),
    SourceType.LABOR: (_labor_period_order,),
    SourceType.INVENTORY: (),
}


def validate_row(
    source_type: SourceType,
    mapped: dict[str, str],
) -> tuple[dict[str, ParsedValue], tuple[RowError, ...]]:
    """
    Convert and validate one mapped row.  Pure function.

    Returns the parsed values (for fields that converted) and every error,
    in field-declaration order.  Missing optional fields are simply absent.
    """
    values: dict[str, ParsedValue] = {}
    errors: list[RowError] = []

    for spec in FIELD_SCHEMAS[source_type]:
        raw = (mapped.get(spec.name) or "").strip()
        if not raw:
            if spec.required:
                errors.append(
                    RowError(
                        code="MISSING_REQUIRED_FIELD",
                        message=f"missing required field: {spec.name}",
                        field=spec.name,
                    )
                )
            continue
        result = _convert(spec, raw)
        if isinstance(result, RowError):
            errors.append(result)
        else:
            values[spec.name] = result

    for rule in CROSS_FIELD_RULES[source_type]:
        errors.extend(rule(values))

    return values, tuple(errors)
