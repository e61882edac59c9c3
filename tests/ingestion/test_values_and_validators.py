"""Tests for venue_ingestion.domain.values and venue_ingestion.domain.validators."""

from datetime import date, time
from decimal import Decimal

import pytest

from venue_ingestion.domain.types import SourceType
from venue_ingestion.domain.validators import SOURCE_ID_MAX_LENGTH, logical_fields, validate_row
from venue_ingestion.domain.values import (
    AmountValue,
    DateValue,
    TextValue,
    TimeValue,
    parse_amount,
    parse_date,
    parse_time,
)


class TestParseAmount:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("110.00", Decimal("110.00")),
            ("$1,234.50", Decimal("1234.50")),
            (" 42 ", Decimal("42")),
            ("(12.00)", Decimal("-12.00")),
            ("-3.5", Decimal("-3.5")),
            ("€9", Decimal("9")),
        ],
    )
    def test_accepts(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "1.2.3", "NaN", "Infinity", "$"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            parse_amount(raw)


class TestParseDate:
    def test_iso(self):
        assert parse_date("2024-03-05") == (date(2024, 3, 5), None)

    def test_day_first_wins_when_ambiguous(self):
        assert parse_date("03/05/2024") == (date(2024, 5, 3), None)

    def test_month_first_when_day_first_impossible(self):
        assert parse_date("12/31/2024") == (date(2024, 12, 31), None)

    def test_timestamp_carries_time(self):
        assert parse_date("2024-03-05 13:30:00") == (date(2024, 3, 5), time(13, 30))
        assert parse_date("2024-03-05T09:15") == (date(2024, 3, 5), time(9, 15))

    @pytest.mark.parametrize("raw", ["yesterday", "2024-13-01", "31/02/2024"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            parse_date(raw)


class TestParseTime:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("13:30", time(13, 30)),
            ("14:59:59", time(14, 59, 59)),
            ("1:30 PM", time(13, 30)),
            ("7:05am", time(7, 5)),
        ],
    )
    def test_accepts(self, raw, expected):
        assert parse_time(raw) == expected

    def test_rejects(self):
        with pytest.raises(ValueError):
            parse_time("lunchtime")


class TestValidateSalesRow:
    def test_valid_row_produces_tagged_values(self):
        values, errors = validate_row(
            SourceType.SALES,
            {"date": "2024-01-15", "time": "13:30", "total": "$110.00", "channel": "Dine In"},
        )
        assert errors == ()
        assert isinstance(values["date"], DateValue)
        assert isinstance(values["time"], TimeValue)
        assert isinstance(values["total"], AmountValue)
        assert isinstance(values["channel"], TextValue)
        assert values["total"].value == Decimal("110.00")
        assert values["total"].raw == "$110.00"

    def test_invalid_total_names_the_field(self):
        values, errors = validate_row(SourceType.SALES, {"date": "2024-01-15", "total": "abc"})
        assert len(errors) == 1
        assert errors[0].field == "total"
        assert errors[0].code == "INVALID_NUMBER"
        assert "total" in errors[0].message
        assert "total" not in values

    def test_missing_date(self):
        _, errors = validate_row(SourceType.SALES, {"total": "10"})
        assert [(e.code, e.field) for e in errors] == [("MISSING_REQUIRED_FIELD", "date")]
        assert errors[0].message == "missing required field: date"

    def test_every_failure_reported_in_field_order(self):
        _, errors = validate_row(
            SourceType.SALES,
            {"date": "someday", "time": "noonish", "total": "x", "tax": "y"},
        )
        assert [e.field for e in errors] == ["date", "time", "total", "tax"]

    def test_blank_optional_fields_are_absent(self):
        values, errors = validate_row(
            SourceType.SALES, {"date": "2024-01-15", "total": "10", "tax": "  "},
        )
        assert errors == ()
        assert "tax" not in values

    def test_transaction_id_longer_than_source_id_is_rejected(self):
        values, errors = validate_row(
            SourceType.SALES,
            {"date": "2024-01-15", "total": "10", "transaction_id": "T" * (SOURCE_ID_MAX_LENGTH + 1)},
        )
        assert [(e.code, e.field) for e in errors] == [("VALUE_TOO_LONG", "transaction_id")]
        assert "transaction_id" not in values

    def test_transaction_id_at_the_limit_is_kept_whole(self):
        long_id = "T" * SOURCE_ID_MAX_LENGTH
        values, errors = validate_row(
            SourceType.SALES, {"date": "2024-01-15", "total": "10", "transaction_id": long_id},
        )
        assert errors == ()
        assert values["transaction_id"].value == long_id


class TestValidateLaborRow:
    def test_period_end_before_start(self):
        _, errors = validate_row(
            SourceType.LABOR,
            {"period_start": "2024-01-14", "period_end": "2024-01-01", "total_wages": "100"},
        )
        assert [e.code for e in errors] == ["INVALID_PERIOD"]
        assert errors[0].field == "period_end"

    def test_required_fields(self):
        _, errors = validate_row(SourceType.LABOR, {})
        assert {e.field for e in errors} == {"period_start", "period_end", "total_wages"}


class TestValidateInventoryRow:
    def test_required_fields(self):
        _, errors = validate_row(SourceType.INVENTORY, {"snapshot_date": "2024-01-31"})
        assert {e.field for e in errors} == {"item_name", "quantity", "unit_cost"}


class TestLogicalFields:
    def test_sales_fields(self):
        fields = logical_fields(SourceType.SALES)
        assert {"date", "total", "time", "channel", "item_name", "transaction_id"} <= fields

    def test_source_type_aliases(self):
        assert SourceType.parse("POS") is SourceType.SALES
        assert SourceType.parse("payroll") is SourceType.LABOR
        assert SourceType.parse(SourceType.INVENTORY) is SourceType.INVENTORY
