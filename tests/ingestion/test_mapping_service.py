"""Tests for MappingService: persisted header -> logical-field profiles."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from venue_kernel.exceptions import InvalidSourceTypeError, MappingProfileNotFoundError

from venue_ingestion.domain.types import SourceType
from venue_ingestion.services.mapping_service import MappingService


@pytest.fixture
def mapping_service(session, deterministic_clock):
    return MappingService(session, deterministic_clock)


class TestCreateProfile:
    def test_create_and_get(self, mapping_service, location, test_actor_id, captured_logs):
        profile = mapping_service.create_profile(
            location.id,
            " Square POS ",
            "pos",
            {" Sale Date ": "date", "Gross": " total "},
            test_actor_id,
            defaults={"channel": "Dine In"},
        )
        assert profile.name == "Square POS"
        assert profile.source_type is SourceType.SALES
        assert profile.column_map == {"Sale Date": "date", "Gross": "total"}
        assert profile.defaults == {"channel": "Dine In"}

        assert mapping_service.get_profile(profile.profile_id) == profile
        assert any(r["message"] == "mapping_profile_created" for r in captured_logs())

    def test_name_required(self, mapping_service, location, test_actor_id):
        with pytest.raises(ValueError, match="name is required"):
            mapping_service.create_profile(location.id, "  ", "sales", {"Date": "date"}, test_actor_id)

    def test_unknown_logical_field(self, mapping_service, location, test_actor_id):
        with pytest.raises(ValueError, match="Unknown sales field") as exc_info:
            mapping_service.create_profile(
                location.id, "bad", "sales", {"Date": "date", "Amount": "amount"}, test_actor_id,
            )
        assert "amount" in str(exc_info.value)

    def test_unknown_default_field(self, mapping_service, location, test_actor_id):
        with pytest.raises(ValueError):
            mapping_service.create_profile(
                location.id, "bad", "labor", {"Wages": "total_wages"}, test_actor_id,
                defaults={"channel": "x"},
            )

    def test_unknown_source_type(self, mapping_service, location, test_actor_id):
        with pytest.raises(InvalidSourceTypeError):
            mapping_service.create_profile(location.id, "x", "receipts", {}, test_actor_id)

    def test_name_unique_per_source_type(self, mapping_service, location, test_actor_id):
        mapping_service.create_profile(location.id, "export", "sales", {"Date": "date"}, test_actor_id)
        mapping_service.create_profile(location.id, "export", "labor", {"Start": "period_start"}, test_actor_id)
        with pytest.raises(IntegrityError):
            mapping_service.create_profile(location.id, "export", "sales", {"Day": "date"}, test_actor_id)


class TestListAndDelete:
    def test_list_filters_and_orders(self, mapping_service, location, test_actor_id):
        mapping_service.create_profile(location.id, "zeta", "sales", {"Date": "date"}, test_actor_id)
        mapping_service.create_profile(location.id, "alpha", "sales", {"Date": "date"}, test_actor_id)
        mapping_service.create_profile(location.id, "stock", "inventory", {"Item": "item_name"}, test_actor_id)

        assert [p.name for p in mapping_service.list_profiles(location.id)] == ["stock", "alpha", "zeta"]
        assert [p.name for p in mapping_service.list_profiles(location.id, "sales")] == ["alpha", "zeta"]
        assert mapping_service.list_profiles(uuid4()) == []

    def test_delete(self, mapping_service, location, test_actor_id):
        profile = mapping_service.create_profile(location.id, "tmp", "sales", {"Date": "date"}, test_actor_id)
        mapping_service.delete_profile(profile.profile_id)
        with pytest.raises(MappingProfileNotFoundError):
            mapping_service.get_profile(profile.profile_id)
        with pytest.raises(MappingProfileNotFoundError):
            mapping_service.delete_profile(profile.profile_id)
