"""Tests for the service catalog."""

from booking_calendar.services.catalog import (
    SERVICE_CATALOG,
    get_all_services,
    get_service_details,
)


def test_all_services_listed():
    services = get_all_services()
    assert len(services) == len(SERVICE_CATALOG)
    assert {"id", "name", "price"} == set(services[0])


def test_service_details_lookup_is_case_insensitive():
    details = get_service_details("  HairCut ")
    assert details["id"] == "haircut"
    assert details["name"] == "Cut"
    assert details["duration_minutes"] == 60


def test_unknown_service():
    assert get_service_details("tattoo") is None
