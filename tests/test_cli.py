"""Tests for the admin CLI and the console demo scenarios."""

from unittest.mock import patch

import pytest

import console_demo
import main
from booking_calendar.store.base import StoreError
from booking_calendar.store.memory import InMemoryDocumentStore


@pytest.fixture
def cli_store():
    store = InMemoryDocumentStore()
    with patch("main.create_store", return_value=store):
        yield store


class TestAdminCli:
    def test_block_then_show_day(self, cli_store, capsys):
        assert main.main(["block", "2024-06-01", "2024-06-02"]) == 0
        assert main.main(["day", "2024-06-01"]) == 0

        out = capsys.readouterr().out
        assert "2 day(s) marked blocked." in out
        assert "09:00  taken (closed)" in out

    def test_list_bookings_when_empty(self, cli_store, capsys):
        assert main.main(["bookings"]) == 0
        assert "No bookings." in capsys.readouterr().out

    def test_unknown_booking_status_update_fails(self, cli_store, capsys):
        assert main.main(["status", "missing", "confirmed"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_store_error_exit_code(self, cli_store):
        with patch.object(cli_store, "query", side_effect=StoreError("offline")):
            assert main.main(["bookings"]) == 1


class TestConsoleDemo:
    @pytest.mark.parametrize("scenario", sorted(console_demo.ConsoleSession.SCENARIOS))
    def test_scenarios_run(self, scenario, capsys):
        session = console_demo.ConsoleSession()
        session.run_scenario(scenario)
        out = capsys.readouterr().out
        assert "Bookings:" in out
        assert session.bookings.get_all_bookings()

    def test_unknown_scenario(self, capsys):
        console_demo.ConsoleSession().run_scenario("nope")
        assert "Unknown scenario" in capsys.readouterr().out
