"""Integration tests for chief-status: rendered output and refresh lifecycle tests."""

import json
from datetime import date, timedelta
from unittest.mock import patch

import pytest

import chief_status.tracker as tracker
from chief_status.api import FetchCache
from chief_status.config import Config
from chief_status.display import (
    build_compact_display,
    build_error_panel,
    build_header,
    build_not_found_panel,
    build_progress_bar,
    build_status_table,
)
from chief_status.engine import resolve_train_status
from chief_status.notifications import NotificationState, check_and_notify, send_notification

# Shared helpers from conftest (imported explicitly for use in test code)
from conftest import (
    FIXED_NOW,
    load_fixture,
    make_status,
    make_timetable_html,
    minutes_from_now,
    render_to_text,
    sample_westbound_rows,
)


# =============================================================================
# TestRenderedStatusTable
# =============================================================================


class TestRenderedStatusTable:
    def test_title_names_train_and_route(self):
        text = render_to_text(build_status_table("3", [make_status()], FIXED_NOW), width=160)

        assert "Southwest Chief #3" in text
        assert "westbound" in text
        assert "Chicago → Los Angeles" in text

    def test_row_shows_location_next_station_and_eta(self):
        status = make_status(estimated_arrival=minutes_from_now(51))
        text = render_to_text(build_status_table("3", [status], FIXED_NOW), width=160)

        assert "Naperville, IL" in text
        assert "Mendota" in text
        assert "4:51 PM" in text  # CDT
        assert "CDT" in text
        assert "▶" in text

    def test_eastbound_title(self):
        status = make_status(train_id="4", direction="eastbound", next_station="Princeton")
        text = render_to_text(build_status_table("4", [status], FIXED_NOW), width=160)

        assert "Southwest Chief #4" in text
        assert "Los Angeles → Chicago" in text

    def test_delayed_status_text(self):
        status = make_status(status="Delayed 7 min", delay_minutes=7)
        text = render_to_text(build_status_table("3", [status], FIXED_NOW), width=160)

        assert "Delayed 7 min" in text
        assert "●" in text

    def test_completed_run_marked_arrived(self):
        status = make_status(
            train_id="4", direction="eastbound", next_station="Chicago, IL",
            current_location="Chicago, IL", departed=True, status="Delayed 55 min",
            delay_minutes=55,
        )
        text = render_to_text(build_status_table("4", [status], FIXED_NOW), width=160)

        assert "(arrived)" in text
        assert "✓" in text

    def test_unresolved_row(self):
        status = make_status(next_station=None, current_location=None, status="Unknown")
        text = render_to_text(build_status_table("3", [status], FIXED_NOW), width=160)

        assert "Unresolved" in text

    def test_two_instances_one_marker(self):
        older = make_status(
            next_station="Albuquerque", current_location="Lamy, NM",
            timezone_name="MDT", instance_id=1, is_next=False,
        )
        newer = make_status(instance_id=2, is_next=True)
        text = render_to_text(build_status_table("3", [older, newer], FIXED_NOW), width=160)

        assert "Albuquerque" in text
        assert "Mendota" in text
        assert text.count("▶") == 1


# =============================================================================
# TestRenderedHeader
# =============================================================================


class TestRenderedHeader:
    def test_title_and_source(self):
        text = render_to_text(build_header([make_status()], "transit", now=FIXED_NOW), width=160)

        assert "Chief Status" in text
        assert "source: transit" in text

    def test_watch_now_inside_window(self):
        status = make_status(estimated_arrival=minutes_from_now(10))
        text = render_to_text(build_header([status], "timetable", now=FIXED_NOW), width=160)

        assert "Watch now:" in text
        assert "Mendota" in text
        assert "youtube.com/embed/UE63jwH4XSs" in text

    def test_next_railcam_outside_window(self):
        status = make_status(estimated_arrival=minutes_from_now(51))
        text = render_to_text(build_header([status], "timetable", now=FIXED_NOW), width=160)

        assert "Next railcam:" in text
        assert "in 51 min" in text

    def test_no_railcam_ahead(self):
        status = make_status(next_station="Princeton", estimated_arrival=minutes_from_now(70))
        text = render_to_text(build_header([status], "timetable", now=FIXED_NOW), width=160)

        assert "No railcam ahead" in text

    def test_refresh_info_in_subtitle(self):
        panel = build_header(
            [make_status()], "timetable", now=FIXED_NOW,
            last_fetch_time=FIXED_NOW, refresh_interval=30,
        )
        text = render_to_text(panel, width=160)

        assert "Updated: 21:00:00" in text
        assert "Refresh: 30s" in text
        assert "Ctrl+C" in text

    def test_cached_data_warning(self):
        panel = build_header(
            [make_status()], "timetable", now=FIXED_NOW,
            last_fetch_time=FIXED_NOW, last_error="HTTP 503 (using cached data)",
        )
        text = render_to_text(panel, width=160)

        assert "⚠" in text
        assert "using cached data" in text


# =============================================================================
# TestRenderedCompactOutput
# =============================================================================


class TestRenderedCompactOutput:
    def test_contains_train_and_next_station(self):
        status = make_status(estimated_arrival=minutes_from_now(51))
        text = build_compact_display(status).plain

        assert "Southwest Chief #3" in text
        assert "Naperville, IL→Mendota" in text
        assert "@ 4:51 PM CDT" in text
        assert "%" in text

    def test_delay_shown_when_late(self):
        status = make_status(status="Delayed 7 min", delay_minutes=7)
        text = build_compact_display(status).plain

        assert "+7m" in text
        assert "Delayed 7 min" in text

    def test_completed_run(self):
        status = make_status(
            train_id="4", direction="eastbound", next_station="Chicago, IL",
            current_location="Chicago, IL", departed=True,
        )
        text = build_compact_display(status).plain

        assert "Arrived Chicago, IL" in text
        assert "100%" in text

    def test_second_run_labelled(self):
        text = build_compact_display(make_status(instance_id=2)).plain
        assert "(run 2)" in text

    def test_update_time(self):
        text = build_compact_display(make_status(), last_fetch_time=FIXED_NOW).plain
        assert "Updated 21:00:00" in text


# =============================================================================
# TestRenderedPanels
# =============================================================================


class TestRenderedPanels:
    def test_error_panel_names_source_and_dates(self):
        panel = build_error_panel("HTTP 503", "transit", [date(2025, 3, 14), date(2025, 3, 15)])
        text = render_to_text(panel)

        assert "Fetch Failed" in text
        assert "Error: HTTP 503" in text
        assert "Source: transit" in text
        assert "Service dates checked: 2025-03-14, 2025-03-15" in text

    def test_error_panel_message_only(self):
        text = render_to_text(build_error_panel("timed out"))

        assert "Error: timed out" in text
        assert "Source:" not in text

    def test_not_found_panel(self):
        text = render_to_text(build_not_found_panel("4", "map"))

        assert "No Data" in text
        assert "#4" in text
        assert "map source" in text

    def test_progress_bar_endpoints(self):
        status = make_status(estimated_arrival=minutes_from_now(51))
        text = render_to_text(build_progress_bar(status))

        assert "#3 Progress" in text
        assert "Chicago" in text
        assert "Los Angeles" in text

    def test_progress_bar_without_position(self):
        text = render_to_text(build_progress_bar(make_status(next_station=None)))
        assert "No position yet" in text


# =============================================================================
# TestTrackerDisplay
# =============================================================================


class TestTrackerDisplay:
    def test_full_layout(self):
        results = {"3": [make_status(estimated_arrival=minutes_from_now(51))], "4": []}
        layout = tracker.build_display(results, Config(), FetchCache(), now=FIXED_NOW)
        text = render_to_text(layout, width=160, height=60)

        assert "Chief Status" in text
        assert "Southwest Chief #3" in text
        assert "Mendota" in text
        assert "No Data" in text
        assert "#4" in text

    def test_fetch_error_panel(self):
        cache = FetchCache()
        cache.last_error = "HTTP 503"
        results = {"3": [make_status()], "4": []}
        text = render_to_text(tracker.build_display(results, Config(), cache, now=FIXED_NOW),
                              width=160, height=60)

        assert "Error: HTTP 503" in text
        assert "No Data" not in text
        assert "Fetch Failed" in text
        assert "Source: timetable" in text
        assert "2025-03-13, 2025-03-14, 2025-03-15" in text

    def test_compact_lines(self):
        results = {"3": [make_status()], "4": []}
        group = tracker.build_display(results, Config(compact_mode=True), FetchCache(), now=FIXED_NOW)
        text = render_to_text(group, width=160)

        assert "Naperville, IL→Mendota" in text
        assert "Southwest Chief #4: no data" in text

    def test_compact_uses_current_instance(self):
        older = make_status(next_station="Albuquerque", instance_id=1, is_next=False)
        newer = make_status(next_station="Mendota", instance_id=2, is_next=True)
        text = render_to_text(tracker.build_compact_lines({"3": [older, newer]}, FetchCache()), width=160)

        assert "Mendota" in text
        assert "Albuquerque" not in text

    def test_results_as_json(self):
        records = json.loads(tracker.results_as_json({"3": [make_status()], "4": []}))

        assert len(records) == 1
        assert records[0]["trainId"] == "3"
        assert records[0]["nextStation"] == "Mendota"
        assert records[0]["isNext"] is True


# =============================================================================
# TestCommandLine
# =============================================================================


class TestCommandLine:
    def test_defaults(self):
        config = tracker.config_from_args(tracker.build_parser().parse_args([]))

        assert config.train_ids == ["3", "4"]
        assert config.source == "timetable"
        assert config.lookback_days == 2
        assert config.service_date is None

    def test_options(self):
        args = tracker.build_parser().parse_args(
            ["4", "4", "--source", "map", "--date", "2025-03-14", "--lookback", "0", "--compact"]
        )
        config = tracker.config_from_args(args)

        assert config.train_ids == ["4"]
        assert config.source == "map"
        assert config.service_date == date(2025, 3, 14)
        assert config.lookback_days == 0
        assert config.compact_mode is True

    def test_bad_date_rejected(self):
        with pytest.raises(SystemExit):
            tracker.build_parser().parse_args(["--date", "15/03/2025"])

    def test_unknown_train_rejected(self):
        with pytest.raises(SystemExit):
            tracker.main(["7"])

    def test_latest_service_date_is_mountain_date(self):
        # 03:00 UTC on the 16th is still the evening of the 15th in Denver
        now = FIXED_NOW + timedelta(hours=6)
        assert tracker.latest_service_date(Config(), now) == date(2025, 3, 15)

    def test_explicit_service_date_wins(self):
        config = Config(service_date=date(2025, 3, 1))
        assert tracker.latest_service_date(config, FIXED_NOW) == date(2025, 3, 1)

    @patch("chief_status.tracker.setup_logging")
    @patch("chief_status.tracker._now", return_value=FIXED_NOW)
    @patch("chief_status.tracker.fetch_runs")
    def test_once_json(self, mock_fetch, mock_now, mock_logging, capsys):
        page = load_fixture("timetable_3_departed_naperville.html")
        mock_fetch.return_value = [(date(2025, 3, 15), page)]

        tracker.main(["3", "--once", "--json"])

        records = json.loads(capsys.readouterr().out)
        assert len(records) == 1
        assert records[0]["nextStation"] == "Mendota"
        assert records[0]["currentLocation"] == "Naperville, IL"
        assert records[0]["isNext"] is True

        source, train_id, days, _ = mock_fetch.call_args.args
        assert (source, train_id) == ("timetable", "3")
        assert days == [date(2025, 3, 13), date(2025, 3, 14), date(2025, 3, 15)]

    @patch("chief_status.tracker.fetch_runs")
    def test_resolve_all_isolates_trains(self, mock_fetch):
        page = load_fixture("timetable_3_departed_naperville.html")
        mock_fetch.side_effect = [
            [(date(2025, 3, 15), page)],
            [(date(2025, 3, 15), {"error": "HTTP 503"})],
        ]

        results = tracker.resolve_all(Config(lookback_days=0), FetchCache(), now=FIXED_NOW)

        assert results["3"][0].next_station == "Mendota"
        assert results["4"] == []


# =============================================================================
# TestRefreshLifecycle
# =============================================================================


class TestRefreshLifecycle:
    """Resolve successive pages of the same run, as the refresh loop does."""

    def _page_after_mendota(self):
        rows = sample_westbound_rows()
        rows[2] = ("Mendota, IL (MDT)", "Dp 4:44P", "Dp 4:52P 8 minutes late.")
        return make_timetable_html(rows)

    def test_next_station_advances(self):
        first = resolve_train_status(make_timetable_html(sample_westbound_rows()), "3",
                                     date(2025, 3, 15), now=FIXED_NOW)
        second = resolve_train_status(self._page_after_mendota(), "3",
                                      date(2025, 3, 15), now=minutes_from_now(60))

        assert first[0].next_station == "Mendota"
        assert second[0].next_station == "Princeton"
        assert second[0].current_location == "Mendota, IL"
        assert second[0].delay_minutes == 8

    @patch("chief_status.notifications.send_notification", return_value=True)
    def test_notification_on_departure(self, mock_notify):
        state = NotificationState()
        first = resolve_train_status(make_timetable_html(sample_westbound_rows()), "3",
                                     date(2025, 3, 15), now=FIXED_NOW)
        assert check_and_notify(first, state, FIXED_NOW) == []

        later = minutes_from_now(60)
        second = resolve_train_status(self._page_after_mendota(), "3", date(2025, 3, 15), now=later)
        changes = check_and_notify(second, state, later)

        assert [c.kind for c in changes] == ["next_station"]
        assert "Princeton" in changes[0].message
        mock_notify.assert_called_once()
        assert "#3" in mock_notify.call_args.args[0]


# =============================================================================
# TestSendNotification
# =============================================================================


class TestSendNotification:
    @patch("chief_status.notifications.sys")
    @patch("chief_status.notifications.subprocess.run")
    def test_macos(self, mock_run, mock_sys):
        mock_sys.platform = "darwin"
        assert send_notification("Title", "Message") is True
        assert "osascript" in mock_run.call_args.args[0]

    @patch("chief_status.notifications.sys")
    @patch("chief_status.notifications.subprocess.run")
    def test_linux_uses_app_name(self, mock_run, mock_sys):
        mock_sys.platform = "linux"
        assert send_notification("Title", "Message") is True
        command = mock_run.call_args.args[0]
        assert command[0] == "notify-send"
        assert "Chief Status" in command

    @patch("chief_status.notifications.sys")
    @patch("chief_status.notifications.subprocess.run", side_effect=FileNotFoundError)
    def test_fallback_to_bell(self, mock_run, mock_sys):
        mock_sys.platform = "darwin"
        assert send_notification("Title", "Message") is False
