# tests/test_alerts.py
"""
Test alert recipients, fan-out and transition detection.
"""

from sqlalchemy import select

from runway_ops.alerts.directory import UserDirectory
from runway_ops.alerts.dispatcher import AlertDispatcher, Severity
from runway_ops.alerts.transitions import is_worsening, record_status
from runway_ops.db.schema import audit_log, notification
from runway_ops.db.system_settings import RUNWAY_STATUS, SystemSettingsStore
from runway_ops.roles import OPERATIONS_ROLES, Role
from runway_ops.runway.models import RunwayStatus, RunwayStatusResult


def _recipients(session):
    rows = session.execute(select(notification.c.recipient_id).order_by(notification.c.recipient_id))
    return [row[0] for row in rows]


class TestUserDirectory:
    """Tests for recipient lookups."""

    def test_operations_roles_active_only(self, session, seeded_users, clock):
        users = UserDirectory(session, now=clock).users_by_roles(OPERATIONS_ROLES)
        assert [u.id for u in users] == ["cmd-1", "jbond", "ops-1"]
        assert users[0].role == Role.COMMANDER

    def test_pilots_in_window(self, session, seeded_users, clock):
        pilots = UserDirectory(session, now=clock).pilots_with_upcoming_missions(30)
        assert pilots == ["pilot-1"]

    def test_wider_window_includes_later_missions(self, session, seeded_users, clock):
        pilots = UserDirectory(session, now=clock).pilots_with_upcoming_missions(180)
        assert pilots == ["pilot-1", "pilot-2"]

    def test_started_missions_excluded(self, session, seeded_users, clock):
        clock.advance(minutes=25)
        # m-1 (+10) and m-4 (+20) have already started
        assert UserDirectory(session, now=clock).pilots_with_upcoming_missions(30) == []

    def test_display_name(self, session, seeded_users, clock):
        user = UserDirectory(session, now=clock).get_user("jbond")
        assert user.display_name == "James Bond"
        assert UserDirectory(session, now=clock).get_user("nobody") is None


class TestDispatcher:
    """Tests for notification fan-out."""

    def test_closed_is_emergency(self, session, seeded_users, clock):
        report = AlertDispatcher(session, now=clock).dispatch_status_change(
            RunwayStatus.OPEN, RunwayStatus.CLOSED, "Visibility 1000m < 1500m"
        )
        assert report.title == "RUNWAY CLOSED"
        assert report.severity == Severity.EMERGENCY
        assert report.recipient_count == 4
        assert sorted(report.delivered) == ["cmd-1", "jbond", "ops-1", "pilot-1"]
        assert _recipients(session) == ["cmd-1", "jbond", "ops-1", "pilot-1"]

        message = session.execute(select(notification.c.message)).scalars().first()
        assert message == "Runway status changed from OPEN to CLOSED: Visibility 1000m < 1500m"

    def test_notifications_stamped_with_dispatcher_clock(self, session, seeded_users, clock):
        AlertDispatcher(session, now=clock).dispatch_weather_unavailable(75)
        stamps = session.execute(select(notification.c.created_at)).scalars().all()
        assert stamps and all(stamp == clock() for stamp in stamps)

    def test_caution_is_warning(self, session, seeded_users, clock):
        report = AlertDispatcher(session, now=clock).dispatch_status_change(
            RunwayStatus.OPEN, RunwayStatus.CAUTION, "Wind 29 kt (26-40 kt)"
        )
        assert report.title == "Runway Caution"
        assert report.severity == Severity.WARNING

    def test_pilot_with_ops_role_not_duplicated(self, session, seeded_users, clock):
        dispatcher = AlertDispatcher(session, now=clock)
        recipients = dispatcher.status_change_recipients()
        assert len(recipients) == len(set(recipients))

    def test_one_failed_write_does_not_block_others(self, session, seeded_users, clock, monkeypatch):
        dispatcher = AlertDispatcher(session, now=clock)
        original = dispatcher._write_notification

        def flaky(recipient_id, *args):
            if recipient_id == "jbond":
                raise RuntimeError("disk full")
            return original(recipient_id, *args)

        monkeypatch.setattr(dispatcher, "_write_notification", flaky)
        report = dispatcher.dispatch_status_change(
            RunwayStatus.CAUTION, RunwayStatus.CLOSED, "Ceiling 400 ft < 500 ft"
        )

        assert report.failed == ["jbond"]
        assert sorted(report.delivered) == ["cmd-1", "ops-1", "pilot-1"]
        assert _recipients(session) == ["cmd-1", "ops-1", "pilot-1"]

    def test_weather_unavailable_to_operations_only(self, session, seeded_users, clock):
        report = AlertDispatcher(session, now=clock).dispatch_weather_unavailable(75)
        assert report.title == "Weather data unavailable"
        assert sorted(report.delivered) == ["cmd-1", "jbond", "ops-1"]


class TestTransitions:
    """Tests for status cache and transition detection."""

    def test_worsening_pairs(self):
        assert is_worsening(RunwayStatus.OPEN, RunwayStatus.CAUTION)
        assert is_worsening(RunwayStatus.OPEN, RunwayStatus.CLOSED)
        assert is_worsening(RunwayStatus.CAUTION, RunwayStatus.CLOSED)
        assert not is_worsening(RunwayStatus.CLOSED, RunwayStatus.OPEN)
        assert not is_worsening(RunwayStatus.CAUTION, RunwayStatus.CAUTION)

    def test_record_status_reads_persisted_previous(self, session):
        SystemSettingsStore(session).set(RUNWAY_STATUS, "OPEN")
        session.commit()

        result = RunwayStatusResult(status=RunwayStatus.CLOSED, reason="Wind 49 kt > 40 kt")
        transition = record_status(session, result, snapshot_id="snap-1")
        session.commit()

        assert transition.previous == RunwayStatus.OPEN
        assert transition.current == RunwayStatus.CLOSED
        assert transition.is_worsening
        assert SystemSettingsStore(session).get(RUNWAY_STATUS) == "CLOSED"

        entity_ids = session.execute(select(audit_log.c.entity_id)).scalars().all()
        assert entity_ids == ["snap-1"]

    def test_record_status_without_previous(self, session):
        result = RunwayStatusResult(status=RunwayStatus.OPEN, reason="All conditions normal")
        assert record_status(session, result) is None
        assert SystemSettingsStore(session).get(RUNWAY_STATUS) == "OPEN"
