from __future__ import annotations

from datetime import timedelta

import pytest

from guardian.models.profile import Profile
from guardian.services.checkin_service import record_checkin
from guardian.services.notification_dispatcher import NotificationDispatcher, relay_from_profile
from guardian.services.profile_service import save_profile
from guardian.services.watchdog import (
    BIRTHDAY_TITLE,
    WARNING_TITLE,
    EscalationLevel,
    Watchdog,
    alert_guard_allows,
    classify_silence,
)

from conftest import NOW, FakeRelay, FakeSurface


def _checkin(db, hours_ago: float, score: int = 0, watchdog=None) -> None:
    record_checkin(db, thought="still here", now=NOW - timedelta(hours=hours_ago),
                   scorer=lambda text: score, watchdog=watchdog)


def test_classify_silence_boundaries() -> None:
    assert classify_silence(47.99, 48) is EscalationLevel.normal
    assert classify_silence(48, 48) is EscalationLevel.warning
    assert classify_silence(48.99, 48) is EscalationLevel.warning
    assert classify_silence(49, 48) is EscalationLevel.escalated


def test_alert_guard_is_a_twelve_hour_comparison() -> None:
    assert alert_guard_allows(None, NOW)
    assert not alert_guard_allows(NOW - timedelta(hours=1), NOW)
    assert not alert_guard_allows(NOW - timedelta(hours=12), NOW)
    assert alert_guard_allows(NOW - timedelta(hours=12, seconds=1), NOW)


def test_no_profile_is_a_noop(db, watchdog, surface: FakeSurface, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=500)

    report = watchdog.evaluate(db, now=NOW)

    assert report.active is False
    assert surface.calls == []
    assert relay.messages == []


def test_no_checkin_is_a_noop(db, profile, watchdog, surface: FakeSurface, relay: FakeRelay) -> None:
    report = watchdog.evaluate(db, now=NOW)

    assert report.active is False
    assert report.skipped_reason == "no check-in yet"
    assert surface.calls == []
    assert relay.messages == []


def test_recent_checkin_is_normal(db, profile, watchdog, surface: FakeSurface, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=10)

    report = watchdog.evaluate(db, now=NOW)

    assert report.level is EscalationLevel.normal
    assert report.threshold_hours == 48.0
    assert surface.calls == []
    assert relay.messages == []


def test_warning_window_sends_local_notice_only(db, profile, watchdog, surface: FakeSurface, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=48.5)

    report = watchdog.evaluate(db, now=NOW)

    assert report.level is EscalationLevel.warning
    assert surface.titles() == [WARNING_TITLE]
    assert relay.messages == []

    # repeats on every tick while still inside the window
    watchdog.evaluate(db, now=NOW + timedelta(minutes=15))
    assert surface.titles() == [WARNING_TITLE, WARNING_TITLE]
    assert relay.messages == []


def test_escalation_sends_one_alert_and_stamps(db, profile, watchdog, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=50)

    report = watchdog.evaluate(db, now=NOW)

    assert report.level is EscalationLevel.escalated
    assert report.alert_sent is True
    assert len(relay.messages) == 1
    assert relay.messages[0]["To"] == "charles@example.com"
    db.expire_all()
    assert db.get(Profile, 1).last_alert_sent == NOW


def test_guard_blocks_repeat_alert_within_twelve_hours(db, profile, watchdog, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=50)
    watchdog.evaluate(db, now=NOW)

    report = watchdog.evaluate(db, now=NOW + timedelta(hours=1))

    assert report.level is EscalationLevel.escalated
    assert report.alert_attempted is False
    assert len(relay.messages) == 1

    watchdog.evaluate(db, now=NOW + timedelta(hours=12, minutes=15))
    assert len(relay.messages) == 2


def test_failed_delivery_leaves_stamp_untouched(db, profile, surface: FakeSurface) -> None:
    failing = FakeRelay(success=False)
    watchdog = Watchdog(dispatcher=NotificationDispatcher(surface=surface, relay_factory=lambda p: failing))
    _checkin(db, hours_ago=50)

    report = watchdog.evaluate(db, now=NOW)

    assert report.alert_attempted is True
    assert report.alert_sent is False
    assert report.alert_reason == "connection refused"
    db.expire_all()
    assert db.get(Profile, 1).last_alert_sent is None

    # next tick retries because nothing was stamped
    watchdog.evaluate(db, now=NOW + timedelta(minutes=15))
    assert len(failing.messages) == 2


def test_missing_mail_relay_is_reported_noop(db, profile_data, surface: FakeSurface) -> None:
    profile_data.update(smtp_host=None, smtp_user=None, smtp_pass=None)
    save_profile(db, profile_data)
    watchdog = Watchdog(dispatcher=NotificationDispatcher(surface=surface, relay_factory=relay_from_profile))
    _checkin(db, hours_ago=50)

    report = watchdog.evaluate(db, now=NOW)

    assert report.level is EscalationLevel.escalated
    assert report.alert_sent is False
    assert report.alert_reason == "mail relay not configured"
    db.expire_all()
    assert db.get(Profile, 1).last_alert_sent is None


def test_soft_pulse_extends_deadline_by_bonus(db, profile, watchdog, relay: FakeRelay) -> None:
    _checkin(db, hours_ago=50)

    assert watchdog.register_activity() == 6
    report = watchdog.evaluate(db, now=NOW)

    assert report.effective_deadline_hours == report.threshold_hours + 6
    assert report.level is EscalationLevel.normal
    assert relay.messages == []


def test_hard_checkin_resets_soft_pulse(db, profile, watchdog) -> None:
    watchdog.register_activity()
    assert watchdog.grace.soft_pulse_extension_hours == 6

    _checkin(db, hours_ago=0, watchdog=watchdog)

    assert watchdog.grace.soft_pulse_extension_hours == 0


def test_restart_clears_soft_pulse(watchdog) -> None:
    watchdog.register_activity()

    restarted = Watchdog(dispatcher=watchdog.dispatcher)

    assert restarted.grace.soft_pulse_extension_hours == 0


def test_negative_mood_trend_tightens_deadline(db, profile, watchdog, surface: FakeSurface) -> None:
    for hours_ago in (40, 35, 30, 28, 25):
        _checkin(db, hours_ago=hours_ago, score=-3)

    report = watchdog.evaluate(db, now=NOW)

    assert report.threshold_hours == 24.0
    assert report.level is EscalationLevel.warning
    assert surface.titles() == [WARNING_TITLE]


def test_watchdog_ignores_negative_scores_outside_its_window(db, profile, watchdog) -> None:
    for hours_ago, score in ((40, -10), (38, -10), (36, 0), (34, 0), (32, 0), (30, 0), (28, 0)):
        _checkin(db, hours_ago=hours_ago, score=score)

    report = watchdog.evaluate(db, now=NOW)

    assert report.threshold_hours == 48.0


def test_birthday_notice_once_per_year(db, profile_data, watchdog, surface: FakeSurface) -> None:
    profile_data["owner_birthday"] = "1990-03-10"
    save_profile(db, profile_data)
    _checkin(db, hours_ago=1)

    for minutes in range(0, 120, 15):
        watchdog.evaluate(db, now=NOW + timedelta(minutes=minutes))

    assert surface.titles().count(BIRTHDAY_TITLE) == 1
    db.expire_all()
    assert db.get(Profile, 1).last_birthday_notice_year == 2026

    next_year = NOW.replace(year=2027)
    record_checkin(db, thought="another year", now=next_year - timedelta(hours=1), scorer=lambda text: 0)
    watchdog.evaluate(db, now=next_year)

    assert surface.titles().count(BIRTHDAY_TITLE) == 2


def test_no_birthday_notice_on_other_days(db, profile_data, watchdog, surface: FakeSurface) -> None:
    profile_data["owner_birthday"] = "1990-07-04"
    save_profile(db, profile_data)
    _checkin(db, hours_ago=1)

    watchdog.evaluate(db, now=NOW)

    assert BIRTHDAY_TITLE not in surface.titles()


def test_local_notification_failure_does_not_abort(db, profile, relay: FakeRelay) -> None:
    broken = FakeSurface(fail=True)
    watchdog = Watchdog(dispatcher=NotificationDispatcher(surface=broken, relay_factory=lambda p: relay))
    _checkin(db, hours_ago=48.5)

    report = watchdog.evaluate(db, now=NOW)

    assert report.level is EscalationLevel.warning
    assert report.warning_sent is True
    assert broken.calls


def test_run_tick_uses_its_own_session(session_factory, watchdog) -> None:
    report = watchdog.run_tick()

    assert report is not None
    assert report.active is False


def test_run_tick_swallows_unexpected_errors(watchdog) -> None:
    def broken_factory():
        raise RuntimeError("disk on fire")

    watchdog.session_factory = broken_factory

    assert watchdog.run_tick() is None


@pytest.mark.parametrize("hours_ago", [0, 47.9])
def test_report_serialises(db, profile, watchdog, hours_ago: float) -> None:
    _checkin(db, hours_ago=hours_ago)

    payload = watchdog.evaluate(db, now=NOW).to_dict()

    assert payload["active"] is True
    assert payload["level"] == "normal"
