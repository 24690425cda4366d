from src.school_attendance.school_attendance.activity.tracker import ActivityTracker
from src.school_attendance.school_attendance.core.enums import ActivityType

from conftest import FakeActivityRepo


def test_track_and_list_recent_newest_first():
    repo = FakeActivityRepo()
    tracker = ActivityTracker(repo)

    tracker.track(user_id="teacher", activity_type=ActivityType.LOGIN, message="Teacher logged in")
    tracker.track(user_id="teacher", activity_type=ActivityType.ATTENDANCE, message="Marked attendance", metadata={"count": 3})
    tracker.track(user_id="admin", activity_type=ActivityType.LOGIN, message="Admin logged in")

    recent = tracker.recent("teacher")
    assert [a.activity_type for a in recent] == [ActivityType.ATTENDANCE, ActivityType.LOGIN]
    assert recent[0].to_dict()["metadata"] == {"count": 3}


def test_track_missing_inputs_is_a_noop():
    repo = FakeActivityRepo()

    assert ActivityTracker(repo).track(user_id=None, activity_type=ActivityType.LOGOUT, message="x") is None
    assert repo.items == []


def test_track_swallows_store_errors():
    repo = FakeActivityRepo()
    repo.fail = True

    assert ActivityTracker(repo).track(user_id="u", activity_type=ActivityType.LOGIN, message="hi") is None


def test_recent_limit_is_clamped():
    repo = FakeActivityRepo()
    tracker = ActivityTracker(repo)
    for i in range(3):
        tracker.track(user_id="u", activity_type=ActivityType.LOGIN, message=f"login {i}")

    assert len(tracker.recent("u", limit=0)) == 1
    assert len(tracker.recent("u", limit=500)) == 3
