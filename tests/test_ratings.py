import itertools

import pytest

from app.core.errors import AlreadyRated, Forbidden, InvalidTransition, NotFound
from app.models.activity_db import activity_crud
from app.models.rating_db import rating_crud


@pytest.fixture
def organizer(make_user):
    return make_user("lucia@example.com", "Lucía", "Fernández")


@pytest.fixture
def players(make_user):
    return [make_user(f"player{i}@example.com", f"Player{i}") for i in range(3)]


@pytest.fixture
def joined_activity(db, make_activity):
    """Builds a completed activity where every given user is an approved participant."""
    def _joined_activity(organizer, users, complete=True):
        activity = make_activity(organizer, spots=len(users))
        for user in users:
            activity_crud.request_to_join(db, activity.id, user.email, user.full_name)
            activity_crud.approve_request(db, activity.id, user.email)
        if complete:
            activity_crud.complete_activity(db, activity.id)
        return activity

    return _joined_activity


@pytest.mark.parametrize("scores", list(itertools.permutations([5, 2, 4])))
def test_average_is_mean_of_all_scores(db, organizer, players, joined_activity, scores):
    activity = joined_activity(organizer, players)

    for rater, score in zip(players, scores):
        rating_crud.rate_user(db, activity.id, rater, organizer.email, score)

    db.refresh(organizer)
    assert organizer.average_rating == pytest.approx(11 / 3)
    assert rating_crud.get_user_rating(db, organizer.email) == pytest.approx(11 / 3)
    assert len(organizer.ratings) == 3


def test_user_without_ratings_has_defaults(db, organizer):
    assert rating_crud.get_user_rating(db, organizer.email) == 0.0
    assert organizer.attendance_stats == {
        "total_activities": 0,
        "attended": 0,
        "on_time": 0,
        "attendance_rate": 100,
        "punctuality_rate": 100,
    }


def test_rating_records_attendance_and_rater(db, organizer, players, joined_activity):
    target = players[0]
    activity = joined_activity(organizer, [target])

    rating = rating_crud.rate_user(db, activity.id, organizer, target.email, 4, comment="Muy puntual",
                                   attended=True, on_time=False)

    assert rating.activity_name == activity.title
    assert rating.from_user_name == organizer.full_name
    record = activity.find_attendance(target.email)
    assert record.rated_by == [organizer.email]
    assert record.attended is True
    assert record.on_time is False
    assert rating_crud.has_rated(db, activity.id, organizer.email, target.email)


def test_cannot_rate_twice(db, organizer, players, joined_activity):
    target = players[0]
    activity = joined_activity(organizer, [target])
    rating_crud.rate_user(db, activity.id, organizer, target.email, 5)

    with pytest.raises(AlreadyRated):
        rating_crud.rate_user(db, activity.id, organizer, target.email, 1)

    db.refresh(target)
    assert target.average_rating == 5


def test_second_rater_merges_into_same_record(db, organizer, players, joined_activity):
    target, other = players[0], players[1]
    activity = joined_activity(organizer, [target, other])

    rating_crud.rate_user(db, activity.id, organizer, target.email, 5)
    rating_crud.rate_user(db, activity.id, other, target.email, 3)

    assert len(activity.attendance_records) == 1
    assert activity.find_attendance(target.email).rated_by == [organizer.email, other.email]
    db.refresh(target)
    assert target.average_rating == 4
    assert target.total_activities == 1


def test_rating_requires_completed_activity(db, organizer, players, joined_activity):
    activity = joined_activity(organizer, players[:1], complete=False)

    with pytest.raises(InvalidTransition):
        rating_crud.rate_user(db, activity.id, organizer, players[0].email, 5)


def test_rating_is_limited_to_members(db, organizer, players, joined_activity, make_user):
    activity = joined_activity(organizer, players[:1])
    outsider = make_user("outsider@example.com", "Outsider")

    with pytest.raises(Forbidden):
        rating_crud.rate_user(db, activity.id, outsider, players[0].email, 5)
    with pytest.raises(NotFound):
        rating_crud.rate_user(db, activity.id, organizer, outsider.email, 5)
    with pytest.raises(Forbidden):
        rating_crud.rate_user(db, activity.id, organizer, organizer.email, 5)


def test_absent_user_does_not_inflate_punctuality(db, organizer, players, joined_activity):
    target = players[0]
    first = joined_activity(organizer, [target])
    second = joined_activity(organizer, [target])

    rating_crud.rate_user(db, first.id, organizer, target.email, 5, attended=True, on_time=True)
    rating_crud.rate_user(db, second.id, organizer, target.email, 1, attended=False, on_time=True)

    db.refresh(target)
    assert target.attendance_stats == {
        "total_activities": 2,
        "attended": 1,
        "on_time": 1,
        "attendance_rate": 50,
        "punctuality_rate": 100,
    }


def test_mark_attendance_is_idempotent_upsert(db, organizer, players, joined_activity):
    target = players[0]
    activity = joined_activity(organizer, [target])
    rating_crud.rate_user(db, activity.id, organizer, target.email, 5)

    rating_crud.mark_attendance(db, activity.id, target.email, attended=True, on_time=False)
    rating_crud.mark_attendance(db, activity.id, target.email, attended=True, on_time=False)

    assert len(activity.attendance_records) == 1
    record = activity.find_attendance(target.email)
    assert record.on_time is False
    assert record.rated_by == [organizer.email]
    db.refresh(target)
    assert target.punctuality_rate == 0


def test_mark_attendance_permissions(db, organizer, players, joined_activity):
    activity = joined_activity(organizer, players[:2])

    with pytest.raises(Forbidden):
        rating_crud.mark_attendance(db, activity.id, players[0].email, True, True, actor_email=players[1].email)
    with pytest.raises(NotFound):
        rating_crud.mark_attendance(db, activity.id, "nobody@example.com", True, True)


def test_rates_round_half_up(db, organizer, players, joined_activity):
    target = players[0]
    for i in range(8):
        activity = joined_activity(organizer, [target])
        rating_crud.mark_attendance(db, activity.id, target.email, attended=(i == 0), on_time=True)

    db.refresh(target)
    assert target.total_activities == 8
    assert target.attended == 1
    assert target.attendance_rate == 13
    assert target.punctuality_rate == 100


def test_co_participant_rating_keeps_organizer_attendance_mark(db, organizer, players, joined_activity):
    target, other = players[0], players[1]
    activity = joined_activity(organizer, [target, other])
    rating_crud.mark_attendance(db, activity.id, target.email, attended=False, on_time=False)

    rating_crud.rate_user(db, activity.id, other, target.email, 5)

    record = activity.find_attendance(target.email)
    assert record.attended is False
    assert record.rated_by == [other.email]
    db.refresh(target)
    assert target.attended == 0
    assert target.attendance_rate == 0
    assert target.average_rating == 5


def test_co_participant_rating_leaves_attendance_unmarked(db, organizer, players, joined_activity):
    target, other = players[0], players[1]
    activity = joined_activity(organizer, [target, other])

    rating_crud.rate_user(db, activity.id, other, target.email, 4, attended=True, on_time=True)

    record = activity.find_attendance(target.email)
    assert record.attended is None
    assert record.on_time is None
    db.refresh(target)
    assert target.total_activities == 0
    assert target.attendance_rate == 100

    rating_crud.rate_user(db, activity.id, organizer, target.email, 3, attended=True, on_time=False)

    assert record.attended is True
    assert record.on_time is False
    assert record.rated_by == [other.email, organizer.email]
    db.refresh(target)
    assert target.total_activities == 1
    assert target.punctuality_rate == 0
