import uuid

import pytest

from app.core.errors import CapacityExceeded, Forbidden, InvalidTransition, JoinRejected, NotFound
from app.models.activity_db import activity_crud
from app.models.activity_db.request_db import ParticipantRequest
from app.models.chat_db.chat_crud import get_chat_by_activity_and_users, get_chats_by_user


@pytest.fixture
def organizer(make_user):
    return make_user("martin@example.com", "Martín", "García")


@pytest.fixture
def ana(make_user):
    return make_user("ana@example.com", "Ana", "Torres")


@pytest.fixture
def pablo(make_user):
    return make_user("pablo@example.com", "Pablo", "Méndez")


def join(db, activity, user):
    return activity_crud.request_to_join(db, activity.id, user.email, user.full_name, user.avatar, 4.5)


def test_new_activity_starts_empty_and_lists_newest_first(db, organizer, make_activity):
    first = make_activity(organizer, title="Tenis en Palermo")
    second = make_activity(organizer, category="leisure", subcategory="Cine", skill_level=None, spots=3)

    assert first.participants == []
    assert first.requests == []
    assert first.attendance_records == []
    assert first.is_completed is False
    assert first.id != second.id
    assert [a.id for a in activity_crud.list_activities(db)] == [second.id, first.id]


def test_list_filters_by_category_and_text(db, organizer, make_activity):
    tennis = make_activity(organizer)
    cinema = make_activity(organizer, title="¿Alguien quiere ir al cine?", category="leisure",
                           subcategory="Cine", skill_level=None)

    assert [a.id for a in activity_crud.list_activities(db, category="leisure")] == [cinema.id]
    assert [a.id for a in activity_crud.list_activities(db, query="TENIS")] == [tennis.id]
    assert [a.id for a in activity_crud.list_activities(db, query="cine")] == [cinema.id]


def test_request_to_join_creates_pending_request(db, organizer, ana, make_activity):
    activity = make_activity(organizer)

    request = join(db, activity, ana)

    assert request.status == "pending"
    assert request.user_rating == 4.5
    assert activity_crud.get_user_request_status(db, activity.id, ana.email) == "pending"
    assert [r.user_email for r in activity_crud.get_pending_requests(db, activity.id)] == [ana.email]
    assert activity_crud.get_available_spots(db, activity.id) == 1


def test_duplicate_request_leaves_a_single_request(db, organizer, ana, make_activity):
    activity = make_activity(organizer, spots=3)
    join(db, activity, ana)

    with pytest.raises(JoinRejected):
        join(db, activity, ana)

    count = db.query(ParticipantRequest).filter(
        ParticipantRequest.activity_id == activity.id,
        ParticipantRequest.user_email == ana.email,
    ).count()
    assert count == 1


def test_rejected_user_cannot_request_again(db, organizer, ana, make_activity):
    activity = make_activity(organizer)
    join(db, activity, ana)
    activity_crud.reject_request(db, activity.id, ana.email)

    with pytest.raises(JoinRejected):
        join(db, activity, ana)


def test_organizer_cannot_join_own_activity(db, organizer, make_activity):
    activity = make_activity(organizer)

    with pytest.raises(JoinRejected):
        join(db, activity, organizer)


def test_request_to_unknown_activity(db, ana):
    with pytest.raises(NotFound):
        activity_crud.request_to_join(db, uuid.uuid4(), ana.email, ana.full_name)
    assert activity_crud.get_user_request_status(db, uuid.uuid4(), ana.email) == "none"
    assert activity_crud.get_available_spots(db, uuid.uuid4()) == 0


def test_approve_adds_participant_and_opens_chat(db, organizer, ana, make_activity):
    activity = make_activity(organizer)
    join(db, activity, ana)

    request, events = activity_crud.approve_request(db, activity.id, ana.email, actor_email=organizer.email)

    assert request.status == "approved"
    assert activity.participants == [ana.email]
    assert activity_crud.is_user_joined(db, activity.id, ana.email)
    assert len(events) == 1
    chat = get_chat_by_activity_and_users(db, activity.id, organizer.email, ana.email)
    assert chat is not None
    assert chat.activity_title == activity.title
    assert len(get_chats_by_user(db, ana.email)) == 1


def test_only_organizer_can_approve(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer)
    join(db, activity, ana)

    with pytest.raises(Forbidden):
        activity_crud.approve_request(db, activity.id, ana.email, actor_email=pablo.email)
    assert activity_crud.get_user_request_status(db, activity.id, ana.email) == "pending"


def test_approve_rechecks_capacity(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=1)
    join(db, activity, ana)
    join(db, activity, pablo)
    activity_crud.approve_request(db, activity.id, ana.email)

    with pytest.raises(CapacityExceeded):
        activity_crud.approve_request(db, activity.id, pablo.email)

    assert activity.participants == [ana.email]
    assert len(activity.participants) <= activity.spots
    assert activity_crud.get_user_request_status(db, activity.id, pablo.email) == "pending"
    assert get_chat_by_activity_and_users(db, activity.id, organizer.email, pablo.email) is None


def test_reject_changes_status_only(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=2)
    join(db, activity, ana)
    join(db, activity, pablo)
    activity_crud.approve_request(db, activity.id, ana.email)

    request = activity_crud.reject_request(db, activity.id, pablo.email)

    assert request.status == "rejected"
    assert activity.participants == [ana.email]
    assert activity_crud.get_user_request_status(db, activity.id, pablo.email) == "rejected"


def test_transitions_happen_once(db, organizer, ana, make_activity):
    activity = make_activity(organizer)
    join(db, activity, ana)
    activity_crud.reject_request(db, activity.id, ana.email)

    with pytest.raises(InvalidTransition):
        activity_crud.approve_request(db, activity.id, ana.email)
    with pytest.raises(InvalidTransition):
        activity_crud.reject_request(db, activity.id, ana.email)


def test_withdraw_removes_request_and_participation(db, organizer, ana, make_activity):
    activity = make_activity(organizer)
    join(db, activity, ana)
    activity_crud.approve_request(db, activity.id, ana.email)

    activity_crud.withdraw_request(db, activity.id, ana.email)

    assert activity.participants == []
    assert activity.requests == []
    assert activity_crud.get_user_request_status(db, activity.id, ana.email) == "none"


def test_withdraw_pending_or_rejected_request(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=2)
    join(db, activity, ana)
    join(db, activity, pablo)
    activity_crud.reject_request(db, activity.id, pablo.email)

    activity_crud.withdraw_request(db, activity.id, ana.email)
    activity_crud.withdraw_request(db, activity.id, pablo.email)

    assert activity.requests == []
    with pytest.raises(NotFound):
        activity_crud.withdraw_request(db, activity.id, ana.email)


def test_revoke_is_organizer_only_and_audited(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=2)
    join(db, activity, ana)
    join(db, activity, pablo)
    activity_crud.approve_request(db, activity.id, ana.email)
    activity_crud.approve_request(db, activity.id, pablo.email)

    with pytest.raises(Forbidden):
        activity_crud.revoke_participant(db, activity.id, ana.email, actor_email=pablo.email)

    activity_crud.revoke_participant(db, activity.id, ana.email, actor_email=organizer.email)
    activity_crud.withdraw_request(db, activity.id, pablo.email)

    assert activity.participants == []
    log = activity_crud.get_membership_log(db, activity.id)
    actions = {(entry.user_email, entry.action, entry.actor_email) for entry in log}
    assert (ana.email, "revoked", organizer.email) in actions
    assert (pablo.email, "withdrawn", pablo.email) in actions
    assert sum(1 for entry in log if entry.action == "requested") == 2


def test_single_spot_scenario(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=1)

    join(db, activity, ana)
    assert activity_crud.get_user_request_status(db, activity.id, ana.email) == "pending"

    activity_crud.approve_request(db, activity.id, ana.email)
    assert activity_crud.get_user_request_status(db, activity.id, ana.email) == "approved"
    assert activity_crud.get_available_spots(db, activity.id) == 0

    with pytest.raises(JoinRejected):
        join(db, activity, pablo)

    activity_crud.withdraw_request(db, activity.id, ana.email)
    assert activity_crud.get_available_spots(db, activity.id) == 1


def test_complete_activity_is_explicit_and_idempotent(db, organizer, ana, make_activity):
    activity = make_activity(organizer)

    activity_crud.complete_activity(db, activity.id)
    completed_at = activity.completed_at
    activity_crud.complete_activity(db, activity.id)

    assert activity.is_completed is True
    assert activity.completed_at == completed_at
    with pytest.raises(JoinRejected):
        join(db, activity, ana)
    assert activity_crud.list_activities(db, include_completed=False) == []


def test_membership_queries(db, organizer, ana, pablo, make_activity):
    tennis = make_activity(organizer)
    cinema = make_activity(organizer, category="leisure", subcategory="Cine", skill_level=None, spots=3)
    join(db, tennis, ana)
    join(db, cinema, ana)
    join(db, cinema, pablo)
    activity_crud.approve_request(db, cinema.id, ana.email)

    assert [a.id for a in activity_crud.get_activities_by_creator(db, organizer.email)] == [cinema.id, tennis.id]
    assert [a.id for a in activity_crud.get_activities_joined_by(db, ana.email)] == [cinema.id]
    assert {a.id for a, _ in activity_crud.get_my_requests(db, ana.email)} == {tennis.id, cinema.id}

    pending = activity_crud.get_pending_requests_for_my_activities(db, organizer.email)
    assert {(a.id, r.user_email) for a, r in pending} == {(tennis.id, ana.email), (cinema.id, pablo.email)}


def test_membership_is_frozen_once_completed(db, organizer, ana, pablo, make_activity):
    activity = make_activity(organizer, spots=2)
    join(db, activity, ana)
    join(db, activity, pablo)
    activity_crud.approve_request(db, activity.id, ana.email)
    activity_crud.approve_request(db, activity.id, pablo.email)
    activity_crud.complete_activity(db, activity.id)

    with pytest.raises(InvalidTransition):
        activity_crud.withdraw_request(db, activity.id, ana.email)
    with pytest.raises(InvalidTransition):
        activity_crud.revoke_participant(db, activity.id, pablo.email, actor_email=organizer.email)

    assert activity.participants == [ana.email, pablo.email]
    assert [a.id for a in activity_crud.get_activities_joined_by(db, ana.email)] == [activity.id]
    assert {entry.action for entry in activity_crud.get_membership_log(db, activity.id)} == {"requested", "approved"}
