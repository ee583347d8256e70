import pytest
from sqlalchemy.exc import OperationalError

from santapairs.errors import (
    DerangementFailed,
    DuplicateParticipant,
    InsufficientParticipants,
    InvalidCredentials,
    NotFound,
    NotReady,
    StoreFailure,
)
from santapairs.models import Assignment, Participant, Setting
from santapairs.services import assignments as assignments_service
from santapairs.services import participants as participants_service
from santapairs.services import resets as resets_service
from santapairs.services.assignments import (
    assignments_generated,
    count_assignments,
    generate_assignments,
    get_assignment,
)
from santapairs.services.participants import (
    add_participant,
    authenticate,
    list_participants,
    remove_participant,
)
from santapairs.services.resets import reset_scope

FAMILY = "north-pole"


def _add(names, scope=FAMILY):
    for name in names:
        add_participant(name, f"{name}-pw", scope)


def _rows(scope=FAMILY):
    return Assignment.query.filter_by(family_code=scope).order_by(Assignment.giver).all()


def test_generate_three_participants(app_ctx):
    _add(["carol", "alice", "bob"])
    pairs = generate_assignments(FAMILY)

    assert [g for g, _ in pairs] == ["alice", "bob", "carol"]
    rows = _rows()
    assert len(rows) == 3
    assert len({r.giver for r in rows}) == 3
    assert len({r.receiver for r in rows}) == 3
    assert all(r.giver != r.receiver for r in rows)
    assert assignments_generated(FAMILY) is True


def test_generate_needs_two_participants(app_ctx):
    _add(["alice"])
    with pytest.raises(InsufficientParticipants):
        generate_assignments(FAMILY)
    assert assignments_generated(FAMILY) is False
    assert Setting.query.count() == 0


def test_regenerate_replaces_previous_set(app_ctx):
    _add(["alice", "bob", "carol", "dave", "erin"])
    generate_assignments(FAMILY, seed=1)
    assert count_assignments(FAMILY) == 5

    second = dict(generate_assignments(FAMILY, seed=2))
    assert count_assignments(FAMILY) == 5
    for giver, receiver in second.items():
        assert get_assignment(giver, FAMILY) == receiver


def test_scopes_are_independent(app_ctx):
    _add(["alice", "bob"], scope="a")
    _add(["alice", "bob", "carol"], scope="b")

    generate_assignments("a")
    assert assignments_generated("a") is True
    assert assignments_generated("b") is False
    assert count_assignments("b") == 0

    generate_assignments("b")
    reset_scope("a")
    assert assignments_generated("a") is False
    assert count_assignments("b") == 3
    assert [p.name for p in list_participants("b")] == ["alice", "bob", "carol"]


def test_lookup_lifecycle(app_ctx):
    _add(["alice", "bob", "carol"])
    with pytest.raises(NotReady):
        get_assignment("alice", FAMILY)

    generate_assignments(FAMILY)
    assert get_assignment("alice", FAMILY) in {"bob", "carol"}

    reset_scope(FAMILY)
    with pytest.raises(NotReady):
        get_assignment("alice", FAMILY)


def test_lookup_participant_added_after_generation(app_ctx):
    _add(["alice", "bob"])
    generate_assignments(FAMILY)
    _add(["carol"])
    with pytest.raises(NotFound):
        get_assignment("carol", FAMILY)


def test_remove_participant_cascades_both_directions(app_ctx):
    _add(["alice", "bob", "carol", "dave"])
    pairs = dict(generate_assignments(FAMILY))
    target = "bob"

    remove_participant(target, FAMILY)

    rows = _rows()
    assert all(target not in (r.giver, r.receiver) for r in rows)
    giving_to_target = [g for g, r in pairs.items() if r == target]
    expected = {g for g in pairs if g != target} - set(giving_to_target)
    assert {r.giver for r in rows} == expected
    assert Participant.query.filter_by(name=target, family_code=FAMILY).count() == 0


def test_reset_is_idempotent(app_ctx):
    reset_scope(FAMILY)
    _add(["alice", "bob"])
    generate_assignments(FAMILY)
    reset_scope(FAMILY)
    reset_scope(FAMILY)
    assert count_assignments(FAMILY) == 0
    assert list_participants(FAMILY) == []
    assert assignments_generated(FAMILY) is False


def test_failed_generation_keeps_previous_assignments(app_ctx, monkeypatch):
    _add(["alice", "bob", "carol"])
    before = dict(generate_assignments(FAMILY, seed=5))

    def boom(*args, **kwargs):
        raise DerangementFailed()

    monkeypatch.setattr(assignments_service, "generate_derangement", boom)
    with pytest.raises(DerangementFailed):
        generate_assignments(FAMILY)

    assert {r.giver: r.receiver for r in _rows()} == before
    assert assignments_generated(FAMILY) is True


def test_store_error_rolls_back_and_surfaces_as_store_failure(app_ctx, monkeypatch):
    _add(["alice", "bob", "carol"])
    before = dict(generate_assignments(FAMILY, seed=5))

    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(assignments_service, "generate_derangement", broken)
    with pytest.raises(StoreFailure):
        generate_assignments(FAMILY)

    assert {r.giver: r.receiver for r in _rows()} == before


def test_duplicate_participant(app_ctx):
    _add(["alice"])
    with pytest.raises(DuplicateParticipant):
        add_participant("alice", "other", FAMILY)
    # same name in another scope is fine
    add_participant("alice", "other", "south-pole")


def test_passwords_are_hashed(app_ctx):
    p = add_participant("alice", "hunter2", FAMILY)
    assert p.password_hash != "hunter2"
    assert p.password_hash.startswith("$argon2")


def test_authenticate(app_ctx):
    _add(["Alice"])
    assert authenticate("alice", "Alice-pw").name == "Alice"
    assert authenticate("ALICE", "Alice-pw", FAMILY).family_code == FAMILY
    with pytest.raises(InvalidCredentials):
        authenticate("alice", "wrong")
    with pytest.raises(InvalidCredentials):
        authenticate("alice", "Alice-pw", "south-pole")
    with pytest.raises(InvalidCredentials):
        authenticate("nobody", "x")


def test_unique_constraint_reports_duplicate(app_ctx, monkeypatch):
    # two concurrent adds can both pass the pre-check; the constraint decides
    _add(["alice"])
    monkeypatch.setattr(participants_service, "name_taken", lambda name, scope: False)

    with pytest.raises(DuplicateParticipant):
        add_participant("alice", "other", FAMILY)
    assert [p.name for p in list_participants(FAMILY)] == ["alice"]


def test_reset_locks_scope_before_deleting(app_ctx, monkeypatch):
    _add(["alice", "bob"])
    generate_assignments(FAMILY)

    calls = []
    real_flag_row = resets_service.flag_row

    def recording_flag_row(scope, lock=False):
        calls.append((scope, lock, count_assignments(scope)))
        return real_flag_row(scope, lock=lock)

    monkeypatch.setattr(resets_service, "flag_row", recording_flag_row)
    reset_scope(FAMILY)

    assert calls == [(FAMILY, True, 2)]
    assert count_assignments(FAMILY) == 0
