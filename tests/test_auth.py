from concurrent.futures import ThreadPoolExecutor

import pytest

from kiwi_counter.core.errors import (DuplicateUsername, InvalidCredentials,
                                      InvalidInput)
from kiwi_counter.models import User
from kiwi_counter.services import auth
from kiwi_counter.services.auth import (login_user, normalize_username,
                                        register_user)
from kiwi_counter.services.credentials import find_user_by_id


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Alice", "alice"),
        ("  BoB  ", "bob"),
        ("\tcarol\n", "carol"),
        ("   ", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_username(raw, expected):
    assert normalize_username(raw) == expected


def test_register_then_login_returns_same_user(db):
    user_id = register_user(db, "Alice", "pw1")

    assert login_user(db, "alice", "pw1") == user_id
    assert login_user(db, "  ALICE ", "pw1") == user_id
    assert find_user_by_id(db, user_id).username == "alice"


def test_password_is_stored_hashed(db):
    user_id = register_user(db, "alice", "pw1")

    stored = find_user_by_id(db, user_id).password_hash
    assert stored != "pw1"
    assert stored.startswith("$pbkdf2-sha256$")


def test_passwords_keep_surrounding_whitespace(db):
    register_user(db, "alice", " pw1 ")

    with pytest.raises(InvalidCredentials):
        login_user(db, "alice", "pw1")
    assert login_user(db, "alice", " pw1 ")


@pytest.mark.parametrize(
    "username, password",
    [
        ("", "pw1"),
        ("   ", "pw1"),
        (None, "pw1"),
        ("alice", ""),
        ("alice", "   "),
        ("alice", None),
        ("a" * 65, "pw1"),
        ("alice", "p" * 129),
    ],
)
def test_register_rejects_invalid_input(db, username, password):
    with pytest.raises(InvalidInput):
        register_user(db, username, password)
    assert db.query(User).count() == 0


@pytest.mark.parametrize("variant", ["alice", "ALICE", "  Alice ", "aLiCe\t"])
def test_register_rejects_any_case_or_whitespace_variant(db, variant):
    register_user(db, "Alice", "pw1")

    with pytest.raises(DuplicateUsername):
        register_user(db, variant, "other")


def test_concurrent_registrations_have_single_winner(session_factory, fast_hashing):
    attempts = 6

    def attempt(index):
        with session_factory() as session:
            try:
                return register_user(session, " Racer " if index % 2 else "racer", "pw")
            except DuplicateUsername:
                return None

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        results = list(pool.map(attempt, range(attempts)))

    winners = [result for result in results if result is not None]
    assert len(winners) == 1
    with session_factory() as session:
        assert session.query(User).filter_by(username="racer").count() == 1


def test_wrong_password_and_unknown_user_look_the_same(db):
    register_user(db, "alice", "pw1")

    with pytest.raises(InvalidCredentials) as wrong_password:
        login_user(db, "alice", "nope")
    with pytest.raises(InvalidCredentials) as unknown_user:
        login_user(db, "mallory", "pw1")

    assert wrong_password.value.message == unknown_user.value.message
    assert wrong_password.value.code == unknown_user.value.code
    assert wrong_password.value.status_code == unknown_user.value.status_code


def test_unknown_user_still_pays_for_a_hash(db, monkeypatch):
    calls = []
    monkeypatch.setattr(auth, "dummy_verify", lambda: calls.append("dummy"))

    with pytest.raises(InvalidCredentials):
        login_user(db, "mallory", "pw1")
    with pytest.raises(InvalidCredentials):
        login_user(db, "", "")

    assert calls == ["dummy", "dummy"]


def test_wrong_password_runs_real_verification(db, monkeypatch):
    register_user(db, "alice", "pw1")
    seen = []

    def fake_verify(password, password_hash):
        seen.append(password)
        return False

    monkeypatch.setattr(auth, "verify_password", fake_verify)

    with pytest.raises(InvalidCredentials):
        login_user(db, "alice", "nope")
    assert seen == ["nope"]


@pytest.mark.parametrize("username", ["alice", "mallory"])
def test_oversized_password_is_rejected_before_hashing(db, monkeypatch, username):
    register_user(db, "alice", "pw1")
    calls = []
    monkeypatch.setattr(auth, "dummy_verify", lambda: calls.append("dummy"))

    def refuse(password, password_hash):
        raise AssertionError("oversized password reached the hasher")

    monkeypatch.setattr(auth, "verify_password", refuse)

    with pytest.raises(InvalidCredentials):
        login_user(db, username, "p" * 5000)
    assert calls == ["dummy"]


def test_password_at_the_limit_still_logs_in(db):
    user_id = register_user(db, "alice", "p" * 128)

    assert login_user(db, "alice", "p" * 128) == user_id
    with pytest.raises(InvalidCredentials):
        login_user(db, "alice", "p" * 129)
