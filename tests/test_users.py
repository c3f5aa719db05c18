import json

import pytest

from savorly import models, users
from savorly.errors import InvalidCredentials, UserNotFound


def test_register_logs_in_and_writes_snapshot(db, prefs, snapshot_path):
    ok, message = users.register(
        db, prefs, "alice", "Alice@Example.com ", "secret1", "secret1"
    )
    assert ok is True
    assert message
    assert prefs.session.is_logged_in
    assert prefs.session.user.username == "alice"

    row = db.query(models.User).one()
    assert row.email == "alice@example.com"
    assert row.password_hash == users.hash_password("secret1")
    assert row.favorite_recipes == row.shopping_list == row.created_recipes_ids == "[]"

    data = json.loads(snapshot_path.read_text(encoding="utf-8"))
    assert data["userId"] == row.id
    assert data["favoriteRecipes"] == "[]"
    assert "lastLogin" in data


def test_register_duplicate_email(db, prefs):
    assert users.register(db, prefs, "alice", "alice@example.com", "secret1", "secret1")[0]
    ok, message = users.register(
        db, prefs, "alice2", "alice@example.com", "secret1", "secret1"
    )
    assert ok is False
    assert "email" in message
    assert db.query(models.User).count() == 1


def test_register_duplicate_username(db, prefs):
    users.register(db, prefs, "alice", "alice@example.com", "secret1", "secret1")
    ok, message = users.register(db, prefs, "alice", "other@example.com", "x", "x")
    assert ok is False
    assert "username" in message


def test_register_password_mismatch(db, user_session, prefs):
    ok, message = users.register(db, prefs, "bob", "bob@example.com", "a", "b")
    assert ok is False
    assert message == "Passwords do not match"
    assert not user_session.is_logged_in
    assert db.query(models.User).count() == 0


def test_authenticate_errors(db):
    users.create_account(db, "carol", "carol@example.com", "pw", "pw")
    with pytest.raises(UserNotFound):
        users.authenticate(db, "nobody@example.com", "pw")
    with pytest.raises(InvalidCredentials):
        users.authenticate(db, "carol@example.com", "wrong")
    assert users.authenticate(db, " CAROL@example.com", "pw").username == "carol"


def test_login_failures_are_returned(db, prefs, accounts_path):
    users.create_account(db, "carol", "carol@example.com", "pw", "pw")
    ok, message = users.login(db, prefs, "carol@example.com", "bad", accounts_path)
    assert (ok, message) == (False, "Wrong password")
    ok, _ = users.login(db, prefs, "x@example.com", "pw", accounts_path)
    assert ok is False
    assert not prefs.session.is_logged_in
    assert users.get_saved_accounts(accounts_path) == []


def test_login_remembers_account_once(db, prefs, accounts_path):
    users.create_account(db, "carol", "carol@example.com", "pw", "pw")
    assert users.login(db, prefs, "carol@example.com", "pw", accounts_path)[0]
    users.logout(prefs)
    assert users.login(db, prefs, "carol@example.com", "pw", accounts_path)[0]
    assert users.get_saved_accounts(accounts_path) == ["carol@example.com"]


def test_logout_saves_snapshot_then_clears(db, prefs, snapshot_path):
    users.register(db, prefs, "dave", "dave@example.com", "pw", "pw")
    prefs.update_favorites(db, [5])
    snapshot_path.unlink()

    users.logout(prefs)
    assert not prefs.session.is_logged_in
    assert json.loads(snapshot_path.read_text(encoding="utf-8"))["favoriteRecipes"] == "[5]"


def test_saved_accounts_tolerates_garbage(accounts_path):
    accounts_path.write_text("{not json", encoding="utf-8")
    assert users.get_saved_accounts(accounts_path) == []
