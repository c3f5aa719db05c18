import json

from savorly import crud, users
from savorly.preferences import PreferenceStore
from savorly.schemas import UserSnapshot
from savorly.session import UserSession


def _login(db, prefs, email="eve@example.com"):
    ok, _ = users.login(db, prefs, email, "pw", prefs.snapshot_path.parent / "accounts.json")
    assert ok


def test_favorites_round_trip(db, prefs):
    users.register(db, prefs, "eve", "eve@example.com", "pw", "pw")
    prefs.update_favorites(db, [3, 1, 2])
    assert set(prefs.get_favorites()) == {1, 2, 3}

    row = crud.get_user(db, prefs.session.user.id)
    assert json.loads(row.favorite_recipes) == [3, 1, 2]


def test_updates_are_mirrored_to_snapshot(db, prefs, snapshot_path):
    users.register(db, prefs, "eve", "eve@example.com", "pw", "pw")
    prefs.update_shopping_list(db, '[{"name": "milk", "isChecked": false}]')
    prefs.add_created_recipe(db, 7)
    prefs.add_created_recipe(db, 7)

    data = json.loads(snapshot_path.read_text(encoding="utf-8"))
    row = crud.get_user(db, prefs.session.user.id)
    assert data["shoppingList"] == row.shopping_list
    assert data["createdRecipesIds"] == row.created_recipes_ids == "[7]"
    assert prefs.get_created_recipes() == [7]

    prefs.remove_created_recipe(db, 7)
    assert prefs.get_created_recipes() == []


def test_snapshot_wins_on_login(db, prefs, snapshot_path):
    user = users.create_account(db, "eve", "eve@example.com", "pw", "pw")
    user.favorite_recipes = "[1, 2]"
    db.commit()
    snapshot_path.write_text(
        UserSnapshot(user_id=user.id, favorite_recipes="[3]").model_dump_json(by_alias=True),
        encoding="utf-8",
    )

    _login(db, prefs)
    assert prefs.get_favorites() == [3]
    db.expire_all()
    assert crud.get_user(db, user.id).favorite_recipes == "[3]"


def test_snapshot_of_other_user_is_ignored(db, prefs, snapshot_path):
    user = users.create_account(db, "eve", "eve@example.com", "pw", "pw")
    user.favorite_recipes = "[1, 2]"
    db.commit()
    snapshot_path.write_text(
        UserSnapshot(user_id=user.id + 100, favorite_recipes="[3]").model_dump_json(by_alias=True),
        encoding="utf-8",
    )

    _login(db, prefs)
    assert prefs.get_favorites() == [1, 2]


def test_database_precedence_rewrites_snapshot(db, user_session, snapshot_path):
    prefs = PreferenceStore(user_session, snapshot_path=snapshot_path,
                            precedence="database")
    user = users.create_account(db, "eve", "eve@example.com", "pw", "pw")
    user.favorite_recipes = "[1, 2]"
    db.commit()
    snapshot_path.write_text(
        UserSnapshot(user_id=user.id, favorite_recipes="[3]").model_dump_json(by_alias=True),
        encoding="utf-8",
    )

    _login(db, prefs)
    assert prefs.get_favorites() == [1, 2]
    assert json.loads(snapshot_path.read_text(encoding="utf-8"))["favoriteRecipes"] == "[1, 2]"


def test_broken_snapshot_is_ignored(db, prefs, snapshot_path):
    users.create_account(db, "eve", "eve@example.com", "pw", "pw")
    snapshot_path.write_text("{broken", encoding="utf-8")

    _login(db, prefs)
    assert prefs.get_favorites() == []


def test_undecodable_snapshot_is_ignored(db, prefs, snapshot_path):
    users.create_account(db, "eve", "eve@example.com", "pw", "pw")
    snapshot_path.write_bytes(b'{"userId": 1, "favoriteRecipes": "\xff\xfe"}')

    _login(db, prefs)
    assert prefs.session.is_logged_in
    assert prefs.get_favorites() == []


def test_logged_out_store_is_inert(db, snapshot_path):
    prefs = PreferenceStore(UserSession(), snapshot_path=snapshot_path)
    prefs.update_favorites(db, [1])
    prefs.save_snapshot()
    assert prefs.get_favorites() == []
    assert prefs.get_shopping_list() == ""
    assert not snapshot_path.exists()


def test_snapshot_write_failure_keeps_database(db, user_session, tmp_path):
    # parent directory does not exist, so every snapshot write fails
    prefs = PreferenceStore(user_session, snapshot_path=tmp_path / "missing" / "u.json")
    users.register(db, prefs, "eve", "eve@example.com", "pw", "pw")
    prefs.update_favorites(db, [4])

    assert prefs.get_favorites() == [4]
    assert crud.get_user(db, user_session.user.id).favorite_recipes == "[4]"
