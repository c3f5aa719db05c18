# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `savorly` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from savorly import models, schemas
from savorly.preferences import PreferenceStore
from savorly.session import UserSession


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    # Use StaticPool so the same in-memory database is shared across connections
    eng = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_session():
    return UserSession()


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "user_data.json"


@pytest.fixture
def accounts_path(tmp_path):
    return tmp_path / "saved_accounts.json"


@pytest.fixture
def prefs(user_session, snapshot_path):
    return PreferenceStore(user_session, snapshot_path=snapshot_path,
                           precedence="snapshot")


@pytest.fixture
def make_form():
    def _make(**overrides):
        data = {
            "title": "Pancakes",
            "short_description": "Fluffy pancakes",
            "description": "Simple breakfast pancakes",
            "image_path": "pancakes.jpg",
            "preparation_time": 20,
            "servings": 2,
            "type": models.RecipeType.FOOD,
            "ingredients": ["flour 200g", "milk 300ml", "egg 2"],
            "steps": ["Mix dry ingredients", "Add milk and eggs", "Fry"],
            "tags": ["#breakfast", "#quick"],
        }
        data.update(overrides)
        return schemas.RecipeCreate(**data)
    return _make
