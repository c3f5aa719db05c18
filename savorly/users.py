import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from . import crud
from .config import settings
from .errors import (
    AuthError, DuplicateEmail, DuplicateUsername, InvalidCredentials,
    PasswordMismatch, PersistenceError, UserNotFound,
)
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def authenticate(db: Session, email: str, password: str):
    user = crud.get_user_by_email(db, normalize_email(email))
    if user is None:
        raise UserNotFound()
    if user.password_hash != hash_password(password):
        raise InvalidCredentials()
    return user


def create_account(db: Session, username: str, email: str, password: str,
                   confirm_password: str):
    if password != confirm_password:
        raise PasswordMismatch()
    email = normalize_email(email)
    username = (username or "").strip()
    if crud.get_user_by_email(db, email) is not None:
        raise DuplicateEmail()
    if crud.get_user_by_username(db, username) is not None:
        raise DuplicateUsername()
    return crud.create_user(db, username, email, hash_password(password))


def login(db: Session, prefs: PreferenceStore, email: str, password: str,
          accounts_path: Optional[Path] = None) -> Tuple[bool, str]:
    try:
        user = authenticate(db, email, password)
    except AuthError as exc:
        logger.info("Login refused for %r: %s", email, exc)
        return False, str(exc)

    prefs.session.set_user(user)
    prefs.load_snapshot(db)
    save_account(email, accounts_path)
    logger.info("User %s logged in", user.username)
    return True, "Logged in"


def register(db: Session, prefs: PreferenceStore, username: str, email: str,
             password: str, confirm_password: str) -> Tuple[bool, str]:
    try:
        user = create_account(db, username, email, password, confirm_password)
    except AuthError as exc:
        return False, str(exc)
    except PersistenceError as exc:
        return False, f"Registration failed: {exc}"

    prefs.session.set_user(user)
    prefs.save_snapshot()
    logger.info("Registered user %s", user.username)
    return True, "Registration successful"


def logout(prefs: PreferenceStore):
    prefs.save_snapshot()
    prefs.session.clear()


def get_saved_accounts(accounts_path: Optional[Path] = None) -> List[str]:
    path = Path(accounts_path or settings.accounts_path)
    try:
        if path.exists():
            accounts = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(accounts, list):
                return [a for a in accounts if isinstance(a, str)]
    except (OSError, ValueError):
        logger.warning("Could not read saved accounts from %s", path)
    return []


def save_account(email: str, accounts_path: Optional[Path] = None):
    path = Path(accounts_path or settings.accounts_path)
    accounts = get_saved_accounts(path)
    if email in accounts:
        return
    accounts.append(email)
    try:
        path.write_text(json.dumps(accounts, ensure_ascii=False), encoding="utf-8")
    except OSError:
        logger.warning("Could not remember account in %s", path)
