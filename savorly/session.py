from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .errors import NotAuthenticated


class CurrentUser(BaseModel):
    """In-memory copy of the logged-in user's row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None
    favorite_recipes: str = "[]"
    shopping_list: str = "[]"
    created_recipes_ids: str = "[]"


class UserSession:
    """Which user, if any, is authenticated in this process.

    One instance is created per application and handed to every operation
    that needs the current user.
    """

    def __init__(self):
        self.user: Optional[CurrentUser] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def set_user(self, db_user) -> CurrentUser:
        self.user = CurrentUser.model_validate(db_user)
        return self.user

    def clear(self):
        self.user = None

    def require_user(self) -> CurrentUser:
        if self.user is None:
            raise NotAuthenticated()
        return self.user
