"""
User registry.

Registered users live in an in-memory map guarded by its own lock and are
written through to the sqlite users table on every put. Lookups hand out
copies so callers never share a User with the map.
"""
import copy
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

import db
from storage.authors import Role, User

logger = logging.getLogger(__name__)


def _user_from_row(row: dict) -> User:
    return User(
        name=row["name"],
        email=row["email"],
        url=row["url"],
        approved=row["approved"],
        roles=[Role(role) for role in row["roles"]],
    )


class UserRegistry:
    """Registered users keyed by exact email."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Args:
            db_path: sqlite file to persist to; None keeps the registry in memory only
        """
        self.db_path = Path(db_path) if db_path else None
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    @classmethod
    def load(cls, db_path: Union[str, Path], initial_user: Optional[User] = None) -> "UserRegistry":
        """
        Load the registry from db_path.

        When the database is new and initial_user is given, it is stored as
        the first user.
        """
        registry = cls(db_path)
        created = db.init_db(registry.db_path)

        if created:
            logger.info(f"Creating new user database at {registry.db_path}")
            if initial_user is not None:
                registry.put(initial_user)
            return registry

        logger.info(f"Loading user database from {registry.db_path}")
        with registry._lock:
            for row in db.list_users(registry.db_path):
                user = _user_from_row(row)
                registry._users[user.email] = user
        logger.info(f"Loaded {len(registry._users)} users")

        return registry

    def lookup(self, email: str) -> Optional[User]:
        """Get a copy of the user registered under exactly this email."""
        with self._lock:
            user = self._users.get(email)
            return copy.deepcopy(user) if user is not None else None

    def put(self, user: User) -> None:
        """
        Insert or replace a user and persist it.

        Puts are serialized so the map and the database always agree on the
        last write. The database is written first; if that fails the map is
        left untouched.
        """
        stored = copy.deepcopy(user)
        with self._write_lock:
            if self.db_path is not None:
                db.save_user(
                    email=stored.email,
                    name=stored.name,
                    url=stored.url,
                    approved=stored.approved,
                    roles=[role.value for role in stored.roles],
                    db_path=self.db_path,
                )
                logger.info(f"Saved user {stored.email}")

            with self._lock:
                self._users[stored.email] = stored

    def all(self) -> List[User]:
        with self._lock:
            return [copy.deepcopy(user) for user in self._users.values()]
