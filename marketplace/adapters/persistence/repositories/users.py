# marketplace/adapters/persistence/repositories/users.py

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from marketplace.adapters.persistence.models import AccountRole, User
from marketplace.core.domain.models import UserIdentity


class UsersRepository:
    """
    Local copy of the accounts the upstream session layer vouches for.

    Orders and products reference ``users.id``, so the caller is recorded
    here before anything that points at it is written.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def ensure(self, identity: UserIdentity) -> None:
        """
        Insert the caller unless a row with that id already exists.

        Runs as a single INSERT that ignores conflicts, so two first-time
        requests from the same caller cannot collide on the primary key.
        Existing rows are left untouched.
        """
        values: Dict[str, Any] = {
            "id": identity.id,
            "name": identity.name,
            "role": AccountRole(identity.role.value.upper()),
        }
        dialect = self.session.get_bind().dialect.name

        if dialect == "postgresql":
            stmt = pg_insert(User).values(**values).on_conflict_do_nothing(index_elements=[User.id])
        elif dialect == "sqlite":
            stmt = sqlite_insert(User).values(**values).on_conflict_do_nothing(index_elements=[User.id])
        else:
            # MySQL / MariaDB
            stmt = insert(User).values(**values).prefix_with("IGNORE")

        self.session.execute(stmt)
