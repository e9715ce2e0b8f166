"""
users/store.py -- SQLAlchemy Core persistence layer for users and applications.

Pattern: Repository + Data Mapper. UserStore is the repository;
_row_to_user / _row_to_application are the mappers. Service code in
users/directory.py and users/tracker.py never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Integrity:
  users.username is the primary key and applications carries
  UNIQUE(username, job_id). These constraints are the authoritative guard
  against concurrent duplicate creates/applies -- the services' existence
  checks only give a friendlier early error. Inserts let IntegrityError
  propagate so the services can translate it into ConflictError.

  delete_user() removes the user's applications and the user row in one
  transaction. The foreign key also cascades, but the explicit delete keeps
  the behaviour identical on backends with foreign keys disabled.

DB path: jobly.db at the project root unless DATABASE_URL is set.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, UniqueConstraint, func, select
from sqlalchemy.engine import Engine

from core.database import build_engine, now_iso
from users.models import JobApplication, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("username", String(25), primary_key=True),
    Column("first_name", String(30), nullable=False),
    Column("last_name", String(30), nullable=False),
    Column("email", String(60), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("is_admin", Integer, nullable=False, server_default="0"),  # boolean stored as 0/1
    Column("created_at", String(32), nullable=False),
)

_applications = Table(
    "applications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "username",
        String(25),
        ForeignKey("users.username", ondelete="CASCADE"),
        nullable=False,
    ),
    # Jobs live in the job catalog, possibly another database -- no FK.
    Column("job_id", Integer, nullable=False),
    Column("applied_at", String(32), nullable=False),
    UniqueConstraint("username", "job_id", name="uq_application_user_job"),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and JobApplication entities.

    Usage:
        store = UserStore("sqlite:///jobly.db")
        store.create_user(User(username="u1", ..., hashed_password=hash_password("secret")))
        user = store.get_by_username("u1")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = build_engine(db_url)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def has_users(self) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def create_user(self, user: User) -> None:
        """Insert a new user.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    username=user.username,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    is_admin=1 if user.is_admin else 0,
                    created_at=now_iso(),
                )
            )
            conn.commit()

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users ordered by username."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.username)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, username: str, **fields) -> bool:
        """Update mutable columns on an existing user.

        Accepted fields: first_name, last_name, email, hashed_password, is_admin.
        is_admin must be passed as bool; this method converts to int for SQLite.

        Returns True if a row was updated, False if username was not found.
        """
        if "is_admin" in fields:
            fields["is_admin"] = 1 if fields["is_admin"] else 0
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.username == username).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, username: str) -> bool:
        """Delete a user and all of their applications atomically.

        Returns True if the user existed, False otherwise.
        """
        with self.engine.begin() as conn:
            conn.execute(_applications.delete().where(_applications.c.username == username))
            result = conn.execute(_users.delete().where(_users.c.username == username))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Application queries
    # ------------------------------------------------------------------

    def create_application(self, username: str, job_id: int) -> JobApplication:
        """Record that username applied to job_id.

        Raises sqlalchemy.exc.IntegrityError if the pair already exists or the
        user row is gone.
        """
        applied_at = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _applications.insert().values(username=username, job_id=job_id, applied_at=applied_at)
            )
            conn.commit()
        return JobApplication(
            id=result.inserted_primary_key[0],
            username=username,
            job_id=job_id,
            applied_at=applied_at,
        )

    def has_application(self, username: str, job_id: int) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(_applications.c.id).where(
                    (_applications.c.username == username) & (_applications.c.job_id == job_id)
                )
            ).fetchone()
        return row is not None

    def get_applications(self, username: str) -> list[JobApplication]:
        """Return a user's applications ordered by job id ascending."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _applications.select()
                .where(_applications.c.username == username)
                .order_by(_applications.c.job_id)
            ).fetchall()
        return [_row_to_application(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        hashed_password=row.hashed_password,
        is_admin=bool(row.is_admin),
        created_at=row.created_at,
    )


def _row_to_application(row) -> JobApplication:
    return JobApplication(
        id=row.id,
        username=row.username,
        job_id=row.job_id,
        applied_at=row.applied_at,
    )
