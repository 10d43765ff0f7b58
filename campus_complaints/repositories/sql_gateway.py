"""
Relational persistence gateway built on the SQLAlchemy 2.0 async ORM.

Each gateway call runs in its own session and transaction; ``commit_change``
writes the complaint and its audit entry in one transaction. Database errors
are converted to PersistenceError.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_complaints.core.exceptions import (
    ErrorCode,
    ValidationError,
    handle_database_exception,
)
from campus_complaints.core.logging import get_logger
from campus_complaints.models.complaint import ComplaintRecord, ComplaintUpdateRecord
from campus_complaints.models.user import UserRecord
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.complaint import Complaint, ComplaintUpdate
from campus_complaints.schemas.user import User
from campus_complaints.utils.datetime_utils import ensure_utc
from campus_complaints.utils.hashing import PasswordHasher

logger = get_logger(__name__)

__all__ = ["SqlAlchemyGateway"]


# -----------------------------------------------------------------------------
# Record <-> schema mapping
# -----------------------------------------------------------------------------

def _with_utc(data: dict, *fields: str) -> dict:
    for field in fields:
        data[field] = ensure_utc(data[field])
    return data


def _complaint_from_record(record: ComplaintRecord) -> Complaint:
    data = _with_utc(record.to_dict(), "created_at", "updated_at", "resolved_at")
    return Complaint.model_validate(data)


def _apply_complaint(record: ComplaintRecord, complaint: Complaint) -> ComplaintRecord:
    for field in (
        "title", "description", "category", "location", "priority", "status",
        "reporter_id", "reporter_name", "assigned_manager_id",
        "assigned_manager_name", "image_url", "created_at", "updated_at",
        "resolved_at",
    ):
        setattr(record, field, getattr(complaint, field))
    return record


def _update_from_record(record: ComplaintUpdateRecord) -> ComplaintUpdate:
    data = _with_utc(record.to_dict(exclude=["seq"]), "created_at")
    return ComplaintUpdate.model_validate(data)


def _update_to_record(update: ComplaintUpdate) -> ComplaintUpdateRecord:
    return ComplaintUpdateRecord(
        id=update.id,
        complaint_id=update.complaint_id,
        status=update.status,
        note=update.note,
        updated_by=update.updated_by,
        updated_by_name=update.updated_by_name,
        created_at=update.created_at,
    )


def _user_from_record(record: UserRecord) -> User:
    return User.model_validate(record)


class SqlAlchemyGateway(PersistenceGateway):
    """
    Gateway over a relational database.

    Args:
        session_factory: ``async_sessionmaker`` from ``db.session``
        bcrypt_rounds: Cost factor for stored password hashes

    The signed-in user is remembered per gateway instance, so create one
    gateway per client session when several users share a database.
    """

    supports_atomic_writes = True

    def __init__(
        self,
        session_factory: async_sessionmaker,
        bcrypt_rounds: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._bcrypt_rounds = bcrypt_rounds
        self._current_user_id: Optional[str] = None

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Session with a transaction that commits on success and rolls back on error."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error during {operation}: {e}", exc_info=True)
            raise handle_database_exception(e, operation) from e

    # -------------------------------------------------------------------------
    # Complaints
    # -------------------------------------------------------------------------

    async def get_complaints(self) -> List[Complaint]:
        async with self._transaction("get complaints") as session:
            result = await session.scalars(
                select(ComplaintRecord).order_by(ComplaintRecord.created_at)
            )
            return [_complaint_from_record(r) for r in result.all()]

    async def save_complaint(self, complaint: Complaint) -> None:
        async with self._transaction("save complaint") as session:
            await self._upsert_complaint(session, complaint)

    async def get_complaint_updates(self, complaint_id: str) -> List[ComplaintUpdate]:
        async with self._transaction("get complaint updates") as session:
            result = await session.scalars(
                select(ComplaintUpdateRecord)
                .where(ComplaintUpdateRecord.complaint_id == complaint_id)
                .order_by(ComplaintUpdateRecord.seq)
            )
            return [_update_from_record(r) for r in result.all()]

    async def save_complaint_update(self, update: ComplaintUpdate) -> None:
        async with self._transaction("save complaint update") as session:
            session.add(_update_to_record(update))

    async def commit_change(self, complaint: Complaint, update: ComplaintUpdate) -> None:
        async with self._transaction("commit complaint change") as session:
            await self._upsert_complaint(session, complaint)
            # complaint row must exist before the update row references it
            await session.flush()
            session.add(_update_to_record(update))

    @staticmethod
    async def _upsert_complaint(session: AsyncSession, complaint: Complaint) -> None:
        record = await session.get(ComplaintRecord, complaint.id)
        if record is None:
            record = ComplaintRecord(id=complaint.id)
            session.add(record)
        _apply_complaint(record, complaint)

    # -------------------------------------------------------------------------
    # Users & identity
    # -------------------------------------------------------------------------

    async def get_all_users(self) -> List[User]:
        async with self._transaction("get users") as session:
            result = await session.scalars(select(UserRecord).order_by(UserRecord.name))
            return [_user_from_record(r) for r in result.all()]

    async def add_user(self, user: User, password: str) -> None:
        password_hash = PasswordHasher.hash_password(password, self._bcrypt_rounds)
        async with self._transaction("add user") as session:
            existing = await session.scalar(
                select(UserRecord).where(UserRecord.email == user.email)
            )
            if existing is not None:
                raise ValidationError(
                    "Email is already registered",
                    field_errors={"email": ["Email is already registered"]},
                    error_code=ErrorCode.DUPLICATE_ENTRY,
                )
            if await session.get(UserRecord, user.id) is not None:
                raise ValidationError(
                    "User id is already taken",
                    field_errors={"id": ["User id is already taken"]},
                )
            session.add(
                UserRecord(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    role=user.role,
                    department=user.department,
                    employee_id=user.employee_id,
                    password_hash=password_hash,
                )
            )

    async def login(self, email: str, password: str) -> Optional[User]:
        normalized = (email or "").strip().lower()
        async with self._transaction("login") as session:
            record = await session.scalar(
                select(UserRecord).where(UserRecord.email == normalized)
            )
            if record is None:
                logger.info("Login rejected: unknown email")
                return None
            if not PasswordHasher.verify_password(password, record.password_hash):
                logger.info("Login rejected: bad password", extra={"user_ref": record.id})
                return None
            user = _user_from_record(record)

        self._current_user_id = user.id
        logger.info("User logged in", extra={"user_ref": user.id})
        return user

    async def logout(self) -> None:
        self._current_user_id = None

    async def get_current_user(self) -> Optional[User]:
        if self._current_user_id is None:
            return None
        async with self._transaction("get current user") as session:
            record = await session.get(UserRecord, self._current_user_id)
            return _user_from_record(record) if record is not None else None
