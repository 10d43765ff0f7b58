"""
In-memory persistence gateway.

Keeps every collection as a JSON document in a plain key/value mapping, the
same layout a device-local key/value store uses. Reads always parse fresh
copies, so callers can never mutate stored state by accident.
"""

import json
from typing import Dict, List, MutableMapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from campus_complaints.core.exceptions import (
    ErrorCode,
    PersistenceError,
    ValidationError,
    handle_database_exception,
)
from campus_complaints.core.logging import get_logger
from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.schemas.complaint import Complaint, ComplaintUpdate
from campus_complaints.schemas.user import User
from campus_complaints.utils.hashing import PasswordHasher

logger = get_logger(__name__)

__all__ = ["InMemoryGateway", "STORAGE_KEYS"]

STORAGE_KEYS = {
    "CURRENT_USER": "@current_user",
    "USERS": "@users",
    "CREDENTIALS": "@credentials",
    "COMPLAINTS": "@complaints",
    "COMPLAINT_UPDATES": "@complaint_updates",
}

_users_adapter = TypeAdapter(List[User])
_complaints_adapter = TypeAdapter(List[Complaint])
_updates_adapter = TypeAdapter(List[ComplaintUpdate])


class InMemoryGateway(PersistenceGateway):
    """
    Gateway over a key/value mapping of JSON documents.

    Args:
        store: Backing mapping; a fresh dict when omitted
        bcrypt_rounds: Cost factor for stored password hashes
    """

    supports_atomic_writes = True

    def __init__(
        self,
        store: Optional[MutableMapping[str, str]] = None,
        bcrypt_rounds: Optional[int] = None,
    ):
        self._store: MutableMapping[str, str] = store if store is not None else {}
        self._bcrypt_rounds = bcrypt_rounds
        self._initialize()

    def _initialize(self) -> None:
        for key in ("USERS", "COMPLAINTS", "COMPLAINT_UPDATES"):
            self._store.setdefault(STORAGE_KEYS[key], "[]")
        self._store.setdefault(STORAGE_KEYS["CREDENTIALS"], "{}")

    # -------------------------------------------------------------------------
    # Document helpers
    # -------------------------------------------------------------------------

    def _read(self, key: str, adapter: TypeAdapter) -> list:
        try:
            return adapter.validate_json(self._store.get(STORAGE_KEYS[key], "[]"))
        except PydanticValidationError as e:
            logger.error(f"Corrupted document under {STORAGE_KEYS[key]}", exc_info=True)
            raise handle_database_exception(e, f"read {STORAGE_KEYS[key]}")

    def _write(self, key: str, adapter: TypeAdapter, items: list) -> None:
        self._store[STORAGE_KEYS[key]] = adapter.dump_json(items).decode("utf-8")

    def _credentials(self) -> Dict[str, str]:
        try:
            return json.loads(self._store.get(STORAGE_KEYS["CREDENTIALS"], "{}"))
        except ValueError as e:
            raise handle_database_exception(e, "read credentials")

    @staticmethod
    def _upsert(complaints: List[Complaint], complaint: Complaint) -> List[Complaint]:
        for index, existing in enumerate(complaints):
            if existing.id == complaint.id:
                complaints[index] = complaint
                return complaints
        complaints.append(complaint)
        return complaints

    # -------------------------------------------------------------------------
    # Complaints
    # -------------------------------------------------------------------------

    async def get_complaints(self) -> List[Complaint]:
        return self._read("COMPLAINTS", _complaints_adapter)

    async def save_complaint(self, complaint: Complaint) -> None:
        complaints = self._upsert(self._read("COMPLAINTS", _complaints_adapter), complaint)
        self._write("COMPLAINTS", _complaints_adapter, complaints)

    async def get_complaint_updates(self, complaint_id: str) -> List[ComplaintUpdate]:
        updates = self._read("COMPLAINT_UPDATES", _updates_adapter)
        return [u for u in updates if u.complaint_id == complaint_id]

    async def save_complaint_update(self, update: ComplaintUpdate) -> None:
        updates = self._read("COMPLAINT_UPDATES", _updates_adapter)
        if any(u.id == update.id for u in updates):
            raise PersistenceError(
                f"Complaint update {update.id} already recorded",
                operation="save_complaint_update",
            )
        updates.append(update)
        self._write("COMPLAINT_UPDATES", _updates_adapter, updates)

    async def commit_change(self, complaint: Complaint, update: ComplaintUpdate) -> None:
        # Both documents are prepared before either is written.
        complaints = self._upsert(self._read("COMPLAINTS", _complaints_adapter), complaint)
        updates = self._read("COMPLAINT_UPDATES", _updates_adapter)
        if any(u.id == update.id for u in updates):
            raise PersistenceError(
                f"Complaint update {update.id} already recorded",
                operation="commit_change",
            )
        updates.append(update)

        complaints_json = _complaints_adapter.dump_json(complaints).decode("utf-8")
        updates_json = _updates_adapter.dump_json(updates).decode("utf-8")
        self._store[STORAGE_KEYS["COMPLAINTS"]] = complaints_json
        self._store[STORAGE_KEYS["COMPLAINT_UPDATES"]] = updates_json

    # -------------------------------------------------------------------------
    # Users & identity
    # -------------------------------------------------------------------------

    async def get_all_users(self) -> List[User]:
        return self._read("USERS", _users_adapter)

    async def add_user(self, user: User, password: str) -> None:
        users = self._read("USERS", _users_adapter)
        if any(u.email == user.email for u in users):
            raise ValidationError(
                "Email is already registered",
                field_errors={"email": ["Email is already registered"]},
                error_code=ErrorCode.DUPLICATE_ENTRY,
            )
        if any(u.id == user.id for u in users):
            raise ValidationError(
                "User id is already taken",
                field_errors={"id": ["User id is already taken"]},
            )

        credentials = self._credentials()
        credentials[user.id] = PasswordHasher.hash_password(password, self._bcrypt_rounds)
        users.append(user)

        self._write("USERS", _users_adapter, users)
        self._store[STORAGE_KEYS["CREDENTIALS"]] = json.dumps(credentials)

    async def login(self, email: str, password: str) -> Optional[User]:
        normalized = (email or "").strip().lower()
        user = next(
            (u for u in self._read("USERS", _users_adapter) if u.email == normalized),
            None,
        )
        if user is None:
            logger.info("Login rejected: unknown email")
            return None

        if not PasswordHasher.verify_password(password, self._credentials().get(user.id)):
            logger.info("Login rejected: bad password", extra={"user_ref": user.id})
            return None

        self._store[STORAGE_KEYS["CURRENT_USER"]] = user.model_dump_json()
        logger.info("User logged in", extra={"user_ref": user.id})
        return user

    async def logout(self) -> None:
        self._store.pop(STORAGE_KEYS["CURRENT_USER"], None)

    async def get_current_user(self) -> Optional[User]:
        raw = self._store.get(STORAGE_KEYS["CURRENT_USER"])
        if not raw:
            return None
        try:
            return User.model_validate_json(raw)
        except PydanticValidationError as e:
            raise handle_database_exception(e, "read current user")
