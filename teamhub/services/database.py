"""TinyDB database service"""

import copy
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from teamhub.config import settings

logger = logging.getLogger(__name__)


class DuplicateRecordError(ValueError):
    """Raised when an insert would violate a uniqueness rule"""


def utcnow() -> datetime:
    """Naive UTC now, matching the stored ISO timestamps"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def plain(doc) -> Optional[dict]:
    """Detach a TinyDB document so callers can mutate it freely"""
    if doc is None:
        return None
    return copy.deepcopy(dict(doc))


class Database:
    """Database service using TinyDB

    One table per collection. Documents carry their own string ``id``;
    TinyDB's integer doc ids are never exposed.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path
        self.db: Optional[TinyDB] = None

    def initialize(self, in_memory: bool = False):
        """Initialize database connection"""
        if self.db is not None:
            return
        if in_memory:
            self.db = TinyDB(storage=MemoryStorage)
            logger.info("Database connected: in-memory")
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = TinyDB(str(self.db_path))
        logger.info(f"Database connected: {self.db_path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None

    @property
    def roles(self):
        return self.db.table("roles")

    @property
    def users(self):
        return self.db.table("users")

    @property
    def projects(self):
        return self.db.table("projects")

    @property
    def activities(self):
        return self.db.table("activities")

    @property
    def attendance(self):
        return self.db.table("attendance")

    @property
    def blogs(self):
        return self.db.table("blogs")

    @property
    def meetings(self):
        return self.db.table("meetings")

    @property
    def papers(self):
        return self.db.table("papers")

    @property
    def event_reports(self):
        return self.db.table("event_reports")

    def generate_id(self) -> str:
        return uuid.uuid4().hex[:12]

    def timestamp(self) -> str:
        return utcnow().isoformat()

    # =========================================================================
    # Generic helpers
    # =========================================================================

    def get_by_id(self, table, doc_id: str) -> Optional[dict]:
        """Get a detached document by its string id"""
        return plain(table.get(Q.id == doc_id))

    def replace(self, table, doc: dict) -> dict:
        """Write back a whole document loaded with ``get_by_id``"""
        table.update(doc, Q.id == doc["id"])
        return doc

    # =========================================================================
    # User Operations
    # =========================================================================

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        return self.get_by_id(self.users, user_id)

    def get_user_by_email(self, email: str) -> Optional[dict]:
        return plain(self.users.get(Q.email == normalize_email(email)))

    def create_user(self, user_data: dict) -> dict:
        """Create a new user"""
        user_data.setdefault("id", self.generate_id())
        user_data["email"] = normalize_email(user_data["email"])
        user_data.setdefault("is_active", True)
        user_data["created_at"] = self.timestamp()
        user_data["updated_at"] = user_data["created_at"]
        self.users.insert(user_data)
        logger.info(f"User created: {user_data['id']}")
        return user_data

    def update_user(self, user_id: str, updates: dict) -> Optional[dict]:
        updates["updated_at"] = self.timestamp()
        self.users.update(updates, Q.id == user_id)
        return self.get_user_by_id(user_id)

    # =========================================================================
    # Role Directory Operations
    # =========================================================================

    def get_role_by_email(self, email: str) -> Optional[dict]:
        return plain(self.roles.get(Q.email == normalize_email(email)))

    def create_role(self, role_data: dict) -> dict:
        """Create a Role Directory entry, one per normalized email"""
        email = normalize_email(role_data["email"])
        if self.roles.contains(Q.email == email):
            raise DuplicateRecordError(f"Role already exists for {email}")
        role_data.setdefault("id", self.generate_id())
        role_data["email"] = email
        role_data.setdefault("assigned_by", "system")
        role_data.setdefault("assigned_at", self.timestamp())
        self.roles.insert(role_data)
        logger.info(f"Role assigned: {email} as {role_data.get('role')}")
        return role_data

    def all_role_emails(self) -> List[str]:
        return [r["email"] for r in self.roles.all()]

    # =========================================================================
    # Attendance Operations
    # =========================================================================

    def get_attendance_for_day(self, user_id: str, date: str) -> Optional[dict]:
        return plain(self.attendance.get((Q.user_id == user_id) & (Q.date == date)))

    def insert_attendance(self, record: dict) -> dict:
        """Insert an attendance record; one per (user_id, date)"""
        if self.attendance.contains((Q.user_id == record["user_id"]) & (Q.date == record["date"])):
            raise DuplicateRecordError("Attendance record already exists for this user on this date")
        self.attendance.insert(record)
        return record


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


# Query helper
Q = Query()

db = Database(Path(settings.database_path))
