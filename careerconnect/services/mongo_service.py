"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. users     - credentials, role, profile and company info
2. jobs      - postings owned by an employer, with applicant references
3. messages  - direct messages between two users

Each service is built with an explicit Database handle. Services return
plain dicts keyed the same way as the response schemas (snake_case, ids as
strings) so routes can hand them straight to model_validate().
"""

import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import structlog
from bson import ObjectId
from passlib.context import CryptContext
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from careerconnect.core.auth import dummy_verify, hash_password, verify_password
from careerconnect.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from careerconnect.db.mongodb import COLLECTIONS
from careerconnect.schemas.schemas import (
    JobCreate,
    JobStatus,
    JobUpdate,
    RegisterRequest,
    UserUpdate,
)

logger = structlog.get_logger()


# ============================================================
# HELPERS
# ============================================================

def utcnow() -> datetime:
    """Current UTC time at BSON precision (milliseconds)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def parse_object_id(value: str, resource: str = "Resource") -> ObjectId:
    """Turn a path/body id into an ObjectId; malformed ids are simply not found."""
    if not value or not ObjectId.is_valid(value):
        raise NotFoundError(f"{resource} not found")
    return ObjectId(value)


def serialize_user(doc: dict) -> dict:
    """User document -> response dict. The password hash never leaves here."""
    return {
        "id": str(doc["_id"]),
        "email": doc["email"],
        "first_name": doc["first_name"],
        "last_name": doc["last_name"],
        "role": doc["role"],
        "profile": doc.get("profile"),
        "company": doc.get("company"),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }


def summarize_user(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    return {
        "id": str(doc["_id"]),
        "email": doc["email"],
        "first_name": doc["first_name"],
        "last_name": doc["last_name"],
    }


def summarize_poster(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    return {
        "id": str(doc["_id"]),
        "first_name": doc["first_name"],
        "last_name": doc["last_name"],
        "company": doc.get("company"),
    }


# Public fields used when another user is embedded in a response
USER_SUMMARY_PROJECTION = {"email": 1, "first_name": 1, "last_name": 1, "company": 1}


def load_users(collection: Collection, ids: Iterable[ObjectId]) -> Dict[ObjectId, dict]:
    """Fetch the summary fields of many users in one query, keyed by _id."""
    unique_ids = list(set(ids))
    if not unique_ids:
        return {}
    cursor = collection.find({"_id": {"$in": unique_ids}}, USER_SUMMARY_PROJECTION)
    return {doc["_id"]: doc for doc in cursor}


# ============================================================
# USERS COLLECTION
# ============================================================

class UserService:
    """
    Handles user accounts: registration, login, profile edits.
    Passwords are hashed on create and rehashed only when they change.
    """

    def __init__(self, db: Database, pwd_context: CryptContext):
        self.collection: Collection = db[COLLECTIONS["users"]]
        self.pwd_context = pwd_context

    def register(self, data: RegisterRequest) -> dict:
        """
        Create a user account.

        Email uniqueness is enforced by the unique index on users.email;
        a second registration with the same address raises ConflictError.
        """
        now = utcnow()
        doc = {
            "email": data.email.strip().lower(),
            "password_hash": hash_password(self.pwd_context, data.password),
            "first_name": data.first_name,
            "last_name": data.last_name,
            "role": data.role.value,
            "profile": data.profile.model_dump() if data.profile else None,
            "company": data.company.model_dump() if data.company else None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("Email already registered")

        doc["_id"] = result.inserted_id
        logger.info("user.registered", user_id=str(result.inserted_id), role=doc["role"])
        return serialize_user(doc)

    def authenticate(self, email: str, password: str) -> dict:
        """
        Check credentials and return the user.

        Unknown email and wrong password fail the same way, and both paths
        run one hash verification.
        """
        doc = self.collection.find_one({"email": email.strip().lower()})
        if doc is None:
            dummy_verify(self.pwd_context)
            raise InvalidCredentialsError()

        if not verify_password(self.pwd_context, password, doc["password_hash"]):
            logger.info("user.login_failed", user_id=str(doc["_id"]))
            raise InvalidCredentialsError()

        if self.pwd_context.needs_update(doc["password_hash"]):
            self.collection.update_one(
                {"_id": doc["_id"]},
                {"$set": {"password_hash": hash_password(self.pwd_context, password)}},
            )
            logger.info("user.password_rehashed", user_id=str(doc["_id"]))

        return serialize_user(doc)

    def get_by_id(self, user_id: str) -> dict:
        doc = self.collection.find_one({"_id": parse_object_id(user_id, "User")})
        if doc is None:
            raise NotFoundError("User not found")
        return serialize_user(doc)

    def list_users(self) -> List[dict]:
        cursor = self.collection.find({}, {"password_hash": 0}).sort("created_at", ASCENDING)
        return [serialize_user(doc) for doc in cursor]

    def update_profile(self, user_id: str, update: UserUpdate) -> dict:
        """Apply the provided keys; nested profile/company objects are replaced whole."""
        changes = {
            key: value
            for key, value in update.model_dump(exclude_unset=True).items()
            if value is not None
        }
        oid = parse_object_id(user_id, "User")

        if not changes:
            return self.get_by_id(user_id)

        changes["updated_at"] = utcnow()
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("User not found")

        logger.info("user.profile_updated", user_id=user_id, fields=sorted(changes))
        return serialize_user(doc)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        oid = parse_object_id(user_id, "User")
        doc = self.collection.find_one({"_id": oid}, {"password_hash": 1})
        if doc is None:
            raise NotFoundError("User not found")

        if not verify_password(self.pwd_context, current_password, doc["password_hash"]):
            raise InvalidCredentialsError()

        self.collection.update_one(
            {"_id": oid},
            {"$set": {
                "password_hash": hash_password(self.pwd_context, new_password),
                "updated_at": utcnow(),
            }},
        )
        logger.info("user.password_changed", user_id=user_id)


# ============================================================
# JOBS COLLECTION
# ============================================================

class JobService:
    """
    Handles job postings.
    Only the owner (posted_by) may update or delete a posting;
    applicants are appended, never removed.
    """

    def __init__(self, db: Database):
        self.collection: Collection = db[COLLECTIONS["jobs"]]
        self.users: Collection = db[COLLECTIONS["users"]]

    @staticmethod
    def build_query(
        search: Optional[str] = None,
        location: Optional[str] = None,
        job_type: Optional[str] = None,
        experience_level: Optional[str] = None,
        min_salary: Optional[float] = None,
        status: Optional[str] = None,
        posted_by: Optional[str] = None,
    ) -> dict:
        """
        Translate list filters into a MongoDB query.

        min_salary keeps jobs whose salary range reaches that amount
        (salary.max >= min_salary).
        """
        query: dict = {}

        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [
                {"title": pattern},
                {"company": pattern},
                {"description": pattern},
            ]
        if location:
            query["location"] = location
        if job_type:
            query["job_type"] = getattr(job_type, "value", job_type)
        if experience_level:
            query["experience_level"] = getattr(experience_level, "value", experience_level)
        if min_salary is not None:
            query["salary.max"] = {"$gte": min_salary}
        if status:
            query["status"] = getattr(status, "value", status)
        if posted_by:
            query["posted_by"] = parse_object_id(posted_by, "User")

        return query

    def list_jobs(self, **filters) -> List[dict]:
        cursor = self.collection.find(self.build_query(**filters)).sort([
            ("created_at", DESCENDING),
            ("_id", DESCENDING),
        ])
        return self._with_posters(list(cursor))

    def get_job(self, job_id: str) -> dict:
        """Fetch one job with its poster and applicants populated."""
        doc = self._find(job_id)
        users = load_users(self.users, [doc["posted_by"], *doc.get("applicants", [])])

        job = self._serialize(doc, users.get(doc["posted_by"]))
        job["applicants"] = [
            summarize_user(users[oid]) for oid in doc.get("applicants", []) if oid in users
        ]
        return job

    def create_job(self, data: JobCreate, owner_id: str) -> dict:
        now = utcnow()
        doc = data.model_dump(mode="python")
        doc["job_type"] = data.job_type.value
        doc["experience_level"] = data.experience_level.value
        doc["status"] = data.status.value
        doc.update({
            "posted_by": parse_object_id(owner_id, "User"),
            "applicants": [],
            "created_at": now,
            "updated_at": now,
        })

        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("job.created", job_id=str(result.inserted_id), owner_id=owner_id)
        return self._with_posters([doc])[0]

    def update_job(self, job_id: str, update: JobUpdate, user_id: str) -> dict:
        doc = self._find(job_id)
        self._check_owner(doc, user_id, "update")

        changes = {
            key: getattr(value, "value", value)
            for key, value in update.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if changes:
            changes["updated_at"] = utcnow()
            doc = self.collection.find_one_and_update(
                {"_id": doc["_id"]},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                raise NotFoundError("Job not found")
            logger.info("job.updated", job_id=job_id, fields=sorted(changes))

        return self._with_posters([doc])[0]

    def delete_job(self, job_id: str, user_id: str) -> None:
        doc = self._find(job_id)
        self._check_owner(doc, user_id, "delete")
        self.collection.delete_one({"_id": doc["_id"]})
        logger.info("job.deleted", job_id=job_id, owner_id=user_id)

    def apply(self, job_id: str, user_id: str) -> None:
        """
        Add the user to the job's applicants.
        A second application by the same user raises ConflictError.
        """
        doc = self._find(job_id)
        applicant = parse_object_id(user_id, "User")

        if doc.get("status") == JobStatus.closed.value:
            raise ValidationError("Job is not accepting applications")
        if applicant in doc.get("applicants", []):
            raise ConflictError("Already applied to this job")

        # Single-document conditional push; a concurrent duplicate matches nothing
        result = self.collection.update_one(
            {"_id": doc["_id"], "applicants": {"$ne": applicant}},
            {"$push": {"applicants": applicant}, "$set": {"updated_at": utcnow()}},
        )
        if result.modified_count == 0:
            raise ConflictError("Already applied to this job")

        logger.info("job.applied", job_id=job_id, user_id=user_id)

    # ---------- internals ----------

    def _find(self, job_id: str) -> dict:
        doc = self.collection.find_one({"_id": parse_object_id(job_id, "Job")})
        if doc is None:
            raise NotFoundError("Job not found")
        return doc

    @staticmethod
    def _check_owner(doc: dict, user_id: str, action: str) -> None:
        if str(doc["posted_by"]) != user_id:
            raise ForbiddenError(f"Not authorized to {action} this job")

    def _with_posters(self, docs: List[dict]) -> List[dict]:
        users = load_users(self.users, [doc["posted_by"] for doc in docs])
        return [self._serialize(doc, users.get(doc["posted_by"])) for doc in docs]

    @staticmethod
    def _serialize(doc: dict, poster: Optional[dict]) -> dict:
        return {
            "id": str(doc["_id"]),
            "title": doc["title"],
            "company": doc["company"],
            "location": doc["location"],
            "description": doc["description"],
            "requirements": doc["requirements"],
            "salary": doc["salary"],
            "job_type": doc["job_type"],
            "experience_level": doc["experience_level"],
            "status": doc.get("status", JobStatus.active.value),
            "posted_by": summarize_poster(poster),
            "applicants": [str(oid) for oid in doc.get("applicants", [])],
            "created_at": doc["created_at"],
            "updated_at": doc["updated_at"],
        }


# ============================================================
# MESSAGES COLLECTION
# ============================================================

class MessageService:
    """
    Handles direct messages.
    A conversation is every message between an unordered pair of users;
    it is derived on read, never stored.
    """

    def __init__(self, db: Database):
        self.collection: Collection = db[COLLECTIONS["messages"]]
        self.users: Collection = db[COLLECTIONS["users"]]

    def send(self, sender_id: str, receiver_id: str, content: str) -> dict:
        sender = parse_object_id(sender_id, "User")
        receiver = parse_object_id(receiver_id, "Recipient")

        if sender == receiver:
            raise ValidationError("Cannot send a message to yourself")
        if self.users.find_one({"_id": receiver}, {"_id": 1}) is None:
            raise NotFoundError("Recipient not found")

        now = utcnow()
        doc = {
            "content": content,
            "sender_id": sender,
            "receiver_id": receiver,
            "read": False,
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("message.sent", message_id=str(result.inserted_id))
        return self._populate([doc])[0]

    def conversation_with(self, user_id: str, other_id: str) -> List[dict]:
        """All messages between two users, oldest first."""
        me = parse_object_id(user_id, "User")
        other = parse_object_id(other_id, "User")
        cursor = self.collection.find({
            "$or": [
                {"sender_id": me, "receiver_id": other},
                {"sender_id": other, "receiver_id": me},
            ]
        }).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
        return self._populate(list(cursor))

    def conversations(self, user_id: str) -> List[List[dict]]:
        """
        Group every message involving the user by the other party.
        Each conversation is oldest-first; conversations are ordered by
        their latest message, newest first.
        """
        me = parse_object_id(user_id, "User")
        cursor = self.collection.find({
            "$or": [{"sender_id": me}, {"receiver_id": me}]
        }).sort([("created_at", ASCENDING), ("_id", ASCENDING)])

        grouped: Dict[ObjectId, List[dict]] = {}
        for doc in cursor:
            other = doc["receiver_id"] if doc["sender_id"] == me else doc["sender_id"]
            grouped.setdefault(other, []).append(doc)

        ordered = sorted(
            grouped.values(),
            key=lambda msgs: (msgs[-1]["created_at"], msgs[-1]["_id"]),
            reverse=True,
        )
        users = load_users(
            self.users,
            [oid for msgs in ordered for doc in msgs for oid in (doc["sender_id"], doc["receiver_id"])],
        )
        return [[self._serialize(doc, users) for doc in msgs] for msgs in ordered]

    def mark_read(self, message_id: str, user_id: str) -> dict:
        doc = self._find(message_id)
        if str(doc["receiver_id"]) != user_id:
            raise ForbiddenError("Not authorized to update this message")

        doc = self.collection.find_one_and_update(
            {"_id": doc["_id"]},
            {"$set": {"read": True, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Message not found")
        return self._populate([doc])[0]

    def delete(self, message_id: str, user_id: str) -> None:
        doc = self._find(message_id)
        if str(doc["sender_id"]) != user_id:
            raise ForbiddenError("Not authorized to delete this message")
        self.collection.delete_one({"_id": doc["_id"]})
        logger.info("message.deleted", message_id=message_id)

    # ---------- internals ----------

    def _find(self, message_id: str) -> dict:
        doc = self.collection.find_one({"_id": parse_object_id(message_id, "Message")})
        if doc is None:
            raise NotFoundError("Message not found")
        return doc

    def _populate(self, docs: List[dict]) -> List[dict]:
        users = load_users(
            self.users,
            [oid for doc in docs for oid in (doc["sender_id"], doc["receiver_id"])],
        )
        return [self._serialize(doc, users) for doc in docs]

    @staticmethod
    def _serialize(doc: dict, users: Dict[ObjectId, dict]) -> dict:
        return {
            "id": str(doc["_id"]),
            "content": doc["content"],
            "sender_id": str(doc["sender_id"]),
            "receiver_id": str(doc["receiver_id"]),
            "read": doc.get("read", False),
            "created_at": doc["created_at"],
            "updated_at": doc["updated_at"],
            "sender": summarize_user(users.get(doc["sender_id"])),
            "receiver": summarize_user(users.get(doc["receiver_id"])),
        }
