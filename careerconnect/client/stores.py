"""
Client state stores.

Each store mirrors one server resource for a front end: it issues API calls
through a shared CareerConnectClient, caches the results locally and exposes
`is_loading` / `error` for display.

Fetches record failures in `error` and carry on; mutations record the
failure and re-raise so the caller can react (e.g. keep a form open).
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import httpx
import structlog

from careerconnect.client.api import APIError, CareerConnectClient

logger = structlog.get_logger()


class Store:
    """Shared loading/error bookkeeping."""

    def __init__(self, client: CareerConnectClient):
        self.client = client
        self.is_loading = False
        self.error: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None

    @contextmanager
    def _action(self, fallback: str, reraise: bool = True) -> Iterator[None]:
        self.is_loading = True
        self.error = None
        try:
            yield
        except (APIError, httpx.HTTPError) as e:
            self.error = getattr(e, "detail", None) or fallback
            logger.warning("store.action_failed", store=type(self).__name__, error=self.error)
            if reraise:
                raise
        finally:
            self.is_loading = False


class AuthStore(Store):
    """
    Current user and token.

    If `token_path` is given the token survives restarts: it is read on
    construction, written on login/register and removed on logout.
    """

    def __init__(self, client: CareerConnectClient, token_path: Optional[Union[str, Path]] = None):
        super().__init__(client)
        self.user: Optional[Dict[str, Any]] = None
        self.token_path = Path(token_path) if token_path else None
        self.token: Optional[str] = self._load_token()
        if self.token:
            self.client.token = self.token

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, email: str, password: str) -> None:
        with self._action("Failed to login"):
            result = self.client.login(email, password)
            self._set_session(result)

    def register(self, data: Dict[str, Any]) -> None:
        with self._action("Failed to register"):
            result = self.client.register(data)
            self._set_session(result)

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.error = None
        self.client.logout()
        if self.token_path and self.token_path.exists():
            self.token_path.unlink()

    def fetch_profile(self) -> None:
        with self._action("Failed to fetch profile", reraise=False):
            self.user = self.client.get_profile()

    def update_profile(self, data: Dict[str, Any]) -> None:
        with self._action("Failed to update profile"):
            self.user = self.client.update_profile(data)

    # ---------- internals ----------

    def _set_session(self, result: Dict[str, Any]) -> None:
        self.user = result["user"]
        self.token = result["token"]
        if self.token_path:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            self.token_path.write_text(self.token)

    def _load_token(self) -> Optional[str]:
        if self.token_path and self.token_path.exists():
            return self.token_path.read_text().strip() or None
        return None


class JobStore(Store):
    """Job list, the job being viewed, and the active list filters."""

    def __init__(self, client: CareerConnectClient):
        super().__init__(client)
        self.jobs: List[Dict[str, Any]] = []
        self.current_job: Optional[Dict[str, Any]] = None
        self.filters: Dict[str, Any] = {}

    def set_filters(self, **filters: Any) -> None:
        self.filters.update(filters)

    def fetch_jobs(self, filters: Optional[Dict[str, Any]] = None) -> None:
        if filters is not None:
            self.filters = dict(filters)
        with self._action("Failed to fetch jobs", reraise=False):
            self.jobs = self.client.list_jobs(self.filters)

    def fetch_job(self, job_id: str) -> None:
        with self._action("Failed to fetch job", reraise=False):
            self.current_job = self.client.get_job(job_id)

    def create_job(self, data: Dict[str, Any]) -> Dict[str, Any]:
        with self._action("Failed to create job"):
            job = self.client.create_job(data)
            self.jobs = [job, *self.jobs]
        return job

    def update_job(self, job_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        with self._action("Failed to update job"):
            job = self.client.update_job(job_id, data)
            self.jobs = [job if j["id"] == job_id else j for j in self.jobs]
            if self.current_job and self.current_job["id"] == job_id:
                self.current_job = {**self.current_job, **{k: v for k, v in job.items() if k != "applicants"}}
        return job

    def delete_job(self, job_id: str) -> None:
        with self._action("Failed to delete job"):
            self.client.delete_job(job_id)
            self.jobs = [j for j in self.jobs if j["id"] != job_id]
            if self.current_job and self.current_job["id"] == job_id:
                self.current_job = None

    def apply_to_job(self, job_id: str) -> None:
        with self._action("Failed to apply to job"):
            self.client.apply_to_job(job_id)
            if self.current_job and self.current_job["id"] == job_id:
                self.current_job = self.client.get_job(job_id)


class MessageStore(Store):
    """Conversation list and the conversation being viewed."""

    def __init__(self, client: CareerConnectClient):
        super().__init__(client)
        self.conversations: List[List[Dict[str, Any]]] = []
        self.current_conversation: Optional[List[Dict[str, Any]]] = None

    def fetch_conversations(self) -> None:
        with self._action("Failed to fetch conversations", reraise=False):
            self.conversations = self.client.get_conversations()

    def fetch_messages_by_user(self, user_id: str) -> None:
        with self._action("Failed to fetch messages", reraise=False):
            self.current_conversation = self.client.get_messages_by_user(user_id)

    def send_message(self, receiver_id: str, content: str) -> Dict[str, Any]:
        with self._action("Failed to send message"):
            message = self.client.send_message(receiver_id, content)
            if self.current_conversation is not None:
                self.current_conversation = [*self.current_conversation, message]
        return message

    def mark_message_as_read(self, message_id: str) -> None:
        with self._action("Failed to mark message as read", reraise=False):
            updated = self.client.mark_message_as_read(message_id)
            if self.current_conversation is not None:
                self.current_conversation = [
                    updated if msg["id"] == message_id else msg for msg in self.current_conversation
                ]

    def delete_message(self, message_id: str) -> None:
        with self._action("Failed to delete message"):
            self.client.delete_message(message_id)
            if self.current_conversation is not None:
                self.current_conversation = [
                    msg for msg in self.current_conversation if msg["id"] != message_id
                ]
