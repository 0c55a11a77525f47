"""
CareerConnect API Client

Thin wrapper around the REST API using httpx. One method per route;
request/response bodies are the API's camelCase JSON dicts.

Usage:
    client = CareerConnectClient("http://localhost:5000")
    client.login("jane@example.com", "secret123")
    jobs = client.list_jobs({"jobType": "Contract"})
"""

from typing import Any, Dict, List, Optional

import httpx

DEFAULT_API_URL = "http://localhost:5000"


class APIError(Exception):
    """Raised for any non-2xx API response."""

    def __init__(self, status_code: int, detail: str, errors: Optional[List[dict]] = None):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.errors = errors or []


class CareerConnectClient:
    """
    Synchronous API client.

    `http` may be any httpx.Client (e.g. starlette's TestClient); paths are
    resolved against `base_url` + "/api".
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._http = http or httpx.Client(timeout=timeout)

    # ---------- plumbing ----------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(
            method,
            f"{self.base_url}/api{path}",
            headers=self._headers(),
            **kwargs,
        )
        if response.is_error:
            raise self._error_from(response)
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> APIError:
        try:
            body = response.json()
        except ValueError:
            return APIError(response.status_code, response.text or response.reason_phrase)
        detail = body.get("detail") if isinstance(body, dict) else None
        errors = body.get("errors") if isinstance(body, dict) else None
        return APIError(response.status_code, detail or response.reason_phrase, errors)

    def close(self) -> None:
        self._http.close()

    # ---------- users ----------

    def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Register and keep the returned token. Returns {"user", "token"}."""
        result = self._request("POST", "/users/register", json=data)
        self.token = result["token"]
        return result

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Login and keep the returned token. Returns {"user", "token"}."""
        result = self._request("POST", "/users/login", json={"email": email, "password": password})
        self.token = result["token"]
        return result

    def logout(self) -> None:
        self.token = None

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/profile")

    def update_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", "/users/profile", json=data)

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        return self._request(
            "PUT",
            "/users/profile/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    def list_users(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/users")

    # ---------- jobs ----------

    def list_jobs(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """filters: search, location, jobType, experienceLevel, minSalary, status. Empty values are dropped."""
        params = {key: value for key, value in (filters or {}).items() if value not in (None, "")}
        return self._request("GET", "/jobs", params=params)

    def list_my_jobs(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/jobs/mine")

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/jobs/{job_id}")

    def create_job(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/jobs", json=data)

    def update_job(self, job_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/jobs/{job_id}", json=data)

    def delete_job(self, job_id: str) -> None:
        self._request("DELETE", f"/jobs/{job_id}")

    def apply_to_job(self, job_id: str) -> None:
        self._request("POST", f"/jobs/{job_id}/apply")

    # ---------- messages ----------

    def get_conversations(self) -> List[List[Dict[str, Any]]]:
        return self._request("GET", "/messages/conversations")

    def get_messages_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/messages/user/{user_id}")

    def send_message(self, receiver_id: str, content: str) -> Dict[str, Any]:
        return self._request("POST", "/messages", json={"receiverId": receiver_id, "content": content})

    def mark_message_as_read(self, message_id: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/messages/{message_id}/read")

    def delete_message(self, message_id: str) -> None:
        self._request("DELETE", f"/messages/{message_id}")

    # ---------- matches ----------

    def match_jobs(self, candidate: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self._request("POST", "/matches", json=candidate)
