"""
HTTP client for the job board backend.

Thin wrapper over a `requests.Session`: builds URLs, attaches the bearer
token, retries idempotent reads on transient failures and turns every failure
into an `ApiError` carrying a human-readable message.
"""

import mimetypes
import time
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_API_URL, Settings
from .logger import get_logger
from .retry import RetryError, exponential_backoff, should_retry_http_status


class ApiError(Exception):
    """A backend call failed. `status_code` is None for transport failures."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class _RetryableStatus(Exception):
    def __init__(self, response: requests.Response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


class ApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        sleep=time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApiClient":
        return cls(
            base_url=settings.api_url,
            token=settings.auth_token,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        retry: bool = False,
    ) -> Any:
        logger = get_logger()
        url = f"{self.base_url}{endpoint}"
        logger.record_request(name)

        def send() -> requests.Response:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                data=data,
                files=files,
                headers=self._headers(),
                timeout=self.timeout,
            )
            if retry and should_retry_http_status(resp.status_code):
                raise _RetryableStatus(resp)
            return resp

        def on_retry(attempt, exc, delay):
            logger.warning("Retrying backend request", endpoint=name, attempt=attempt, error=str(exc), delay=delay)

        try:
            if retry:
                resp = exponential_backoff(
                    max_retries=self.max_retries,
                    base_delay=self.retry_delay,
                    exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, _RetryableStatus),
                    on_retry=on_retry,
                    sleep=self._sleep,
                )(send)()
            else:
                resp = send()
        except RetryError as e:
            last = e.last_exception
            if isinstance(last, _RetryableStatus):
                resp = last.response
            else:
                raise self._transport_error(name, url, last) from e
        except requests.exceptions.RequestException as e:
            raise self._transport_error(name, url, e) from e

        if not resp.ok:
            payload = self._json_or_none(resp)
            message = self._error_message(resp, payload)
            logger.record_failure(name, f"HTTPError_{resp.status_code}")
            logger.error("Backend request failed", endpoint=name, url=url, status=resp.status_code, message=message)
            raise ApiError(message, status_code=resp.status_code, payload=payload)

        logger.record_success(name)
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            logger.record_failure(name, "InvalidJSON")
            raise ApiError("Backend returned a response that is not valid JSON", status_code=resp.status_code)

    def _transport_error(self, name: str, url: str, exc: Optional[BaseException]) -> ApiError:
        logger = get_logger()
        if isinstance(exc, requests.exceptions.Timeout):
            logger.record_failure(name, "Timeout")
            logger.warning("Backend request timed out", endpoint=name, url=url)
            return ApiError("Request timed out. Try again later.")
        logger.record_failure(name, type(exc).__name__ if exc else "RequestException")
        logger.error("Backend unreachable", endpoint=name, url=url, error=str(exc))
        return ApiError(f"Cannot connect to backend at {self.base_url}: {exc}")

    @staticmethod
    def _json_or_none(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(resp: requests.Response, payload: Any) -> str:
        if isinstance(payload, dict):
            for key in ("message", "error"):
                value = payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        return f"API Error: {resp.status_code} {resp.reason or ''}".strip()

    # Health

    def health_check(self) -> bool:
        """True when the backend answers its health endpoint. Never raises."""
        try:
            self._request("GET", "/api/health", "health")
            return True
        except ApiError:
            return False

    # Auth (thin calls; token handling is the backend's concern)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        result = self._request("POST", "/api/auth/login", "login", json_body={"email": email, "password": password})
        if isinstance(result, dict) and result.get("token"):
            self.token = result["token"]
        return result

    def register(self, name: str, email: str, password: str, role: str = "candidate") -> Dict[str, Any]:
        result = self._request(
            "POST",
            "/api/auth/register",
            "register",
            json_body={"name": name, "email": email, "password": password, "role": role},
        )
        if isinstance(result, dict) and result.get("token"):
            self.token = result["token"]
        return result

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/profile", "get_profile", retry=True)

    # Jobs

    def list_jobs(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        job_type: Optional[str] = None,
    ) -> Any:
        params = {"page": page, "limit": limit, "status": status, "job_type": job_type}
        params = {k: v for k, v in params.items() if v is not None}
        params["simple"] = "true"
        return self._request("GET", "/api/jobs", "list_jobs", params=params, retry=True)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/jobs/{job_id}", "get_job", retry=True)

    def create_job(self, job: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/jobs", "create_job", json_body=job)

    def update_job(self, job_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/jobs/{job_id}", "update_job", json_body=updates)

    def delete_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/jobs/{job_id}", "delete_job")

    def get_my_jobs(self) -> Any:
        return self._request("GET", "/api/jobs/my-jobs", "get_my_jobs", retry=True)

    # Applications

    def apply_to_job(self, job_id: str, application: Dict[str, Any]) -> Dict[str, Any]:
        body = {k: v for k, v in application.items() if v is not None}
        return self._request("POST", f"/api/jobs/{job_id}/apply", "apply_to_job", json_body=body)

    def submit_application(self, fields: Dict[str, Any], resume_path) -> Dict[str, Any]:
        """Multipart application with the resume attached as `resume`."""
        path = Path(resume_path)
        data = {k: str(v) for k, v in fields.items() if v is not None}
        mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with path.open("rb") as fh:
            return self._request(
                "POST",
                "/api/applications",
                "submit_application",
                data=data,
                files={"resume": (path.name, fh, mime)},
            )

    def get_job_applications(self, job_id: str) -> Any:
        return self._request("GET", f"/api/jobs/{job_id}/applications", "get_job_applications", retry=True)

    def get_applications(self, status: Optional[str] = None) -> Any:
        params = {"status": status} if status else None
        return self._request("GET", "/api/applications", "get_applications", params=params, retry=True)

    def update_application_status(self, application_id: str, status: str) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"/api/applications/{application_id}/status",
            "update_application_status",
            json_body={"status": status},
        )

    # Likes

    def like_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/jobs/{job_id}/like", "like_job")

    def unlike_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/jobs/{job_id}/like", "unlike_job")

    def get_like_status(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/jobs/{job_id}/like", "get_like_status", retry=True)
