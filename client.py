import logging
import os
from typing import Any, List, Optional
import httpx
from schemas import DeletedTask, Task, TaskList

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_URL", "http://localhost:8000/api")
BASE_PATH = "/tasks"


class TaskApiError(Exception):
    """Error envelope returned by the task API"""

    def __init__(self, status_code: int, message: str, details: Optional[List[dict]] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(f"{status_code}: {message}")


def _log_request(request: httpx.Request) -> None:
    logger.debug("API Request: %s %s", request.method, request.url)


def _log_response(response: httpx.Response) -> None:
    logger.debug("API Response: %s %s", response.status_code, response.request.url)


def _require_id(task_id: str, operation: str) -> None:
    if not task_id:
        raise ValueError(f"Task ID is required for {operation}")


class TaskApiClient:
    """
    Typed client for the task endpoints

    Args:
        base_url: API root, ignored when an http client is supplied
        http: Preconfigured httpx client, e.g. a test client
    """

    def __init__(self, base_url: str = API_BASE_URL, http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(
            base_url=base_url,
            timeout=10.0,
            headers={"Content-Type": "application/json"},
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "TaskApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _send(self, method: str, url: str, **kwargs) -> Any:
        resp = self.http.request(method, url, **kwargs)
        try:
            body = resp.json()
        except ValueError:
            raise TaskApiError(resp.status_code, resp.text or "An error occurred")

        if resp.is_error or not body.get("success"):
            error = body.get("error") or {}
            message = error.get("message") or body.get("message") or "An error occurred"
            logger.error("API Error %s: %s", resp.status_code, message)
            raise TaskApiError(resp.status_code, message, error.get("details"))
        return body["data"]

    def get_tasks(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> TaskList:
        """Tasks matching the filters; empty filters are left out of the query"""
        params = {
            key: value
            for key, value in {"userId": user_id, "status": status, "priority": priority}.items()
            if value not in (None, "")
        }
        return TaskList.model_validate(self._send("GET", BASE_PATH, params=params))

    def get_task(self, task_id: str) -> Task:
        _require_id(task_id, "fetching")
        return Task.model_validate(self._send("GET", f"{BASE_PATH}/{task_id}"))

    def create_task(self, task_data: dict) -> Task:
        if not str(task_data.get("title") or "").strip():
            raise ValueError("Task title is required")
        return Task.model_validate(self._send("POST", BASE_PATH, json=task_data))

    def update_task(self, task_id: str, task_data: dict) -> Task:
        _require_id(task_id, "updating")
        return Task.model_validate(self._send("PUT", f"{BASE_PATH}/{task_id}", json=task_data))

    def delete_task(self, task_id: str) -> DeletedTask:
        _require_id(task_id, "deleting")
        return DeletedTask.model_validate(self._send("DELETE", f"{BASE_PATH}/{task_id}"))
