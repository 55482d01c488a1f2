"""Student registry API client.

This module defines a small client wrapper around the Student Registry
REST API.  It uses the ``requests`` library internally and never raises
for HTTP or network failures: every method returns a tuple
``(data, error)`` where exactly one side is meaningful.  ``error`` is a
dictionary with the keys ``status_code`` (``None`` for network
failures) and ``message``.

The client exposes one method per route:

* :meth:`list_students` – a page of students plus the total count.
* :meth:`get_student` – fetch a single student by its identifier.
* :meth:`create_student` – register a new student.
* :meth:`update_student` – merge fields into an existing student.
* :meth:`delete_student` – remove a student, echoing the removed record.
* :meth:`get_info` – service name, version and number of students.
* :meth:`fetch_all_students` – every student, following the pages.

Example::

    api = StudentRegistryAPI(base_url="http://localhost:8000")
    page, error = api.list_students(sort_by="gpa", count=10)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

ApiError = Dict[str, Any]


class StudentRegistryAPI:
    """Client for interacting with the student registry API."""

    def __init__(
        self,
        *,
        base_url: str,
        prefix: str = "/api/v1",
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``http://localhost:8000``.
            prefix: Path prefix of the versioned API.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/students``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Student operations
    # ------------------------------------------------------------------
    def list_students(
        self,
        sort_by: Optional[str] = None,
        count: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[Dict[str, Any], Optional[ApiError]]:
        """Retrieve a page of students.

        Returns:
            A tuple ``(page, error)``.  ``page`` has the keys ``items``
            and ``total``; on failure it is an empty page.
        """
        params: Dict[str, Any] = {}
        if sort_by is not None:
            params["sortBy"] = sort_by
        if count is not None:
            params["count"] = count
        if offset is not None:
            params["offset"] = offset
        data, error = self._request("GET", "/students", params=params or None)
        if error or not isinstance(data, dict):
            return {"items": [], "total": 0}, error
        return data, None

    def get_student(self, student_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/students/{student_id}")

    def create_student(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Create a student; a 409 error means the id is already taken."""
        return self._request("POST", "/students", json_body=payload)

    def update_student(
        self, student_id: str, patch: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("PUT", f"/students/{student_id}", json_body=patch)

    def delete_student(self, student_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Delete a student.  On success ``data`` is the removed record."""
        return self._request("DELETE", f"/students/{student_id}")

    def get_info(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", "/info")

    def fetch_all_students(
        self, sort_by: Optional[str] = None, page_size: int = 100
    ) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        """Fetch every student by walking the pages of ``list_students``.

        Stops at the first error and returns what was collected so far
        together with that error.
        """
        collected: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page, error = self.list_students(sort_by=sort_by, count=page_size, offset=offset)
            if error:
                return collected, error
            items = page.get("items", [])
            collected.extend(items)
            offset += len(items)
            if not items or offset >= page.get("total", 0):
                return collected, None
