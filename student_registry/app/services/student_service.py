"""
Service layer for students.

``StudentService`` is what the API handlers talk to.  Reads return
records (or raise ``NotFoundError``/``ValidationError``); mutations
never raise for expected failures and instead return a
``MutationResult`` whose ``status`` tells the caller what happened:

``created``, ``updated``, ``deleted``
    The change was applied; ``record`` holds the stored (or, for a
    delete, the removed) record.
``invalid``, ``conflict``, ``not_found``
    Nothing was changed; ``error`` explains why.

Each mutation request goes through ``received -> validated ->
applied`` or stops at ``rejected``.  There is exactly one attempt per
request; retrying is up to the client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from student_registry.app.core.db import Record
from student_registry.app.core.errors import (
    ConflictError,
    NotFoundError,
    RegistryError,
    ValidationError,
)
from student_registry.app.services.query_engine import QueryConfig, QueryResult, run_query
from student_registry.app.services.student_repository import StudentRepository

logger = logging.getLogger(__name__)


class MutationStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"


_HTTP_STATUS = {
    MutationStatus.CREATED: 201,
    MutationStatus.UPDATED: 200,
    MutationStatus.DELETED: 200,
    MutationStatus.INVALID: ValidationError.status_code,
    MutationStatus.CONFLICT: ConflictError.status_code,
    MutationStatus.NOT_FOUND: NotFoundError.status_code,
}


@dataclass
class MutationResult:
    """Outcome of a create, update or delete request."""

    status: MutationStatus
    record: Optional[Record] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return _HTTP_STATUS[self.status]


def _status_for(exc: RegistryError) -> MutationStatus:
    if isinstance(exc, ConflictError):
        return MutationStatus.CONFLICT
    if isinstance(exc, NotFoundError):
        return MutationStatus.NOT_FOUND
    return MutationStatus.INVALID


class StudentService:
    """Coordinates student mutations and list/get reads."""

    def __init__(self, repository: StudentRepository) -> None:
        self.repository = repository

    @staticmethod
    def _rejected(operation: str, target: Any, exc: RegistryError) -> MutationResult:
        status = _status_for(exc)
        logger.warning("%s %s rejected (%s): %s", operation, target, status.value, exc.message)
        return MutationResult(status=status, error=exc.message)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def create_student(self, payload: Any) -> MutationResult:
        """Create a student from a request body."""
        target = payload.get("id") if isinstance(payload, dict) else None
        logger.debug("create %s: received", target)
        try:
            record = self.repository.validate_new(payload)
        except ValidationError as exc:
            return self._rejected("create", target, exc)
        logger.debug("create %s: validated", record["id"])
        try:
            stored = self.repository.create(record)
        except RegistryError as exc:
            return self._rejected("create", record["id"], exc)
        logger.debug("create %s: applied", record["id"])
        return MutationResult(status=MutationStatus.CREATED, record=stored)

    async def update_student(self, student_id: str, patch: Any) -> MutationResult:
        """Merge a partial record into an existing student."""
        logger.debug("update %s: received", student_id)
        try:
            changes = self.repository.validate_patch(student_id, patch)
        except ValidationError as exc:
            return self._rejected("update", student_id, exc)
        logger.debug("update %s: validated", student_id)
        try:
            updated = self.repository.update(student_id, changes)
        except RegistryError as exc:
            return self._rejected("update", student_id, exc)
        logger.debug("update %s: applied", student_id)
        return MutationResult(status=MutationStatus.UPDATED, record=updated)

    async def delete_student(self, student_id: str) -> MutationResult:
        """Delete a student and echo the removed record."""
        logger.debug("delete %s: received", student_id)
        try:
            removed = self.repository.delete(student_id)
        except RegistryError as exc:
            return self._rejected("delete", student_id, exc)
        logger.debug("delete %s: applied", student_id)
        return MutationResult(status=MutationStatus.DELETED, record=removed)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list_students(self, config: QueryConfig) -> QueryResult:
        """Return one page of students.  Raises ``ValidationError`` for bad options."""
        return run_query(self.repository.all(), config)

    async def get_student(self, student_id: str) -> Record:
        return self.repository.find(student_id)

    async def count_students(self) -> int:
        return self.repository.count()
