"""
Repository for student records.

``StudentRepository`` is the only component that talks to the record
store.  It enforces what the store does not know about: required
fields, a well formed and immutable primary key and uniqueness of that
key.  Payloads are checked with the pydantic schemas from
``schemas.student``; schema failures are re-raised as the registry's
own ``ValidationError`` so callers only deal with one error taxonomy.

Mutations that target the same id are serialized with a per-key lock.
Reads go straight to the store, whose operations are atomic, so they
see either the state before or after a concurrent write.
"""

from __future__ import annotations

import logging
import math
import re
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping

from pydantic import ValidationError as SchemaError

from student_registry.app.core.config import settings
from student_registry.app.core.db import Record, RecordStore
from student_registry.app.core.errors import ConflictError, NotFoundError, ValidationError
from student_registry.app.schemas.student import REQUIRED_FIELDS, StudentCreate, StudentUpdate

logger = logging.getLogger(__name__)


def describe_schema_error(exc: SchemaError) -> str:
    """Flatten a pydantic error into ``"field: message; ..."``."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "record"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def check_finite(values: Mapping[str, Any], prefix: str = "") -> None:
    """Reject NaN and infinities anywhere in ``values``, nested objects and lists included."""
    for key, value in values.items():
        location = f"{prefix}{key}"
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"{location}: value must be a finite number")
        if isinstance(value, Mapping):
            check_finite(value, prefix=f"{location}.")
        elif isinstance(value, list):
            check_finite({str(i): item for i, item in enumerate(value)}, prefix=f"{location}.")


class KeyedLock:
    """Hands out one lock per key and forgets keys that nobody holds."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, list] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class StudentRepository:
    """Typed access to student records kept in a ``RecordStore``."""

    def __init__(self, store: RecordStore, id_pattern: str | None = None) -> None:
        self.store = store
        self._id_re = re.compile(id_pattern or settings.student_id_pattern)
        self._locks = KeyedLock()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate_new(self, record: Any) -> Record:
        """Check a create payload and return the record as it will be stored.

        Values are normalised by the schema (e.g. an integer ``gpa``
        becomes a float) and optional attributes sent as ``null`` are
        dropped.

        Raises
        ------
        ValidationError
            If ``id`` is missing or malformed, ``name`` is missing or
            empty, a declared field has the wrong type, or a number is
            NaN or infinite.
        """
        if not isinstance(record, Mapping):
            raise ValidationError("student record must be an object")
        try:
            model = StudentCreate.model_validate(dict(record))
        except SchemaError as exc:
            raise ValidationError(describe_schema_error(exc)) from exc
        if not self._id_re.fullmatch(model.id):
            raise ValidationError(f"id: malformed student id {model.id!r}")
        dumped = model.model_dump()
        validated = {
            key: dumped[key]
            for key in record
            if key in REQUIRED_FIELDS or dumped[key] is not None
        }
        check_finite(validated)
        return validated

    def validate_patch(self, student_id: str, patch: Any) -> Record:
        """Check an update payload and return the changes to merge.

        A ``None`` value in the returned mapping means "remove this
        attribute".

        Raises
        ------
        ValidationError
            If the patch clears ``name``, changes ``id`` or gives a
            declared field the wrong type.
        """
        if not isinstance(patch, Mapping):
            raise ValidationError("student patch must be an object")
        try:
            model = StudentUpdate.model_validate(dict(patch))
        except SchemaError as exc:
            raise ValidationError(describe_schema_error(exc)) from exc
        dumped = model.model_dump()
        changes = {key: dumped[key] for key in patch}
        if "id" in changes and changes["id"] != student_id:
            raise ValidationError("id: student id cannot be changed")
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field}: required field cannot be cleared")
        check_finite(changes)
        return changes

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def create(self, record: Any) -> Record:
        """Store a new student and return it.

        Raises ``ValidationError`` for a bad payload and
        ``ConflictError`` if the id is already taken.  The store is not
        touched when either is raised.
        """
        data = self.validate_new(record)
        student_id = data["id"]
        with self._locks.hold(student_id):
            try:
                self.store.get(student_id)
            except NotFoundError:
                self.store.put(student_id, data)
            else:
                raise ConflictError(f"Student {student_id} already exists")
        logger.info("Created student %s", student_id)
        return dict(data)

    def update(self, student_id: str, patch: Any) -> Record:
        """Merge ``patch`` into the stored student and return the result."""
        changes = self.validate_patch(student_id, patch)
        with self._locks.hold(student_id):
            current = self.store.get(student_id)
            merged = dict(current)
            for key, value in changes.items():
                if value is None:
                    merged.pop(key, None)
                else:
                    merged[key] = value
            self.store.put(student_id, merged)
        logger.info("Updated student %s (%s)", student_id, ", ".join(changes) or "no changes")
        return merged

    def delete(self, student_id: str) -> Record:
        """Remove the student and return the removed record."""
        with self._locks.hold(student_id):
            removed = self.store.delete(student_id)
        logger.info("Deleted student %s", student_id)
        return removed

    def find(self, student_id: str) -> Record:
        return self.store.get(student_id)

    def all(self) -> List[Record]:
        return self.store.list_all()

    def count(self) -> int:
        return self.store.count()
