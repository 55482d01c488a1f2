"""
Pydantic schemas for student records.

A student record always has an ``id`` (the primary key) and a
``name``.  ``gpa`` is the one declared optional attribute; any other
attribute sent by a client is accepted and stored verbatim, which is
why every model here allows extra fields.

``FIELD_KINDS`` lists the declared fields together with how they
order: numerically or as text.  The query engine only sorts on fields
listed there.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

NUMERIC = "numeric"
TEXT = "text"

FIELD_KINDS: Dict[str, str] = {
    "id": TEXT,
    "name": TEXT,
    "gpa": NUMERIC,
}

REQUIRED_FIELDS = ("id", "name")


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("name must not be empty")
    return value


class StudentBase(BaseModel):
    id: str = Field(..., examples=["1004803"])
    name: str = Field(..., examples=["Alice"])
    gpa: Optional[float] = Field(None, allow_inf_nan=False, examples=[4.0])

    model_config = {
        "extra": "allow",
    }

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)


class StudentCreate(StudentBase):
    """Schema for creating a student."""
    pass


class StudentRead(StudentBase):
    """Schema for a student returned by the API."""

    model_config = {
        "extra": "allow",
        "from_attributes": True,
    }


class StudentUpdate(BaseModel):
    """Schema for a partial update of a student.

    All fields are optional; only provided fields are merged into the
    stored record.  Sending ``null`` for an optional attribute removes
    it from the record.  ``id`` may be repeated but never changed.
    """

    id: Optional[str] = None
    name: Optional[str] = None
    gpa: Optional[float] = Field(None, allow_inf_nan=False)

    model_config = {
        "extra": "allow",
    }

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v)


class StudentList(BaseModel):
    """A page of students plus the size of the whole collection."""

    items: List[StudentRead]
    total: int


class RegistryInfo(BaseModel):
    project: str
    version: str
    students: int
    fields: Dict[str, Any]
