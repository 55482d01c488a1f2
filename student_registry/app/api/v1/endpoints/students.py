"""
Student endpoints for API v1.

CRUD routes for the student registry.  Handlers only translate HTTP to
``StudentService`` calls and back: list parameters become a
``QueryConfig``, mutation results are mapped 1:1 to status codes
(``invalid`` → 400, ``conflict`` → 409, ``not_found`` → 404).

Error responses use FastAPI's usual ``{"detail": "..."}`` body.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from student_registry.app.core.errors import NotFoundError, ValidationError
from student_registry.app.schemas.student import StudentList, StudentRead
from student_registry.app.services.query_engine import query_from_params
from student_registry.app.services.student_service import MutationResult, StudentService

router = APIRouter()


def get_student_service(request: Request) -> StudentService:
    """Return the service wired into the application by ``create_app``."""
    return request.app.state.student_service


def _unwrap(result: MutationResult) -> Dict[str, Any]:
    if not result.ok:
        raise HTTPException(status_code=result.status_code, detail=result.error)
    return result.record


@router.get(
    "/students",
    response_model=StudentList,
    response_model_exclude_none=True,
    summary="List students",
)
async def list_students(
    sort_by: Optional[str] = Query(
        None,
        alias="sortBy",
        description="Declared field to sort by (ascending). Omit to keep storage order.",
    ),
    count: Optional[str] = Query(None, description="Maximum number of students to return."),
    offset: Optional[str] = Query(None, description="Number of students to skip after sorting."),
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Return a page of students and the total number of students.

    - **sortBy**: `id`, `name` or `gpa`; records without the field come last.
    - **count**, **offset**: pagination; both must be non-negative integers,
      anything else is answered with 400.
    """
    try:
        result = await service.list_students(query_from_params(sort_by, count, offset))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    return {"items": result.items, "total": result.total}


@router.get("/students/{student_id}", response_model=StudentRead, response_model_exclude_none=True)
async def get_student(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Retrieve a single student.  Returns 404 if the id is unknown."""
    try:
        return await service.get_student(student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


@router.post(
    "/students",
    response_model=StudentRead,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    payload: Dict[str, Any] = Body(..., examples=[{"id": "1004803", "name": "Alice", "gpa": 4.0}]),
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Create a student.

    Answers 400 if ``id`` or ``name`` is missing or malformed and 409
    if a student with the same ``id`` already exists.
    """
    return _unwrap(await service.create_student(payload))


@router.put("/students/{student_id}", response_model=StudentRead, response_model_exclude_none=True)
async def update_student(
    student_id: str,
    patch: Dict[str, Any] = Body(..., examples=[{"gpa": 3.9}]),
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Merge the given fields into an existing student.

    Unspecified fields stay unchanged; ``null`` removes an optional
    field.  ``name`` cannot be cleared and ``id`` cannot change.
    """
    return _unwrap(await service.update_student(student_id, patch))


@router.delete("/students/{student_id}", response_model=StudentRead, response_model_exclude_none=True)
async def delete_student(
    student_id: str,
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    """Delete a student and return the removed record for confirmation."""
    return _unwrap(await service.delete_student(student_id))
