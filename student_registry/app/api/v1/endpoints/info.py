"""
Information endpoint for API v1.

Returns the service name and version, the number of stored students
and the declared student fields with their sort kind, so clients can
build sort controls without hard-coding the schema.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from student_registry.app.api.v1.endpoints.students import get_student_service
from student_registry.app.schemas.student import FIELD_KINDS, RegistryInfo
from student_registry.app.services.student_service import StudentService

router = APIRouter()


@router.get("", response_model=RegistryInfo)
async def get_info(
    request: Request,
    service: StudentService = Depends(get_student_service),
) -> Dict[str, Any]:
    app_settings = request.app.state.settings
    return {
        "project": app_settings.project_name,
        "version": app_settings.api_version,
        "students": await service.count_students(),
        "fields": dict(FIELD_KINDS),
    }
