"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When new domains are introduced, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import info, students

router = APIRouter()

# The students router defines its own "/students" paths so that both
# "/students" and "/students/{id}" resolve without a trailing-slash
# redirect.
router.include_router(students.router, tags=["students"])
router.include_router(info.router, prefix="/info", tags=["info"])
