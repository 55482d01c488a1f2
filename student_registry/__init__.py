"""
Top‑level package for the Student Registry API.

This file makes ``student_registry`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``student_registry.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
