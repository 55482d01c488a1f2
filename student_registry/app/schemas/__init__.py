"""
Pydantic schema definitions for API payloads.

Schemas are separated from the record store so that the API
representation is decoupled from persistence.
"""
