"""
Service layer abstraction.

The repository enforces record invariants on top of a record store,
the query engine shapes list views, and the student service turns
mutation requests into uniform results for the API handlers.
"""
