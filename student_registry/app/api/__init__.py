"""
API package containing versioned routes.

Each version subpackage (currently only ``v1``) exposes a ``router``
that ``main.create_app`` mounts under ``/api/<version>``.  Handlers
only translate between HTTP and the student service; they hold no
registry logic of their own.
"""
