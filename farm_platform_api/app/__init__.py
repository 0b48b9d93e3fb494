"""
Application package initializer.

Each domain (farms, profile, notifications, soil analysis) has a
service in ``services``, schemas in ``schemas`` and a router in
``api/v1/endpoints``.  Versioning is handled by grouping routers under
the ``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
