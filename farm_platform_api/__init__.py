"""
Top-level package for the Farm Platform API.

All functionality lives in submodules under ``app``; run the service
with ``uvicorn farm_platform_api.app.main:app``.
"""

__all__ = []
