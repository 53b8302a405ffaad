"""
Top-level package for the NapChart API.

All functionality lives in submodules under ``app``; the running ASGI
application is ``napchart_api.app.main:app``.
"""

__all__ = []
