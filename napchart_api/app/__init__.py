"""
Application package initializer.

The project is organised into layers: ``core`` (configuration,
logging, database, security, paging), ``repositories`` (SQL),
``services`` (ownership rules) and ``api`` (versioned FastAPI
routers).  Schemas shared between the layers live in ``schemas``.
"""

from .main import app  # noqa: F401
