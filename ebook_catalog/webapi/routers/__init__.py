"""API routers."""

from .books import register_exception_handlers
from .books import router as books_router
from .system import router as system_router

__all__ = ["books_router", "register_exception_handlers", "system_router"]
