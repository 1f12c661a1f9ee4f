"""Backend services for the flowr player."""

from backend.services.player import build_library, build_session, get_library, get_session

__all__ = ["build_library", "build_session", "get_library", "get_session"]
