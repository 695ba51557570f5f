"""molchat - talk to a molecular viewer."""

from .session import Session, build_session

__version__ = "0.1.0"

__all__ = ["Session", "build_session"]
