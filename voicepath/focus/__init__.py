from .session import FocusSession, FocusSessionRegistry, format_time

__all__ = ["FocusSession", "FocusSessionRegistry", "format_time"]
