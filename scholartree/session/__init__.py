# session - state of one exploration session and the operations on it
from .state import SessionState, toggle_collected
from .orchestrator import SessionOrchestrator, normalize_keywords

__all__ = ["SessionState", "toggle_collected", "SessionOrchestrator", "normalize_keywords"]
