"""
Session registry: a shared recorder plus a factory for isolated ones.

Most of the application should share one recorder so the recording
controls, the tracking loop and the generation callbacks all see the same
session. Tests and other isolated contexts create their own.
"""

import threading
from typing import Any, Callable, Optional

from .recorder import SessionRecorder


class SessionRegistry:
    """
    Hands out SessionRecorder instances.

    Args:
        factory: Builds recorders; receives the keyword arguments given
            to the registry (clock, scheduler, verbose, ...)
    """

    def __init__(self, factory: Callable[..., SessionRecorder] = SessionRecorder, **recorder_kwargs: Any):
        self._factory = factory
        self._recorder_kwargs = recorder_kwargs
        self._shared: Optional[SessionRecorder] = None
        self._init_lock = threading.Lock()

    def create_session_recorder(self) -> SessionRecorder:
        """Create a new, independent recorder."""
        return self._factory(**self._recorder_kwargs)

    def get_session_recorder(self) -> SessionRecorder:
        """Get the shared recorder, creating it on first use."""
        if self._shared is None:
            with self._init_lock:
                if self._shared is None:
                    self._shared = self.create_session_recorder()
        return self._shared

    def has_shared_recorder(self) -> bool:
        return self._shared is not None


_default_registry = SessionRegistry()


def default_registry() -> SessionRegistry:
    """The registry used by the module-level helpers."""
    return _default_registry


def get_session_recorder() -> SessionRecorder:
    """Get the default shared session recorder."""
    return _default_registry.get_session_recorder()


def create_session_recorder() -> SessionRecorder:
    """Create a new session recorder instance."""
    return _default_registry.create_session_recorder()
