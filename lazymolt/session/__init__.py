"""Session core: immutable state, events, commands, and the reducer.

The reducer itself lives in ``lazymolt.session.controller``.
"""

from __future__ import annotations

from .state import Mode, RequestStatus, Session

__all__ = ["Mode", "RequestStatus", "Session"]
