# termi/integrations/Presence.py
"""Presence reporting.

The editor hands a read-only snapshot of what is being edited to a `PresenceReporter` whenever a
file is opened or saved. The bundled reporter records the snapshots in the log and keeps the most
recent one; other status sinks can subclass it and override `publish`.
"""

import logging
from typing import Optional, TypedDict


logger = logging.getLogger("termi.presence")


class PresenceSnapshot(TypedDict):
    file_name: str
    language: str
    line_count: int


class PresenceReporter:
    """Receives presence snapshots; never touches editor state."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.last_snapshot: Optional[PresenceSnapshot] = None

    def report(self, file_name: Optional[str], language: str, line_count: int, event: str) -> None:
        if not self.enabled:
            return
        snapshot: PresenceSnapshot = {
            "file_name": file_name or "untitled",
            "language": language,
            "line_count": line_count,
        }
        self.last_snapshot = snapshot
        self.publish(snapshot, event)

    def publish(self, snapshot: PresenceSnapshot, event: str) -> None:
        logger.info(
            "Presence (%s): editing %s [%s], %d lines",
            event,
            snapshot["file_name"],
            snapshot["language"],
            snapshot["line_count"],
        )
