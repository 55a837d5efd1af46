# termi/core/History.py
"""History Module for the termi Editor
=====================================
This module provides the `History` class, which manages undo and redo for the termi editor by
keeping full snapshots of the document.

Snapshot ``0`` is the document as it was opened (or as the editor started); snapshot ``i`` is the
document right after the i-th edit. The live buffer always corresponds to the snapshot at the current
index. Recording a new edit discards every snapshot after the current index, so redo is only
possible directly after undo.

The history is bounded: once it holds more than ``limit`` snapshots the oldest one is dropped and
the index shifts down with it, which silently moves the oldest reachable undo state forward.
Undo and redo at a boundary do nothing beyond reporting it in the status line.
"""

import logging
from typing import TYPE_CHECKING, Optional


if TYPE_CHECKING:
    from termi.core.Editor import Editor


Snapshot = tuple[str, ...]


## ==================== History Class (Undo/Redo) ====================
class History:
    """Class History
    ===================
    Snapshot stack over the editor's text buffer.

    Attributes:
        editor (Editor): The editor whose buffer is being tracked.
        limit (int): Maximum number of snapshots retained.
        _snapshots (list[Snapshot]): Document states, oldest first.
        _index (int): Position of the state the live buffer corresponds to.

    Methods:
        reset():
            Forgets everything and makes the current buffer the only state.
        record():
            Appends the current buffer as the state following a completed edit.
        undo() -> bool:
            Steps back one state. Returns True if the screen needs a redraw.
        redo() -> bool:
            Steps forward one state. Returns True if the screen needs a redraw.
    """

    DEFAULT_LIMIT = 100

    def __init__(self, editor: "Editor", limit: Optional[int] = None):
        self.editor = editor
        self.limit = max(1, limit if limit is not None else self.DEFAULT_LIMIT)
        self._snapshots: list[Snapshot] = []
        self._index = 0
        self.reset()

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index + 1 < len(self._snapshots)

    def snapshot_at(self, index: int) -> Snapshot:
        return self._snapshots[index]

    def reset(self) -> None:
        """Makes the current buffer the sole, initial state."""
        self._snapshots = [self.editor.buffer.clone()]
        self._index = 0
        logging.debug("History: reset to a single snapshot.")

    def record(self) -> None:
        """Stores the buffer as the state right after the edit that just completed."""
        del self._snapshots[self._index + 1:]
        self._snapshots.append(self.editor.buffer.clone())
        self._index = len(self._snapshots) - 1

        if len(self._snapshots) > self.limit:
            self._snapshots.pop(0)
            self._index -= 1
            logging.debug("History: capacity reached, oldest snapshot dropped.")

        logging.debug(f"History: snapshot recorded. Index {self._index}, size {len(self._snapshots)}.")

    def undo(self) -> bool:
        """Restores the previous document state.

        Returns:
            bool: True if the editor's state or status message changed.
        """
        if not self.can_undo:
            return self._report("Nothing to undo")
        self._index -= 1
        self._apply()
        self.editor._set_status_message("Action undone")
        logging.debug(f"History: undo -> index {self._index}.")
        return True

    def redo(self) -> bool:
        """Re-applies the state undone most recently.

        Returns:
            bool: True if the editor's state or status message changed.
        """
        if not self.can_redo:
            return self._report("Nothing to redo")
        self._index += 1
        self._apply()
        self.editor._set_status_message("Action redone")
        logging.debug(f"History: redo -> index {self._index}.")
        return True

    def _apply(self) -> None:
        self.editor.buffer.restore(self.snapshot_at(self._index))
        self.editor._after_history_restore()

    def _report(self, message: str) -> bool:
        original_status = self.editor.status_message
        self.editor._set_status_message(message)
        return self.editor.status_message != original_status
