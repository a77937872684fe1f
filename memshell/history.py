"""Command history for the memshell terminal."""

from typing import List, Optional


class CommandHistory:
    """Append-only, 1-indexed log of the lines entered in a session."""

    def __init__(self):
        self._entries: List[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    def add(self, command: str) -> None:
        """Add a command to history; blank lines are ignored."""
        if command and command.strip():
            self._entries.append(command)

    def get(self, index: int) -> Optional[str]:
        """Get command at specific index (1-based like bash)."""
        if 0 < index <= len(self._entries):
            return self._entries[index - 1]
        return None

    def entries(self) -> List[str]:
        return list(self._entries)
