"""Action log interface."""

from typing import Protocol

from agenda.core.actions import Action


class ActionLog(Protocol):
    """Interface for reading and appending agenda actions, in log order."""

    def read(self) -> list[Action]:
        """Read every action in the log, oldest first."""
        ...

    def append(self, action: Action) -> None:
        """Append one action to the end of the log."""
        ...

    def exists(self) -> bool:
        """Check if the log has been created."""
        ...
