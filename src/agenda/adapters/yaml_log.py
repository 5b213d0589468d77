"""YAML action log adapter - one YAML document per action."""

import logging
from pathlib import Path

import yaml

from agenda.core.actions import Action, ActionError

logger = logging.getLogger(__name__)


class ActionLogError(Exception):
    """Raised when the action log cannot be read or decoded."""

    pass


class YamlActionLog:
    """
    Multi-document YAML action log.

    Implements ActionLog protocol. Each action is a separate `---` document,
    appended in the order it happened. No business logic - just I/O.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def read_records(self) -> list:
        """Read the raw documents in the log. Empty documents are skipped."""
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
            documents = list(yaml.safe_load_all(text))
        except OSError as e:
            raise ActionLogError(f"Cannot read {self.path}: {e}") from e
        except yaml.YAMLError as e:
            raise ActionLogError(f"Malformed YAML in {self.path}: {e}") from e
        return [doc for doc in documents if doc is not None]

    def read(self) -> list[Action]:
        """Read and decode every action, oldest first."""
        actions = []
        for index, record in enumerate(self.read_records()):
            try:
                actions.append(Action.from_record(record))
            except ActionError as e:
                raise ActionLogError(f"{self.path}: document {index + 1}: {e}") from e
        logger.debug(f"Read {len(actions)} actions from {self.path}")
        return actions

    def append(self, action: Action) -> None:
        """Append an action as a new document."""
        document = yaml.safe_dump(
            action.to_record(),
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        prefix = ""
        if self.path.exists() and self.path.stat().st_size:
            # Hand-edited logs may lack a trailing newline
            if not self.path.read_bytes().endswith(b"\n"):
                prefix = "\n"
        with self.path.open("a", encoding="utf-8") as f:
            f.write(f"{prefix}---\n{document}")
        logger.debug(f"Appended {action.type} to {self.path}")
