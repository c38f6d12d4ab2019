"""
Persisted record of what has already been pushed for a project.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from devassist.sync.scanner import STATE_DIR_NAME

STATE_SUFFIX = ".state.json"


def state_dir(directory: Path) -> Path:
    return Path(directory) / STATE_DIR_NAME


def state_path(directory: Path, project: str) -> Path:
    return state_dir(directory) / f"{project}{STATE_SUFFIX}"


class SyncState(BaseModel):
    """Hash cache for one project: relative name -> hash of the last pushed content."""

    project: str
    hashes: Dict[str, str] = Field(default_factory=dict)
    last_sync: Optional[datetime] = None

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(self.model_dump_json(indent=2))
        tmp_path.replace(path)

    @classmethod
    def load(cls, path: Path, project: str) -> "SyncState":
        """Load the state file, starting fresh when it is absent or unreadable."""
        if not path.exists():
            return cls(project=project)
        try:
            state = cls.model_validate_json(path.read_text())
        except (ValidationError, ValueError, OSError) as error:
            logger.warning(f"Ignoring unreadable state file {path}: {error}")
            return cls(project=project)
        if state.project != project:
            logger.warning(
                f"State file {path} belongs to project {state.project!r}, starting fresh"
            )
            return cls(project=project)
        return state


def list_states(directory: Path) -> list[SyncState]:
    """Return every readable project state stored under directory."""
    states = []
    root = state_dir(directory)
    if not root.is_dir():
        return states
    for path in sorted(root.glob(f"*{STATE_SUFFIX}")):
        try:
            states.append(SyncState.model_validate(json.loads(path.read_text())))
        except (ValidationError, ValueError, OSError) as error:
            logger.warning(f"Skipping unreadable state file {path}: {error}")
    return states
