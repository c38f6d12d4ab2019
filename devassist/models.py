from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

# The project name becomes a file name under .devassist/ and a URL segment
INVALID_NAME_CHARS = set('/\\:*?"<>|')
MAX_PROJECT_NAME = 200


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Project(BaseModel):
    """Name of the sync target on the remote service."""

    name: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project name must not be empty")
        if value in (".", ".."):
            raise ValueError(f"Project name must not be {value!r}")
        if len(value) > MAX_PROJECT_NAME:
            raise ValueError(f"Project name must be at most {MAX_PROJECT_NAME} characters")
        invalid = sorted({ch for ch in value if ch in INVALID_NAME_CHARS or ord(ch) < 32})
        if invalid:
            shown = ", ".join(repr(ch) for ch in invalid)
            raise ValueError(f"Project name contains invalid characters: {shown}")
        return value


class Directory(BaseModel):
    """Local root whose files are synchronized."""

    path: Path

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: Path) -> Path:
        value = Path(value).expanduser()
        if not value.exists():
            raise ValueError(f"Directory does not exist: {value}")
        if not value.is_dir():
            raise ValueError(f"Not a directory: {value}")
        return value.resolve()


class FileDocument(BaseModel):
    name: str
    content: str
    hash: str
    last_synced: str = Field(default_factory=lambda: utc_now().isoformat())


class SyncResult(BaseModel):
    """Outcome of a single synchronization pass."""

    uploaded: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    unchanged: int = 0
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: datetime | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.uploaded or self.deleted)
