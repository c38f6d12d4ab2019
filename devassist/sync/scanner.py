"""
Directory Scanner
=================

Walks a project directory and turns every eligible file into a
``ScannedFile`` carrying its relative name, text content and SHA-256 hash.
"""

import hashlib
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from devassist.utils.logging import timeit

STATE_DIR_NAME = ".devassist"
DEFAULT_IGNORED = (".env", "output", "dist", "target", "build", ".git", STATE_DIR_NAME)


@dataclass(frozen=True)
class ScannedFile:
    name: str
    path: Path
    content: str
    hash: str


@dataclass
class ScanReport:
    files: list[ScannedFile]
    skipped: list[str]

    @property
    def names(self) -> set[str]:
        return {scanned.name for scanned in self.files}

    @property
    def present(self) -> set[str]:
        """Names that exist locally, including files that were skipped."""
        return self.names | set(self.skipped)


def hash_content(content: str) -> str:
    """Return the lowercase hex SHA-256 digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def is_dotenv(name: str) -> bool:
    return name == ".env" or name.startswith(".env.")


def _ignored_name(name: str, ignored: set[str]) -> bool:
    return name in ignored or is_dotenv(name)


def is_ignored(relative: str | Path, ignored: Iterable[str]) -> bool:
    """Check whether any component of a relative path is an ignored name.

    Dotenv files (`.env` and `.env.*`) are always ignored.
    """
    ignored = set(ignored)
    return any(_ignored_name(part, ignored) for part in Path(relative).parts)


def iter_files(root: Path, ignored: Iterable[str] = DEFAULT_IGNORED) -> Iterator[Path]:
    """Yield regular files under root, pruning ignored directories in place.

    Symlinks are not followed and symlinked files are not yielded.
    """
    ignored = set(ignored)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not _ignored_name(d, ignored))
        for filename in sorted(filenames):
            if _ignored_name(filename, ignored):
                continue
            path = Path(dirpath) / filename
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def relative_name(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()


@timeit
def scan_directory(root: str | Path, ignored: Iterable[str] = DEFAULT_IGNORED) -> ScanReport:
    """Read and hash every eligible file below root.

    Files that are not valid UTF-8 or cannot be read are reported as skipped
    instead of aborting the scan.

    Args:
        root: Directory to scan
        ignored: Path component names to exclude

    Returns:
        ScanReport: Scanned files sorted by name, plus skipped names
    """
    root = Path(root).resolve()
    files: list[ScannedFile] = []
    skipped: list[str] = []

    for path in iter_files(root, ignored):
        name = relative_name(root, path)
        try:
            content = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Skipping non UTF-8 file: {name}")
            skipped.append(name)
            continue
        except OSError as error:
            logger.warning(f"Skipping unreadable file {name}: {error}")
            skipped.append(name)
            continue
        logger.debug(f"Processing file: {name}")
        files.append(ScannedFile(name=name, path=path, content=content, hash=hash_content(content)))

    logger.info(f"Scanned {len(files)} files.")
    return ScanReport(files=sorted(files, key=lambda f: f.name), skipped=skipped)
