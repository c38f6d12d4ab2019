"""
Test Configuration and Fixtures
===============================

This module provides pytest fixtures and utilities for testing the DevAssist CLI.
"""

import os
from pathlib import Path

import pytest
from loguru import logger

from devassist.models import FileDocument
from devassist.stores.base import RemoteStore, RemoteStoreError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from the caller's DevAssist settings and .env file."""
    for key in list(os.environ):
        if key.startswith("DEVASSIST_") or key == "RUST_LOG":
            monkeypatch.delenv(key, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop loguru sinks so handlers bound to closed test streams never linger."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """
    Create a small project tree.

    Layout:
        main.py, README.md, src/lib.py, build/out.txt (ignored), .env (ignored)
    """
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "build").mkdir()
    (root / "main.py").write_text("print('hello')\n")
    (root / "README.md").write_text("# Demo\n")
    (root / "src" / "lib.py").write_text("def add(a, b):\n    return a + b\n")
    (root / "build" / "out.txt").write_text("artifact")
    (root / ".env").write_text("DEVASSIST_API_KEY=secret")
    return root


class MemoryStore(RemoteStore):
    """In-memory RemoteStore that records every call."""

    def __init__(self):
        self.documents: dict[str, dict[str, FileDocument]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()

    def upsert(self, project, document):
        self.calls.append(("upsert", document.name))
        if document.name in self.fail_on:
            raise RemoteStoreError(f"upload of {document.name} rejected")
        self.documents.setdefault(project, {})[document.name] = document

    def list_names(self, project):
        self.calls.append(("list", project))
        return set(self.documents.get(project, {}))

    def delete(self, project, name):
        self.calls.append(("delete", name))
        if name in self.fail_on:
            raise RemoteStoreError(f"delete of {name} rejected")
        self.documents.get(project, {}).pop(name, None)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
