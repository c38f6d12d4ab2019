"""
JSON File Store
===============

Keeps synchronized documents in a local JSON file shaped as
``{project: {name: document}}``. Useful for offline runs and for checking
what a sync would send without an API key.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from devassist.models import FileDocument
from devassist.stores.base import RemoteStore, RemoteStoreError


class JsonFileStore(RemoteStore):
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            content = self.path.read_text()
        except OSError as error:
            raise RemoteStoreError(f"Cannot read {self.path}: {error}") from error
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as error:
            raise RemoteStoreError(f"Invalid JSON in {self.path}: {error}") from error
        if not isinstance(data, dict):
            raise RemoteStoreError(f"Expected a JSON object in {self.path}")
        return data

    def _write(self, data: Dict[str, Dict[str, Any]]) -> None:
        try:
            os.makedirs(self.path.parent, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2, sort_keys=True)
        except OSError as error:
            raise RemoteStoreError(f"Cannot write {self.path}: {error}") from error

    def upsert(self, project: str, document: FileDocument) -> None:
        data = self._read()
        data.setdefault(project, {})[document.name] = document.model_dump()
        self._write(data)
        logger.info(f"Updated or inserted document for file: {document.name}")

    def list_names(self, project: str) -> set[str]:
        return set(self._read().get(project, {}))

    def delete(self, project: str, name: str) -> None:
        data = self._read()
        documents = data.get(project, {})
        if name not in documents:
            return
        del documents[name]
        self._write(data)
        logger.info(f"Deleted document for file: {name}")
