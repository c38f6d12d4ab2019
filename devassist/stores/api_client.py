"""
HTTP client for the DevAssist API.

Documents are addressed as ``{base_url}/projects/{project}/files`` and
authenticated with a bearer API key.
"""
from typing import Any, Optional
from urllib.parse import quote

import requests
from loguru import logger

from devassist.environment import DEFAULT_API_URL, DEFAULT_TIMEOUT
from devassist.models import FileDocument
from devassist.stores.base import RemoteStore, RemoteStoreError


class DevAssistClient(RemoteStore):
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("api_key is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "User-Agent": "devassist-cli",
            }
        )

    def _files_url(self, project: str) -> str:
        return f"{self.base_url}/projects/{quote(project, safe='')}/files"

    def _request(self, method: str, url: str, allowed: tuple[int, ...] = (), **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as error:
            raise RemoteStoreError(f"{method} {url} failed: {error}") from error

        if response.status_code in allowed:
            return response
        if not response.ok:
            detail = (response.text or "").strip()[:200]
            message = f"{method} {url} returned HTTP {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise RemoteStoreError(message)
        return response

    def upsert(self, project: str, document: FileDocument) -> None:
        self._request("PUT", self._files_url(project), json=document.model_dump())
        logger.info(f"Updated or inserted document for file: {document.name}")

    def list_names(self, project: str) -> set[str]:
        response = self._request("GET", self._files_url(project))
        try:
            payload: Any = response.json()
        except ValueError as error:
            raise RemoteStoreError(f"Invalid JSON from {response.url}: {error}") from error

        entries = payload.get("files", []) if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            raise RemoteStoreError(f"Unexpected file listing from {response.url}")
        return {entry["name"] for entry in entries if isinstance(entry, dict) and "name" in entry}

    def delete(self, project: str, name: str) -> None:
        url = f"{self._files_url(project)}/{quote(name, safe='')}"
        response = self._request("DELETE", url, allowed=(404,))
        if response.status_code == 404:
            logger.debug(f"Document already absent: {name}")
        else:
            logger.info(f"Deleted document for file: {name}")

    def close(self) -> None:
        self.session.close()
