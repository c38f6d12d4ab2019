from abc import ABC, abstractmethod

from devassist.models import FileDocument


class RemoteStoreError(Exception):
    """Raised when a remote store rejects or fails an operation."""


class RemoteStore(ABC):
    """Document store keyed by project and file name."""

    @abstractmethod
    def upsert(self, project: str, document: FileDocument) -> None:
        """Insert the document or replace the one with the same name."""

    @abstractmethod
    def list_names(self, project: str) -> set[str]:
        """Return the names of every document stored for the project."""

    @abstractmethod
    def delete(self, project: str, name: str) -> None:
        """Remove a document. Deleting a missing document is not an error."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "RemoteStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
