"""
DevAssist CLI Companion - keeps a local directory in sync with a DevAssist project
"""

__version__ = "1.0.0"

from devassist.stores import DevAssistClient, JsonFileStore, RemoteStore, RemoteStoreError
from devassist.sync import FileSynchronizer

__all__ = [
    "DevAssistClient",
    "FileSynchronizer",
    "JsonFileStore",
    "RemoteStore",
    "RemoteStoreError",
]
