"""
Remote stores that receive synchronized file documents.
"""

from .base import RemoteStore, RemoteStoreError
from .api_client import DevAssistClient
from .json_store import JsonFileStore

__all__ = ['RemoteStore', 'RemoteStoreError', 'DevAssistClient', 'JsonFileStore']
