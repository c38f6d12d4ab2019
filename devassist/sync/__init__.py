"""
File synchronization package: directory scanning, hash cache and sync passes.
"""

from .file_sync import FileSynchronizer
from .scanner import DEFAULT_IGNORED, scan_directory
from .state import SyncState

__all__ = ['FileSynchronizer', 'DEFAULT_IGNORED', 'scan_directory', 'SyncState']
