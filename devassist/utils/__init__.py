"""
Utility helpers for console output and logging.
"""
