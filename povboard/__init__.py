"""
povboard - Kanban boards for Proof of Value phases.

Stages and tasks are reordered optimistically and kept in sync with a
file-backed, authoritative board store.
"""

__version__ = "0.1.0"
