"""
Pydantic data models package.

Contains the serialized representation of parsed entries.
"""

from .entry import EntryFields

__all__ = [
    "EntryFields",
]
