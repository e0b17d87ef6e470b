"""
Data storage for practice attempts.
"""

from .attempts import AttemptRecord, AttemptLog

__all__ = [
    'AttemptRecord',
    'AttemptLog'
]
