"""Game domain services: scoring, round flow and delayed tasks.

This package contains the round logic that socket handlers call into,
keeping transport concerns separated from core game mechanics.
"""

from .rounds import RoomStateMachine
from .scheduler import ScheduledTask, TaskScheduler
from .scoring import answers_match, normalize_answer

__all__ = [
    'RoomStateMachine',
    'ScheduledTask',
    'TaskScheduler',
    'answers_match',
    'normalize_answer',
]
