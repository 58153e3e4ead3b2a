"""Game domain services: words, round lifecycle, poems, rotation and scoring.

The pure modules (words, rounds, poems, scoring) never touch storage or the
clock. `orchestrator.GameService` combines them with an injected repository
and is what HTTP routes and socket handlers call, keeping transport concerns
separated from core game mechanics.
"""

from .errors import WordsmithError, NotFound, InvalidTransition, NotAuthorized, ValidationError
from .orchestrator import GameService
from .repository import GameRepository, MemoryRepository
from .rounds import RoundStatus

__all__ = [
    'WordsmithError', 'NotFound', 'InvalidTransition', 'NotAuthorized', 'ValidationError',
    'GameService', 'GameRepository', 'MemoryRepository', 'RoundStatus',
]
