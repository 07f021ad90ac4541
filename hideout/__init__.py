"""
Hideout

A single-session hide and seek game: the hider picks a real-world location
and an automated seeker closes in on it through yes/no questions.
"""

from hideout.config import GameConfig, load_config
from hideout.controller import GameController
from hideout.exceptions import (
    HideoutError,
    InvalidLocatorInput,
    InvalidTransition,
    LocatorFailure,
    NoSeekerPosition,
)
from hideout.models import (
    Address,
    AddressKind,
    AnswerRecord,
    Coordinate,
    DistanceQuestion,
    GamePhase,
    LetterQuestion,
)

__all__ = [
    'GameController',
    'GameConfig',
    'load_config',
    'Address',
    'AddressKind',
    'AnswerRecord',
    'Coordinate',
    'DistanceQuestion',
    'LetterQuestion',
    'GamePhase',
    'HideoutError',
    'LocatorFailure',
    'InvalidLocatorInput',
    'InvalidTransition',
    'NoSeekerPosition',
]
