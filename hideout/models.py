"""
Data model for the game.

Value types are immutable: a seeker move produces a new Address rather than
mutating the old one, and answer history only ever grows.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lon: float


class AddressKind(Enum):
    """What sort of place an Address resolves to."""
    CITY = "city"
    TOWN = "town"
    VILLAGE = "village"
    HAMLET = "hamlet"
    SUBURB = "suburb"
    LOCALITY = "locality"
    ADMINISTRATIVE = "administrative"
    STREET = "street"
    OTHER = "other"

    @classmethod
    def from_place_type(cls, place_type: str | None) -> "AddressKind":
        """Map a geocoder place type onto a kind, defaulting to OTHER."""
        try:
            return cls((place_type or "").lower())
        except ValueError:
            return cls.OTHER


class Address(BaseModel):
    """Any resolved place: hideout, seeker position or search result."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    coordinate: Coordinate
    kind: AddressKind = AddressKind.STREET
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @property
    def lat(self) -> float:
        return self.coordinate.lat

    @property
    def lon(self) -> float:
        return self.coordinate.lon


@dataclass(frozen=True)
class AnswerRecord:
    """One resolved distance round. `distance_asked` is None for letter rounds."""
    distance_asked: float | None
    was_within: bool
    seeker_position_at_ask: Coordinate


@dataclass(frozen=True)
class DistanceQuestion:
    """Is the hideout within `threshold_miles` of the seeker?"""
    threshold_miles: float

    def prompt(self) -> str:
        return f"Are you within {self.threshold_miles:g} miles of the seeker?"


@dataclass(frozen=True)
class LetterQuestion:
    """Is letter number `position` (1-based) of the hideout's name `letter`?"""
    position: int
    letter: str

    def prompt(self) -> str:
        ordinal = {1: "1st", 2: "2nd", 3: "3rd"}.get(self.position, f"{self.position}th")
        return f"Is the {ordinal} letter of your hideout '{self.letter}'?"


Question = Union[DistanceQuestion, LetterQuestion]


class GamePhase(Enum):
    """Phases of a game session."""
    SELECTING = "selecting"
    CONFIRMING_HIDE = "confirming_hide"
    HIDE_COUNTDOWN = "hide_countdown"
    SEEKER_RELEASE_COUNTDOWN = "seeker_release_countdown"
    AWAITING_QUESTION = "awaiting_question"
    AWAITING_ANSWER = "awaiting_answer"
    SHOWING_RESULT = "showing_result"
    IDLE = "idle"


@dataclass(frozen=True)
class Estimate:
    """Best-guess disc for the hider's location."""
    center: Coordinate
    radius_miles: float


@dataclass(frozen=True)
class OpenQuestion:
    """The active question together with what the seeker knew when asking it."""
    question: Question
    seeker_position_at_ask: Coordinate
    points: int
    round_number: int


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of one question, distance or letter."""
    question: Question
    answer: bool
    auto: bool
    seeker_position_at_ask: Coordinate
    true_distance_miles: float | None = None
    true_letter: str | None = None
    record: AnswerRecord | None = None


@dataclass(frozen=True)
class MapView:
    """Presentational snapshot consumed by a map surface."""
    center: Coordinate
    zoom: int
    bbox: tuple[float, float, float, float]  # (min_lon, min_lat, max_lon, max_lat)
    markers: list[Coordinate] = field(default_factory=list)


class GameSnapshot(BaseModel):
    """Read-only view of the controller state for UI consumers."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    phase: GamePhase
    countdown: int = 0
    round_number: int = 0
    score: int = 0
    question: Any | None = None
    hideout: Address | None = None
    seeker: Address | None = None
    history: tuple[AnswerRecord, ...] = ()
    last_result: AnswerResult | None = None
    map_view: MapView | None = None
