"""
Address Locator.

Resolves a plausible street address near a coordinate by trying an ordered
list of strategies. The synthetic generator always closes the chain, so a
valid request always yields an Address.
"""

import json
import logging
import math
import random
import re
import uuid
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from pydantic import BaseModel, Field, ValidationError

from hideout.content import AddressPrompt, ContentService
from hideout.exceptions import InvalidLocatorInput, LocatorFailure
from hideout.geo import distance_miles, format_coordinate, is_valid_coordinate, offset_flat
from hideout.models import Address, AddressKind, AnswerRecord, Coordinate

logger = logging.getLogger(__name__)

STREET_NAMES = [
    "Main St",
    "Oak Ave",
    "Maple Dr",
    "Park Rd",
    "Cedar Ln",
    "Elm St",
    "Washington Ave",
    "Lake View Rd",
    "Church St",
    "Hillside Dr",
]

# AI candidates may sit slightly outside the requested radius
RADIUS_TOLERANCE = 1.1


@dataclass(frozen=True)
class LocatorContext:
    """What the locator knows about the game beyond the search disc."""
    city_name: str = ""
    prior_answers: tuple[AnswerRecord, ...] = field(default_factory=tuple)


class LocatorStrategy(Protocol):
    """One way of resolving an address. Raises LocatorFailure when it cannot."""
    name: str

    def resolve(
        self,
        center: Coordinate,
        radius_miles: float,
        context: LocatorContext,
        rng: random.Random,
    ) -> Address:
        ...


class _Candidate(BaseModel):
    label: str = Field(min_length=1)
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)


class _CandidatePayload(BaseModel):
    addresses: list[_Candidate]


def extract_json(text: str) -> object:
    """
    Pull a JSON value out of free text.

    Accepts a bare JSON document, a fenced ```json block, or the outermost
    {...} span embedded in prose.
    """
    text = text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    fenced = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except json.JSONDecodeError:
            pass

    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return json.loads(text[start:end + 1])
    raise json.JSONDecodeError("No JSON object found", text, 0)


def describe_answers(history: Sequence[AnswerRecord]) -> list[str]:
    """One-line summaries of distance answers, for prompts and logs."""
    lines = []
    for record in history:
        if record.distance_asked is None:
            continue
        verdict = "yes" if record.was_within else "no"
        lines.append(
            f"Within {record.distance_asked:g} mi of "
            f"{format_coordinate(record.seeker_position_at_ask)}: {verdict}"
        )
    return lines


class ContentServiceStrategy:
    """Ask a language model for nearby street addresses."""

    name = "content_service"

    def __init__(self, service: ContentService, max_candidates: int = 5):
        self.service = service
        self.max_candidates = max_candidates

    def resolve(
        self,
        center: Coordinate,
        radius_miles: float,
        context: LocatorContext,
        rng: random.Random,
    ) -> Address:
        prompt = AddressPrompt(
            lat=center.lat,
            lon=center.lon,
            radius_miles=radius_miles,
            city_name=context.city_name,
            max_candidates=self.max_candidates,
            hints=describe_answers(context.prior_answers),
        )

        try:
            text = self.service.complete(prompt.build_system_prompt(), prompt.build_user_prompt())
        except Exception as e:
            raise LocatorFailure(self.name, f"service error: {e}") from e

        try:
            payload = _CandidatePayload.model_validate(extract_json(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise LocatorFailure(self.name, f"malformed response: {e}") from e

        limit = radius_miles * RADIUS_TOLERANCE
        nearby = [
            c for c in payload.addresses
            if distance_miles(center, Coordinate(lat=c.lat, lon=c.lon)) <= limit
        ]
        if not nearby:
            raise LocatorFailure(
                self.name,
                f"none of {len(payload.addresses)} candidates within {radius_miles:g} mi",
            )

        chosen = rng.choice(nearby)
        return Address(
            id=f"ai-{uuid.uuid4().hex[:12]}",
            label=chosen.label,
            coordinate=Coordinate(lat=chosen.lat, lon=chosen.lon),
            kind=AddressKind.STREET,
            confidence=0.8,
        )


class SyntheticStrategy:
    """Generate a made-up street address at a random point inside the disc."""

    name = "synthetic"

    def __init__(self, street_names: Sequence[str] = tuple(STREET_NAMES)):
        self.street_names = list(street_names)

    def resolve(
        self,
        center: Coordinate,
        radius_miles: float,
        context: LocatorContext,
        rng: random.Random,
    ) -> Address:
        bearing = rng.uniform(0.0, 2 * math.pi)
        miles = rng.uniform(0.0, radius_miles)
        point = offset_flat(center, bearing, miles)

        label = f"{rng.randint(1, 2999)} {rng.choice(self.street_names)}"
        if context.city_name:
            label = f"{label}, {context.city_name}"

        return Address(
            id=f"synthetic-{uuid.uuid4().hex[:12]}",
            label=label,
            coordinate=point,
            kind=AddressKind.STREET,
            confidence=0.3,
        )


class AddressLocator:
    """
    Resolve addresses near a point through an ordered strategy chain.

    Strategies are tried in order; the first Address wins. A
    SyntheticStrategy is appended when the chain does not already end with
    one.
    """

    def __init__(
        self,
        strategies: Sequence[LocatorStrategy] = (),
        rng: random.Random | None = None,
    ):
        self.strategies: list[LocatorStrategy] = list(strategies)
        if not self.strategies or not isinstance(self.strategies[-1], SyntheticStrategy):
            self.strategies.append(SyntheticStrategy())
        self.rng = rng or random.Random()

    def resolve_near(
        self,
        center: Coordinate,
        radius_miles: float,
        context: LocatorContext | None = None,
    ) -> Address:
        """
        Produce a street address within `radius_miles` of `center`.

        Raises:
            InvalidLocatorInput: center is out of range or radius is negative/non-finite
        """
        if (
            not isinstance(center, Coordinate)
            or not is_valid_coordinate(center)
            or not isinstance(radius_miles, (int, float))
            or not math.isfinite(radius_miles)
            or radius_miles < 0
        ):
            raise InvalidLocatorInput(center, radius_miles)

        context = context or LocatorContext()
        for strategy in self.strategies:
            try:
                address = strategy.resolve(center, radius_miles, context, self.rng)
            except LocatorFailure as e:
                logger.warning(f"Locator strategy failed, trying next: {e}")
                continue
            logger.debug(f"Resolved {address.label!r} via {strategy.name}")
            return address

        # Unreachable while the chain ends with SyntheticStrategy
        raise LocatorFailure("chain", "all strategies failed")
