"""Tests for hideout.locator module."""

import json
import random

import pytest

from hideout.exceptions import InvalidLocatorInput, LocatorFailure
from hideout.geo import distance_miles
from hideout.locator import (
    STREET_NAMES,
    AddressLocator,
    ContentServiceStrategy,
    LocatorContext,
    SyntheticStrategy,
    describe_answers,
    extract_json,
)
from hideout.models import AddressKind, AnswerRecord, Coordinate

CENTER = Coordinate(lat=40.0, lon=-75.0)
NEARBY = {"addresses": [{"label": "10 Market St, Philadelphia", "lat": 40.002, "lon": -75.001}]}
FARAWAY = {"addresses": [{"label": "1 Broadway, New York", "lat": 40.7, "lon": -74.0}]}


class FakeService:
    def __init__(self, reply: str | Exception):
        self.reply = reply
        self.prompts: list[tuple[str, str]] = []

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class TestResolveNear:
    @pytest.mark.parametrize(
        "center, radius",
        [
            (Coordinate(lat=91.0, lon=0.0), 1.0),
            (Coordinate(lat=0.0, lon=200.0), 1.0),
            (CENTER, -1.0),
            (CENTER, float("nan")),
            (CENTER, float("inf")),
        ],
    )
    def test_invalid_input_raises(self, center, radius):
        with pytest.raises(InvalidLocatorInput):
            AddressLocator().resolve_near(center, radius)

    def test_synthetic_always_closes_chain(self):
        locator = AddressLocator([ContentServiceStrategy(FakeService("{}"))])
        assert isinstance(locator.strategies[-1], SyntheticStrategy)
        assert len(locator.strategies) == 2

    def test_falls_back_on_service_error(self):
        locator = AddressLocator([ContentServiceStrategy(FakeService(ConnectionError("down")))])
        address = locator.resolve_near(CENTER, 0.5, LocatorContext(city_name="Philadelphia"))
        assert address.id.startswith("synthetic-")

    @pytest.mark.parametrize("reply", ["not json at all", '{"addresses": "nope"}', json.dumps(FARAWAY), '{"addresses": []}'])
    def test_falls_back_on_bad_reply(self, reply):
        locator = AddressLocator([ContentServiceStrategy(FakeService(reply))])
        assert locator.resolve_near(CENTER, 0.5).id.startswith("synthetic-")

    def test_uses_service_candidate(self):
        service = FakeService("Sure! Here you go:\n" + json.dumps(NEARBY) + "\nEnjoy.")
        locator = AddressLocator([ContentServiceStrategy(service)], rng=random.Random(1))
        address = locator.resolve_near(CENTER, 0.5, LocatorContext(city_name="Philadelphia"))
        assert address.label == "10 Market St, Philadelphia"
        assert address.kind == AddressKind.STREET
        assert address.id.startswith("ai-")

    def test_prompt_mentions_city_and_clues(self):
        service = FakeService(json.dumps(NEARBY))
        history = (AnswerRecord(5, True, Coordinate(lat=40.01, lon=-75.0)),)
        AddressLocator([ContentServiceStrategy(service)]).resolve_near(
            CENTER, 0.5, LocatorContext(city_name="Philadelphia", prior_answers=history)
        )
        _, user_prompt = service.prompts[0]
        assert "Philadelphia" in user_prompt
        assert "Within 5 mi" in user_prompt


class TestSyntheticStrategy:
    def test_stays_inside_radius(self):
        strategy = SyntheticStrategy()
        rng = random.Random(11)
        for _ in range(200):
            address = strategy.resolve(CENTER, 0.5, LocatorContext(), rng)
            assert distance_miles(CENTER, address.coordinate) <= 0.5 * 1.01

    def test_label_uses_street_pool_and_city(self):
        address = SyntheticStrategy().resolve(CENTER, 1.0, LocatorContext(city_name="Springfield"), random.Random(2))
        assert address.label.endswith(", Springfield")
        assert any(street in address.label for street in STREET_NAMES)

    def test_zero_radius_returns_center(self):
        address = AddressLocator().resolve_near(CENTER, 0.0)
        assert address.coordinate == CENTER

    def test_deterministic_with_seed(self):
        a = AddressLocator(rng=random.Random(5)).resolve_near(CENTER, 1.0)
        b = AddressLocator(rng=random.Random(5)).resolve_near(CENTER, 1.0)
        assert a.coordinate == b.coordinate
        assert a.label == b.label


class TestContentServiceStrategy:
    def test_raises_locator_failure(self):
        strategy = ContentServiceStrategy(FakeService("garbage"))
        with pytest.raises(LocatorFailure) as exc_info:
            strategy.resolve(CENTER, 0.5, LocatorContext(), random.Random(0))
        assert exc_info.value.strategy == "content_service"


class TestExtractJson:
    def test_bare(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert extract_json('Here:\n```json\n{"a": 2}\n```') == {"a": 2}

    def test_embedded(self):
        assert extract_json('prefix {"a": 3} suffix') == {"a": 3}

    def test_none_found(self):
        with pytest.raises(json.JSONDecodeError):
            extract_json("no braces here")


def test_describe_answers_skips_letter_rounds():
    history = [
        AnswerRecord(3, False, Coordinate(lat=40.0, lon=-75.0)),
        AnswerRecord(None, True, Coordinate(lat=40.0, lon=-75.0)),
    ]
    assert describe_answers(history) == ["Within 3 mi of (40.0000, -75.0000): no"]
