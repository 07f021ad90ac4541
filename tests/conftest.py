"""Shared test fixtures: fake-time scheduler, controllable executors, fixed locators."""

import random
from concurrent.futures import Executor, Future

import pytest

from hideout.config import GameConfig
from hideout.controller import GameController
from hideout.locator import AddressLocator
from hideout.models import Address, AddressKind, Coordinate
from hideout.questions import QuestionSelector
from hideout.scheduler import Scheduler

HIDEOUT = Coordinate(lat=40.0, lon=-75.0)
SEEKER_START = Coordinate(lat=40.01, lon=-75.0)


def make_address(label: str, lat: float, lon: float, kind: AddressKind = AddressKind.STREET) -> Address:
    return Address(
        id=label.lower().replace(" ", "-"),
        label=label,
        coordinate=Coordinate(lat=lat, lon=lon),
        kind=kind,
        confidence=1.0,
    )


class FixedStrategy:
    """Returns the given addresses in order, repeating the last one, and records every call."""

    name = "fixed"

    def __init__(self, *addresses: Address):
        self.addresses = list(addresses)
        self.calls: list[tuple[Coordinate, float]] = []

    def resolve(self, center, radius_miles, context, rng):
        self.calls.append((center, radius_miles))
        index = min(len(self.calls) - 1, len(self.addresses) - 1)
        return self.addresses[index]


class DeferredExecutor(Executor):
    """Holds submitted work until run_all() is called, like a slow network."""

    def __init__(self):
        self.pending: list[tuple[Future, object]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.pending.append((future, lambda: fn(*args, **kwargs)))
        return future

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for future, work in pending:
            if future.cancelled():
                continue
            try:
                future.set_result(work())
            except Exception as e:
                future.set_exception(e)


@pytest.fixture()
def hideout() -> Address:
    return make_address("Elm Street Hideout", HIDEOUT.lat, HIDEOUT.lon)


@pytest.fixture()
def seeker_start() -> Address:
    return make_address("12 Oak Ave", SEEKER_START.lat, SEEKER_START.lon)


@pytest.fixture()
def strategy(seeker_start: Address) -> FixedStrategy:
    return FixedStrategy(seeker_start)


@pytest.fixture()
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture()
def deferred() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture()
def make_controller(strategy: FixedStrategy):
    """Factory for controllers that never ask letter questions unless told to."""

    def _make(scheduler: Scheduler | None = None, letter_probability: float = 0.0, **overrides) -> GameController:
        config = GameConfig(letter_probability=letter_probability, **overrides)
        return GameController(
            locator=AddressLocator([strategy], rng=random.Random(7)),
            selector=QuestionSelector(rng=random.Random(7), letter_probability=letter_probability),
            scheduler=scheduler or Scheduler(),
            config=config,
        )

    return _make


@pytest.fixture()
def controller(make_controller) -> GameController:
    return make_controller()
