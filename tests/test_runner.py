"""Tests for hideout.runner module (no terminal I/O)."""

import random

from hideout.config import GameConfig
from hideout.locator import AddressLocator, ContentServiceStrategy, SyntheticStrategy
from hideout.models import GamePhase
from hideout.runner import ConsoleGame, build_game, build_locator, resolve_hideout

from tests.conftest import FixedStrategy, make_address


class TestBuildLocator:
    def test_offline_is_synthetic_only(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        locator = build_locator(GameConfig(), random.Random(0), offline=True)
        assert len(locator.strategies) == 1
        assert isinstance(locator.strategies[0], SyntheticStrategy)

    def test_no_key_is_synthetic_only(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        locator = build_locator(GameConfig(), random.Random(0))
        assert [type(s) for s in locator.strategies] == [SyntheticStrategy]

    def test_key_enables_content_service(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        locator = build_locator(GameConfig(), random.Random(0))
        assert isinstance(locator.strategies[0], ContentServiceStrategy)
        assert isinstance(locator.strategies[-1], SyntheticStrategy)


class TestBuildGame:
    def test_locator_and_selector_do_not_share_rng(self, deferred):
        game = build_game(GameConfig(random_seed=7), deferred, offline=True)
        assert game.locator.rng is not game.selector.rng
        assert game.locator.rng.random() == game.selector.rng.random()
        assert game.scheduler.executor is deferred


class TestResolveHideout:
    def test_offline_uses_popular(self):
        hideout = resolve_hideout("Tokyo", GameConfig(), offline=True)
        assert hideout.id == "Tokyo"

    def test_offline_unknown(self):
        assert resolve_hideout("Atlantis", GameConfig(), offline=True) is None


class TestConsoleGame:
    def test_finished_after_round_limit(self, capsys):
        seeker = make_address("1 Main St", 40.01, -75.0)
        game = ConsoleGame(locator=AddressLocator([FixedStrategy(seeker)]), max_rounds=1)
        game.select_hideout(make_address("Hideout", 40.0, -75.0))
        game.confirm_hide()
        game.scheduler.advance(8.0)
        assert not game.finished

        game.submit_answer()
        assert game.phase == GamePhase.SHOWING_RESULT
        assert game.finished

        out = capsys.readouterr().out
        assert "THE SEEKER HAS BEEN RELEASED" in out
        assert "[Round 1]" in out
