#!/usr/bin/env python3
"""
Console runner for a hide and seek session.

Usage:
    python -m hideout.runner --list-popular              # List built-in locations
    python -m hideout.runner --city "Paris"              # Hide in Paris
    python -m hideout.runner --city "Springfield" -i     # Pick from search results
    python -m hideout.runner --city London --offline --max-rounds 5
"""

import argparse
import logging
import os
import queue
import random
import sys
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor

from hideout.config import GameConfig, load_config
from hideout.content import OpenAIContentService
from hideout.controller import GameController
from hideout.geo import format_coordinate, format_miles
from hideout.locator import AddressLocator, ContentServiceStrategy, SyntheticStrategy
from hideout.models import Address, AnswerResult, GamePhase, OpenQuestion
from hideout.questions import QuestionSelector
from hideout.scheduler import Scheduler
from hideout.search import POPULAR_LOCATIONS, NominatimSearch, find_popular

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

LOOP_INTERVAL = 0.1


class ConsoleGame(GameController):
    """Prints game events to the terminal."""

    def __init__(self, *args, max_rounds: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_rounds = max_rounds

    def on_countdown(self, phase: GamePhase, remaining: int) -> None:
        if phase == GamePhase.HIDE_COUNTDOWN:
            print(f"  Hiding in {remaining}...")
        elif phase == GamePhase.SEEKER_RELEASE_COUNTDOWN:
            print(f"  Seeker ready in {remaining}...")
        elif phase == GamePhase.AWAITING_ANSWER and remaining in (10, 5, 3, 2, 1):
            print(f"  {remaining}s left to answer")

    def on_seeker_released(self) -> None:
        print("\n*** THE SEEKER HAS BEEN RELEASED! ***\n")

    def on_seeker_moved(self, seeker: Address) -> None:
        print(f"  Seeker is now at {seeker.label} {format_coordinate(seeker.coordinate)}")

    def on_question(self, question: OpenQuestion) -> None:
        print(f"\n[Round {question.round_number}] {question.question.prompt()}")
        print(f"  (+{question.points} points, score {self.score}) Press Enter to answer")

    def on_answer(self, result: AnswerResult) -> None:
        verdict = "YES" if result.answer else "NO"
        how = "auto-answered" if result.auto else "you answered"
        print(f"  {verdict} ({how})")
        if result.true_distance_miles is not None:
            print(f"  Seeker was {format_miles(result.true_distance_miles)} away")

    @property
    def finished(self) -> bool:
        """Whether the round limit has been reached and the last answer shown."""
        return (
            self.max_rounds is not None
            and self.round_number >= self.max_rounds
            and self.phase == GamePhase.SHOWING_RESULT
        )


def list_popular():
    """List the built-in popular locations."""
    print("\n" + "=" * 60)
    print("Popular Locations")
    print("=" * 60)
    for location in POPULAR_LOCATIONS:
        print(f"\n  {location.id}")
        print(f"    {location.label} {format_coordinate(location.coordinate)}")
    print("\n" + "=" * 60 + "\n")


def interactive_select(candidates: list[Address]) -> Address | None:
    """Interactively pick one of the search results."""
    if not candidates:
        print("No locations found")
        return None

    print("\nSelect a location for your hideout:\n")
    for i, candidate in enumerate(candidates, 1):
        print(f"  {i}. {candidate.label}")
    print(f"\n  0. Exit\n")

    while True:
        choice = input("Enter choice: ").strip()
        if choice == '0' or choice.lower() in ('q', 'quit', 'exit'):
            return None
        try:
            idx = int(choice) - 1
        except ValueError:
            print("Invalid choice, try again")
            continue
        if 0 <= idx < len(candidates):
            return candidates[idx]
        print("Invalid choice, try again")


def resolve_hideout(
    city: str,
    config: GameConfig,
    offline: bool = False,
    interactive: bool = False,
) -> Address | None:
    """Find the hideout through search, falling back to the popular list."""
    candidates: list[Address] = []
    if not offline:
        search = NominatimSearch(
            base_url=config.nominatim_url,
            user_agent=config.user_agent,
            timeout=config.request_timeout,
            limit=config.search_limit,
        )
        try:
            candidates = search.search(city)
        finally:
            search.close()

    popular = find_popular(city)
    if popular is not None and popular not in candidates:
        candidates.append(popular)

    if interactive:
        return interactive_select(candidates)
    return candidates[0] if candidates else None


def build_locator(config: GameConfig, rng: random.Random, offline: bool = False) -> AddressLocator:
    """AI lookup first when an API key is available, synthetic addresses otherwise."""
    strategies = []
    if not offline and "OPENAI_API_KEY" in os.environ:
        service = OpenAIContentService(model=config.model_name, temperature=config.temperature)
        strategies.append(ContentServiceStrategy(service))
    else:
        logger.info("No AI content service configured, using synthetic addresses")
    strategies.append(SyntheticStrategy())
    return AddressLocator(strategies, rng=rng)


def build_game(
    config: GameConfig,
    executor: Executor,
    max_rounds: int | None = None,
    offline: bool = False,
) -> ConsoleGame:
    """Wire up a console game. The locator and selector each get their own rng."""
    return ConsoleGame(
        locator=build_locator(config, random.Random(config.random_seed), offline=offline),
        selector=QuestionSelector(
            rng=random.Random(config.random_seed),
            letter_probability=config.letter_probability,
        ),
        scheduler=Scheduler(executor=executor),
        config=config,
        max_rounds=max_rounds,
    )


def _read_enter(presses: queue.Queue, stop: threading.Event) -> None:
    while not stop.is_set():
        line = sys.stdin.readline()
        if not line:
            return
        presses.put(line)


def run_session(
    city: str,
    config_path: str | None = None,
    seed: int | None = None,
    max_rounds: int | None = None,
    offline: bool = False,
    interactive: bool = False,
) -> int:
    """
    Play one session in the terminal.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_config(config_path)
    if seed is not None:
        config = config.model_copy(update={"random_seed": seed})

    hideout = resolve_hideout(city, config, offline=offline, interactive=interactive)
    if hideout is None:
        print(f"Error: could not find a location for '{city}'")
        return 1

    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="locator")
    game = build_game(config, executor, max_rounds=max_rounds, offline=offline)

    print(f"\n{'=' * 60}")
    print(f"Hideout: {hideout.label}")
    print(f"Location: {format_coordinate(hideout.coordinate)}")
    if max_rounds:
        print(f"Rounds: {max_rounds}")
    print(f"{'=' * 60}\n")

    game.select_hideout(hideout)
    input("Press Enter to hide here...")
    game.confirm_hide()

    presses: queue.Queue = queue.Queue()
    stop = threading.Event()
    reader = threading.Thread(target=_read_enter, args=(presses, stop), daemon=True)
    reader.start()

    start_time = time.monotonic()
    last = start_time
    try:
        while game.phase != GamePhase.IDLE:
            now = time.monotonic()
            game.scheduler.advance(now - last)
            last = now

            while not presses.empty():
                presses.get_nowait()
                if game.phase == GamePhase.AWAITING_ANSWER:
                    game.submit_answer()

            if game.finished:
                game.stop()
                break

            time.sleep(LOOP_INTERVAL)
    except KeyboardInterrupt:
        print("\n\nSession interrupted by user")
        game.stop()
    finally:
        stop.set()
        executor.shutdown(wait=False, cancel_futures=True)

    elapsed = time.monotonic() - start_time

    print(f"\n{'=' * 60}")
    print("GAME OVER")
    print(f"{'=' * 60}")
    print(f"Rounds: {game.round_number}")
    print(f"Score: {game.score}")
    print(f"Time Elapsed: {elapsed:.1f}s")
    if game.seeker is not None:
        print(f"Seeker finished {format_miles(game.seeker_distance())} from your hideout")
    print(f"\n{'=' * 60}\n")
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Hide and seek against an automated seeker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --list-popular
    %(prog)s --city Paris
    %(prog)s --city "San Francisco" --max-rounds 10
    %(prog)s --city Springfield -i
        """
    )

    parser.add_argument(
        '--list-popular',
        action='store_true',
        help='List built-in popular locations'
    )

    parser.add_argument(
        '--city',
        type=str,
        help='City or place to hide in'
    )

    parser.add_argument(
        '--interactive', '-i',
        action='store_true',
        help='Pick the hideout from a menu of search results'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to game configuration file (YAML or JSON)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible seekers'
    )

    parser.add_argument(
        '--max-rounds', '-m',
        type=int,
        default=None,
        help='End the session after this many questions'
    )

    parser.add_argument(
        '--offline',
        action='store_true',
        help='Do not contact search or AI services'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args()

    # Set log level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.list_popular:
        list_popular()
        return 0

    if args.city:
        return run_session(
            args.city,
            config_path=args.config,
            seed=args.seed,
            max_rounds=args.max_rounds,
            offline=args.offline,
            interactive=args.interactive,
        )

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
