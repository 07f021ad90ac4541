"""
Game phase controller.

Owns the phase, answer history, current question and score, and drives
every transition from scheduler callbacks:

    Selecting -> ConfirmingHide -> HideCountdown -> SeekerReleaseCountdown
      -> AwaitingQuestion -> AwaitingAnswer -> ShowingResult
      -> SeekerReleaseCountdown -> ...

Selecting a new hideout is a full reset. All timers and background jobs are
created under a cancellation token that the reset invalidates.
"""

import logging
import random

from hideout.config import GameConfig
from hideout.estimator import estimate
from hideout.exceptions import InvalidTransition, NoSeekerPosition
from hideout.geo import distance_miles
from hideout.locator import AddressLocator, LocatorContext
from hideout.map_view import build_view
from hideout.models import (
    Address,
    AnswerRecord,
    AnswerResult,
    GamePhase,
    GameSnapshot,
    OpenQuestion,
)
from hideout.movement import plan_next_position
from hideout.questions import QuestionSelector, evaluate
from hideout.scheduler import CancellationToken, Scheduler

logger = logging.getLogger(__name__)

TIMER_COUNTDOWN = "countdown"
TIMER_ANSWER = "answer"
TIMER_RESULT = "result"
TIMER_MOVEMENT = "movement"

JOB_SEED = "seed_seeker"
JOB_MOVE = "move_seeker"

SEEKER_ACTIVE_PHASES = {
    GamePhase.SEEKER_RELEASE_COUNTDOWN,
    GamePhase.AWAITING_QUESTION,
    GamePhase.SHOWING_RESULT,
}


class GameController:
    """
    The hide and seek state machine.

    Optional hooks (override as needed):
        - on_phase_change(): Called after every phase transition
        - on_countdown(): Called on every countdown / answer-timer tick
        - on_seeker_released(): Called once per game when the seeker sets off
        - on_question(): Called when a question is asked
        - on_answer(): Called when a question is resolved
        - on_seeker_moved(): Called when the seeker gets a new address
        - on_reset(): Called after a full reset
    """

    def __init__(
        self,
        locator: AddressLocator,
        selector: QuestionSelector | None = None,
        scheduler: Scheduler | None = None,
        config: GameConfig | None = None,
    ):
        """
        Initialize the controller.

        Args:
            locator: Address locator used to place and move the seeker
            selector: Question selector (created from config if not provided)
            scheduler: Time source and job runner (created if not provided)
            config: Timings and tunables
        """
        self.config = config or GameConfig()
        self.locator = locator
        self.selector = selector or QuestionSelector(
            rng=random.Random(self.config.random_seed),
            letter_probability=self.config.letter_probability,
        )
        self.scheduler = scheduler or Scheduler()

        self._token = CancellationToken()
        self.phase: GamePhase = GamePhase.SELECTING
        self._clear_state()

    def _clear_state(self) -> None:
        self.hideout: Address | None = None
        self.city: Address | None = None
        self.seeker: Address | None = None
        self._history: list[AnswerRecord] = []
        self.results: list[AnswerResult] = []
        self.current: OpenQuestion | None = None
        self.last_result: AnswerResult | None = None
        self.score: int = 0
        self.countdown: int = 0
        self.round_number: int = 0
        self.released: bool = False

    # =========================================================================
    # Optional hooks
    # =========================================================================

    def on_phase_change(self, old: GamePhase, new: GamePhase) -> None:
        """Called after every phase transition."""
        pass

    def on_countdown(self, phase: GamePhase, remaining: int) -> None:
        """Called with the remaining ticks of the running countdown."""
        pass

    def on_seeker_released(self) -> None:
        """Called when the seeker is first released."""
        pass

    def on_question(self, question: OpenQuestion) -> None:
        """Called when a new question is asked."""
        pass

    def on_answer(self, result: AnswerResult) -> None:
        """Called when a question is answered (by the hider or by timeout)."""
        pass

    def on_seeker_moved(self, seeker: Address) -> None:
        """Called whenever the seeker gets a new address."""
        pass

    def on_reset(self) -> None:
        """Called after a full reset."""
        pass

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def history(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._history)

    @property
    def city_name(self) -> str:
        place = self.city or self.hideout
        if place is None:
            return ""
        return place.label.split(",")[0].strip()

    def seeker_distance(self) -> float:
        """True distance between seeker and hideout in miles."""
        if self.seeker is None or self.hideout is None:
            raise NoSeekerPosition("seeker_distance")
        return distance_miles(self.seeker.coordinate, self.hideout.coordinate)

    def snapshot(self) -> GameSnapshot:
        """Immutable view of the current state for display."""
        return GameSnapshot(
            phase=self.phase,
            countdown=self.countdown,
            round_number=self.round_number,
            score=self.score,
            question=self.current.question if self.current else None,
            hideout=self.hideout,
            seeker=self.seeker,
            history=self.history,
            last_result=self.last_result,
            map_view=build_view(self.hideout, self.seeker, self.city),
        )

    # =========================================================================
    # User actions
    # =========================================================================

    def reset(self) -> None:
        """Drop all game state, timers and in-flight lookups; back to Selecting."""
        self._token.cancel()
        self._token = CancellationToken()
        self.scheduler.cancel_all()
        self._clear_state()
        self._set_phase(GamePhase.SELECTING)
        logger.info("Game reset")
        self.on_reset()

    def select_hideout(self, hideout: Address, city: Address | None = None) -> None:
        """Choose a hideout. Always starts a new game."""
        self.reset()
        self.hideout = hideout
        self.city = city
        logger.info(f"Hideout selected: {hideout.label}")
        self._set_phase(GamePhase.CONFIRMING_HIDE)

    def cancel_hide(self) -> None:
        """Decline the chosen hideout."""
        self._require_phase("cancel hide", GamePhase.CONFIRMING_HIDE)
        self.hideout = None
        self.city = None
        self._set_phase(GamePhase.SELECTING)

    def confirm_hide(self) -> None:
        """Confirm the hideout and start the hide countdown."""
        self._require_phase("confirm hide", GamePhase.CONFIRMING_HIDE)
        self._start_countdown(GamePhase.HIDE_COUNTDOWN, self.config.hide_countdown_ticks)

    def submit_answer(self) -> AnswerResult:
        """Answer the open question. The answer is always the truthful one."""
        self._require_phase("answer", GamePhase.AWAITING_ANSWER)
        return self._resolve_question(auto=False)

    def stop(self) -> None:
        """End the session, keeping score and history for a summary."""
        self._token.cancel()
        self._token = CancellationToken()
        self.scheduler.cancel_all()
        self.current = None
        self._set_phase(GamePhase.IDLE)

    # =========================================================================
    # Countdowns
    # =========================================================================

    def _start_countdown(self, phase: GamePhase, ticks: int) -> None:
        self.countdown = ticks
        self._set_phase(phase)
        self.on_countdown(phase, self.countdown)
        self._schedule(TIMER_COUNTDOWN, self.config.tick_seconds, self._on_countdown_tick)

    def _on_countdown_tick(self) -> None:
        self.countdown -= 1
        self.on_countdown(self.phase, self.countdown)
        if self.countdown > 0:
            self._schedule(TIMER_COUNTDOWN, self.config.tick_seconds, self._on_countdown_tick)
            return

        if self.phase == GamePhase.HIDE_COUNTDOWN:
            self._start_countdown(GamePhase.SEEKER_RELEASE_COUNTDOWN, self.config.release_countdown_ticks)
        elif self.phase == GamePhase.SEEKER_RELEASE_COUNTDOWN:
            self._release_seeker()

    def _release_seeker(self) -> None:
        if not self.released:
            self.released = True
            logger.info("Seeker released!")
            self.on_seeker_released()
            self._schedule(TIMER_MOVEMENT, self.config.movement_interval_seconds, self._on_movement_due)

        self._set_phase(GamePhase.AWAITING_QUESTION)
        if self.seeker is None:
            self._request_seed()
        self._open_question()

    # =========================================================================
    # Question lifecycle
    # =========================================================================

    def _open_question(self) -> None:
        if self.phase != GamePhase.AWAITING_QUESTION:
            return
        if self.seeker is None:
            logger.info("Holding question until the seeker has a position")
            return

        question, points = self.selector.next_question(self.history)
        self.round_number += 1
        self.score += points
        self.current = OpenQuestion(
            question=question,
            seeker_position_at_ask=self.seeker.coordinate,
            points=points,
            round_number=self.round_number,
        )
        self.countdown = self.config.answer_seconds
        self._set_phase(GamePhase.AWAITING_ANSWER)
        logger.info(f"Round {self.round_number}: {question.prompt()} (+{points}, score {self.score})")
        self.on_question(self.current)
        self._schedule(TIMER_ANSWER, self.config.tick_seconds, self._on_answer_tick)

    def _on_answer_tick(self) -> None:
        self.countdown -= 1
        self.on_countdown(self.phase, self.countdown)
        if self.countdown > 0:
            self._schedule(TIMER_ANSWER, self.config.tick_seconds, self._on_answer_tick)
            return
        logger.info("Answer timer expired, answering automatically")
        self._resolve_question(auto=True)

    def _resolve_question(self, auto: bool) -> AnswerResult:
        self.scheduler.cancel(TIMER_ANSWER)
        current = self.current
        result = evaluate(current.question, self.hideout, current.seeker_position_at_ask, auto=auto)

        if result.record is not None:
            self._history.append(result.record)
        self.results.append(result)
        self.last_result = result
        self.current = None
        self.countdown = 0

        logger.info(f"Round {current.round_number} answered {'yes' if result.answer else 'no'}"
                    f"{' (auto)' if auto else ''}")
        self._set_phase(GamePhase.SHOWING_RESULT)
        self._schedule(TIMER_RESULT, self.config.result_seconds, self._on_result_shown)
        self.on_answer(result)
        return result

    def _on_result_shown(self) -> None:
        self._start_countdown(GamePhase.SEEKER_RELEASE_COUNTDOWN, self.config.release_countdown_ticks)

    # =========================================================================
    # Seeker placement and movement
    # =========================================================================

    def _locator_context(self) -> LocatorContext:
        return LocatorContext(city_name=self.city_name, prior_answers=self.history)

    def _request_seed(self) -> None:
        if self.scheduler.has_job(JOB_SEED) or self.hideout is None:
            return
        center = (self.city or self.hideout).coordinate
        radius = self.config.seed_radius_miles
        context = self._locator_context()
        self.scheduler.submit(
            JOB_SEED,
            lambda: self.locator.resolve_near(center, radius, context),
            on_done=self._on_seeded,
            token=self._token,
            on_error=self._on_job_error,
        )

    def _on_seeded(self, address: Address) -> None:
        if self.seeker is not None:
            return
        self.seeker = address
        logger.info(f"Seeker starts at {address.label}")
        self.on_seeker_moved(address)
        self._open_question()

    def _on_movement_due(self) -> None:
        self._schedule(TIMER_MOVEMENT, self.config.movement_interval_seconds, self._on_movement_due)

        if self.phase not in SEEKER_ACTIVE_PHASES:
            logger.debug(f"Movement skipped during {self.phase.value}")
            return
        if self.seeker is None:
            self._request_seed()
            return
        if self.scheduler.has_job(JOB_MOVE):
            return

        current = self.seeker
        round_number = self.round_number
        disc = estimate(self.history)
        context = self._locator_context()
        self.scheduler.submit(
            JOB_MOVE,
            lambda: plan_next_position(
                current,
                disc,
                self.locator,
                context,
                wander_radius_miles=self.config.wander_radius_miles,
                max_step_miles=self.config.max_step_miles,
            ),
            on_done=lambda address: self._on_moved(address, round_number),
            token=self._token,
            on_error=self._on_job_error,
        )

    def _on_moved(self, address: Address, round_number: int) -> None:
        if self.phase == GamePhase.AWAITING_ANSWER or round_number != self.round_number:
            logger.warning(f"Discarding move to {address.label}: round {round_number} is over")
            return
        self.seeker = address
        logger.info(f"Seeker moved to {address.label}")
        self.on_seeker_moved(address)

    def _on_job_error(self, error: BaseException) -> None:
        logger.error(f"Seeker lookup failed, will retry on next movement: {error}")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _schedule(self, name: str, delay: float, callback) -> None:
        self.scheduler.call_later(name, delay, callback, token=self._token)

    def _set_phase(self, phase: GamePhase) -> None:
        old = self.phase
        self.phase = phase
        if old != phase:
            logger.debug(f"Phase {old.value} -> {phase.value}")
            self.on_phase_change(old, phase)

    def _require_phase(self, action: str, *phases: GamePhase) -> None:
        if self.phase not in phases:
            raise InvalidTransition(action, self.phase)
