"""Position estimate for the hider, from the latest confirmed "within" answer."""

from typing import Sequence

from hideout.models import AnswerRecord, Estimate


def estimate(history: Sequence[AnswerRecord]) -> Estimate | None:
    """
    Best-guess disc for the hider's location.

    Trusts only the most recent "yes" answer: its seeker position is the
    center and its threshold is the radius. Earlier answers and all "no"
    answers are ignored.
    """
    for record in reversed(history):
        if record.was_within and record.distance_asked is not None:
            return Estimate(
                center=record.seeker_position_at_ask,
                radius_miles=record.distance_asked,
            )
    return None
