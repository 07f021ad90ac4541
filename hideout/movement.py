"""
Seeker movement.

With an estimate the seeker takes a damped step toward its center; without
one (or once well inside it) the seeker wanders locally.
"""

import logging

from hideout.exceptions import InvalidLocatorInput
from hideout.geo import destination, distance_miles, initial_bearing
from hideout.locator import AddressLocator, LocatorContext
from hideout.models import Address, Estimate

logger = logging.getLogger(__name__)

WANDER_RADIUS_MILES = 0.5
MAX_STEP_MILES = 1.0


def plan_next_position(
    current: Address,
    estimate: Estimate | None,
    locator: AddressLocator,
    context: LocatorContext | None = None,
    wander_radius_miles: float = WANDER_RADIUS_MILES,
    max_step_miles: float = MAX_STEP_MILES,
) -> Address:
    """
    Decide where the seeker goes next.

    Args:
        current: Seeker's current address
        estimate: Estimate disc for the hider, if any
        locator: Used to snap the target point to a street address
        context: Passed through to the locator
        wander_radius_miles: Search radius around the target point
        max_step_miles: Longest single pursuit step

    Returns:
        A new Address for the seeker; the current one if the locator
        rejects the input
    """
    target = current.coordinate

    if estimate is not None:
        gap = distance_miles(current.coordinate, estimate.center)
        if gap > estimate.radius_miles / 2:
            step = min(gap / 2, max_step_miles)
            bearing = initial_bearing(current.coordinate, estimate.center)
            target = destination(current.coordinate, bearing, step)
            logger.debug(f"Pursuing estimate: {gap:.2f} mi away, stepping {step:.2f} mi")
        else:
            logger.debug(f"Inside estimate disc ({gap:.2f} mi from center), wandering")

    try:
        return locator.resolve_near(target, wander_radius_miles, context)
    except InvalidLocatorInput as e:
        logger.warning(f"Keeping seeker at last known position: {e}")
        return current
