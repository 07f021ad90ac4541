"""Exception hierarchy for hideout."""


class HideoutError(Exception):
    """Base exception for all hideout errors."""


class LocatorFailure(HideoutError):
    """A locator strategy could not produce an address (network, empty or malformed payload)."""

    def __init__(self, strategy: str, reason: str):
        self.strategy = strategy
        self.reason = reason
        super().__init__(f"{strategy} lookup failed: {reason}")


class InvalidLocatorInput(HideoutError):
    """The center or radius handed to the locator is unusable."""

    def __init__(self, center, radius_miles):
        self.center = center
        self.radius_miles = radius_miles
        super().__init__(f"Invalid locator input: center={center!r}, radius={radius_miles!r}")


class NoSeekerPosition(HideoutError):
    """A seeker-dependent value was requested before the seeker was placed."""

    def __init__(self, action: str = "this action"):
        self.action = action
        super().__init__(f"Seeker has no position yet; cannot perform {action}")


class InvalidTransition(HideoutError):
    """A user action is not legal in the current game phase."""

    def __init__(self, action: str, phase):
        self.action = action
        self.phase = phase
        super().__init__(f"Cannot {action} while in phase '{getattr(phase, 'value', phase)}'")
