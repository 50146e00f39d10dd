"""
Retry delay strategies for segment downloads.

A strategy is any callable taking the 1-based number of the attempt that
just failed and returning the delay in seconds before the next one.
"""

from collections.abc import Callable

BackoffStrategy = Callable[[int], float]


class LinearBackoff:
    """Waits attempt x step seconds: 1s, 2s, 3s... with the default step."""

    def __init__(self, step: float = 1.0):
        self.step = step

    def __call__(self, attempt: int) -> float:
        return attempt * self.step

    def __repr__(self) -> str:
        return f"LinearBackoff(step={self.step})"


class ExponentialBackoff:
    """Waits base x 2^(attempt - 1) seconds, capped at `max_delay`."""

    def __init__(self, base_delay: float = 1.5, max_delay: float = 60.0):
        self.base_delay = base_delay
        self.max_delay = max_delay

    def __call__(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))

    def __repr__(self) -> str:
        return (
            f"ExponentialBackoff(base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )


def backoff_from_name(name: str, delay: float) -> BackoffStrategy:
    """Builds the strategy named in the configuration."""
    if name == "exponential":
        return ExponentialBackoff(base_delay=delay)
    return LinearBackoff(step=delay)
