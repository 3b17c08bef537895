"""Configuration types for the quell library."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DebounceConfig:
    """Configuration for a DebounceController instance.

    Attributes:
        wait: Quiet-period interval. The controller waits this long after
              the last call before firing the trailing edge. ``0`` defers
              to the next loop tick instead of invoking synchronously.
        max_wait: Maximum time allowed between invocations while calls
                  keep arriving. Prevents infinite deferral.
                  None means no maximum wait.
        leading: Invoke on the first call of a burst.
        trailing: Invoke once the burst has gone quiet for ``wait``.
    """

    wait: float = 0.0
    max_wait: float | None = None
    leading: bool = False
    trailing: bool = True

    def __post_init__(self) -> None:
        if self.wait < 0:
            raise ValueError(f"wait must be non-negative, got {self.wait}")

        if self.max_wait is not None and self.max_wait < 0:
            raise ValueError(f"max_wait must be non-negative or None, got {self.max_wait}")

        if self.max_wait is not None and self.max_wait < self.wait:
            raise ValueError(f"max_wait ({self.max_wait}) must be >= wait ({self.wait})")

    @property
    def maxing(self) -> bool:
        return self.max_wait is not None

    @classmethod
    def throttle(cls, wait: float, *, leading: bool = True, trailing: bool = True) -> "DebounceConfig":
        """Build a throttle configuration: at most one invocation per *wait*."""
        return cls(wait=wait, max_wait=wait, leading=leading, trailing=trailing)
