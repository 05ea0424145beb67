"""High score result types."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScoreStatus(Enum):
    """Outcome of a high score lookup."""
    FOUND = "found"                 # Score decoded from NVRAM
    UNSUPPORTED = "unsupported"     # No store id mapped for the title
    FAILED = "failed"               # Store id known but read/parse failed


@dataclass(frozen=True)
class ScoreResult:
    """
    Result of fetching the high score for a table.

    An unsupported table is a normal outcome, not an error.
    """
    status: ScoreStatus
    score: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, score: int) -> "ScoreResult":
        return cls(status=ScoreStatus.FOUND, score=score)

    @classmethod
    def unsupported(cls) -> "ScoreResult":
        return cls(status=ScoreStatus.UNSUPPORTED)

    @classmethod
    def failed(cls, reason: str) -> "ScoreResult":
        return cls(status=ScoreStatus.FAILED, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status == ScoreStatus.FOUND

    def display_text(self) -> str:
        """
        Get the user-facing score line.

        Failures are shown as unknown rather than surfaced as errors.
        """
        if self.is_found:
            return f"Hi Score: {self.score:,}"
        if self.status == ScoreStatus.UNSUPPORTED:
            return "Hi Score: (table unsupported)"
        return "Hi Score: (unknown)"
