from dataclasses import dataclass
from typing import Optional

from initdb.config import DEFAULT_RETRY_SECONDS


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry. ``max_attempts=None`` retries forever."""

    delay_seconds: int = DEFAULT_RETRY_SECONDS
    max_attempts: Optional[int] = None

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt follows the failed ``attempt`` (1-based)."""
        return self.max_attempts is None or attempt < self.max_attempts
