"""
Admin Passkey Models
====================
Results of passkey verification attempts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PasskeyResult(str, Enum):
    """Passkey verification decision."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    LOCKED = "locked"


@dataclass
class PasskeyCheck:
    """Outcome of one passkey attempt."""
    result: PasskeyResult
    attempts_remaining: int
    retry_after: Optional[int] = None  # Seconds until the lock lifts

    @property
    def accepted(self) -> bool:
        return self.result == PasskeyResult.ACCEPTED

    @property
    def locked(self) -> bool:
        return self.result == PasskeyResult.LOCKED
