"""
Admin Passkey Access
====================
Passkey lockout counting and admin session tokens.

Behavior:
- 1st-4th wrong passkey: rejected, attempts remaining reported
- 5th wrong passkey: client locked for 30 minutes
- While locked: every attempt refused with Retry-After
- Correct passkey: counter cleared, session cookie issued
"""

from .models import PasskeyResult, PasskeyCheck
from .passkey import PasskeyGuard, AdminSessionStore

__all__ = [
    "PasskeyResult",
    "PasskeyCheck",
    "PasskeyGuard",
    "AdminSessionStore",
]
