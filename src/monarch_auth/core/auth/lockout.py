"""Account lockout policy.

Pure, read-only decision: a non-exempt account whose failure counter has
reached the threshold is locked. Counter increments and resets happen
elsewhere.
"""

from typing import Iterable, Optional

from monarch_auth.config.settings import Settings, get_settings
from monarch_auth.domain.models import LockoutDecision, UserRecord, to_int

DEFAULT_LOCKOUT_THRESHOLD = 5


class LockoutPolicy:
    """Decide ALLOW / LOCKED for a looked-up user.

    Exempt identifiers are never locked, whatever their counter says.
    """

    def __init__(
        self,
        exempt_identifiers: Iterable[str] = (),
        threshold: int = DEFAULT_LOCKOUT_THRESHOLD,
    ):
        if threshold < 1:
            raise ValueError("Lockout threshold must be at least 1")
        self.exempt_identifiers = frozenset(exempt_identifiers)
        self.threshold = threshold

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LockoutPolicy":
        settings = settings or get_settings()
        return cls(settings.exempt_identifiers, settings.lockout_threshold)

    def is_exempt(self, identifier: str) -> bool:
        return identifier in self.exempt_identifiers

    def evaluate(self, identifier: str, user: UserRecord) -> LockoutDecision:
        """Evaluate the lockout rule for one attempt.

        Args:
            identifier: Login identifier as presented
            user: Directory snapshot for that identifier

        Returns:
            LockoutDecision.ALLOW or LockoutDecision.LOCKED
        """
        if self.is_exempt(identifier):
            return LockoutDecision.ALLOW

        fail_count = to_int(user.login_fail_count) or 0
        if fail_count >= self.threshold:
            return LockoutDecision.LOCKED
        return LockoutDecision.ALLOW
