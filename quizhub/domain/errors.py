class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidOneTimeToken(DomainError):
    """The presented one-time code cannot be accepted."""

    pass


class OneTimeTokenExpired(InvalidOneTimeToken):
    """No code is outstanding for the subject (never issued, expired or used)."""

    pass


class OneTimeTokenMismatch(InvalidOneTimeToken):
    """A code is outstanding but the presented one does not match it."""

    pass


class RateLimitExceeded(DomainError):
    """The subject already used up its allowance for the current window."""

    def __init__(self, policy: str, subject: str, limit: int) -> None:
        super().__init__(f"{policy} exceeded for {subject} (limit={limit})")
        self.policy = policy
        self.subject = subject
        self.limit = limit
