from typing import Sequence


class LedgerError(Exception):
    """Base class for errors raised by the ledger package."""


class ValidationError(LedgerError):
    """Malformed input: password policy, missing fields, bad configuration."""

    def __init__(self, messages: Sequence[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class AuthError(LedgerError):
    """Bad credentials or a session token the backend does not accept."""


class SyncError(LedgerError):
    """Network failure or non-2xx response while talking to the backend."""

    def __init__(self, message: str, kind: str | None = None, status: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status = status


class PreconditionError(LedgerError):
    """Operation requested in a state that cannot satisfy it."""
