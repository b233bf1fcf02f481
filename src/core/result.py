"""Tagged result type shared by the relay client and the relay server.

``Ok(text)`` carries a model reply; ``Err(kind, message)`` carries a
categorized failure. Both sides pattern-match on these instead of passing
ad hoc error dicts around.
"""

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure categories across the voice-chat pipeline."""

    permission = "permission"
    transport = "transport"
    http = "http"
    malformed = "malformed"
    client_request = "client_request"
    configuration = "configuration"
    provider = "provider"


@dataclass(frozen=True)
class Ok:
    """Successful outcome holding the reply text."""

    text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome with a category and a human-readable message."""

    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Ok | Err
