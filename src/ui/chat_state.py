"""
Chat session state — the message list and the idle/processing machine.

States: idle -> processing -> idle

A delivered recording appends the user's voice note and a model
placeholder (in that order) and moves to ``processing``. When the relay
call settles the placeholder is found by id and updated in place, and the
session returns to ``idle`` whatever the outcome.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from src.core.models import ChatRole
from src.core.result import Err, ErrorKind, Ok, Result
from src.services.audio.recorder import AudioBlob

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hello! I'm your AI voice assistant. You can speak to me, and I'll listen "
    "and respond. Press the microphone button to start recording."
)
APOLOGY_TEXT = "Sorry, I had trouble understanding that audio. Please try again."


class AppStatus(StrEnum):
    """Chat session status."""

    idle = "idle"
    processing = "processing"


class ChatBusyError(RuntimeError):
    """Raised when a new turn starts while a reply is still pending."""


@dataclass
class Message:
    """One chat entry: a user voice note or a model reply."""

    id: str
    role: ChatRole
    text: str | None = None
    audio: bytes | None = None
    mime_type: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    is_processing: bool = False


@dataclass(frozen=True)
class PendingTurn:
    """A turn whose relay call has not been made yet."""

    placeholder_id: str
    blob: AudioBlob
    history: list[Message]


class MessageIdFactory:
    """Millisecond timestamp ids, strictly increasing even within one millisecond."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def __call__(self) -> str:
        now = int(self._clock() * 1000)
        self._last = max(now, self._last + 1)
        return str(self._last)


class ChatSession:
    """In-memory chat transcript for one browser session."""

    def __init__(
        self,
        *,
        welcome: bool = True,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._next_id = id_factory or MessageIdFactory()
        self.status = AppStatus.idle
        self.messages: list[Message] = []
        # Turn awaiting its relay call; kept until that call has resolved it
        self.pending_turn: PendingTurn | None = None
        if welcome:
            self.messages.append(Message(id="welcome", role=ChatRole.model, text=WELCOME_TEXT))

    @property
    def can_record(self) -> bool:
        return self.status == AppStatus.idle

    def find(self, message_id: str) -> Message | None:
        return next((m for m in self.messages if m.id == message_id), None)

    def begin_turn(self, blob: AudioBlob) -> PendingTurn:
        """Append the voice note and a processing placeholder.

        The returned history is the transcript as it was before this turn.

        Raises:
            ChatBusyError: A previous reply is still pending.
        """
        if self.status == AppStatus.processing:
            raise ChatBusyError("A voice message is already being processed")

        history = list(self.messages)
        user_msg = Message(
            id=self._next_id(),
            role=ChatRole.user,
            audio=blob.data,
            mime_type=blob.mime_type,
        )
        placeholder = Message(id=self._next_id(), role=ChatRole.model, is_processing=True)
        self.messages.append(user_msg)
        self.messages.append(placeholder)
        self.status = AppStatus.processing
        self.pending_turn = PendingTurn(placeholder_id=placeholder.id, blob=blob, history=history)
        return self.pending_turn

    def resolve(self, placeholder_id: str, result: Result) -> bool:
        """Settle a placeholder with the relay outcome; always returns to idle.

        Returns:
            True if a message with ``placeholder_id`` was updated.
        """
        self.status = AppStatus.idle
        message = self.find(placeholder_id)
        if message is None:
            logger.warning("No placeholder with id %s", placeholder_id)
            return False

        if isinstance(result, Ok):
            message.text = result.text
        else:
            logger.error("Processing error (%s): %s", result.kind, result.message)
            message.text = APOLOGY_TEXT
        message.is_processing = False
        return True

    def complete_turn(self, turn: PendingTurn, client) -> Result:
        """Make the single relay call for ``turn`` and resolve its placeholder."""
        try:
            result = client.send_voice_message(turn.blob, turn.history)
        except Exception as exc:
            logger.exception("Relay client failed")
            result = Err(ErrorKind.transport, str(exc))
        self.resolve(turn.placeholder_id, result)
        if self.pending_turn is turn:
            self.pending_turn = None
        return result

    def handle_recording(self, blob: AudioBlob, client) -> Result:
        """Run a whole turn: append, relay, resolve."""
        return self.complete_turn(self.begin_turn(blob), client)
