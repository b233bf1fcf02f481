"""Chat message rendering."""

import streamlit as st

from src.core.models import ChatRole
from src.ui.chat_state import Message

_AVATARS = {
    ChatRole.user: "\U0001f464",
    ChatRole.model: "\U0001f916",
}


def render_message(message: Message) -> None:
    """Render one chat bubble: voice note player, text, spinner, timestamp."""
    with st.chat_message(str(message.role), avatar=_AVATARS[message.role]):
        if message.audio is not None:
            st.caption("\U0001f3a4 VOICE MESSAGE")
            st.audio(message.audio, format=message.mime_type or "audio/wav")

        if message.text:
            st.markdown(message.text)

        if message.is_processing:
            st.markdown("_Thinking..._")

        st.caption(message.timestamp.strftime("%H:%M"))


def render_messages(messages: list[Message]) -> None:
    """Render the transcript in insertion order."""
    for message in messages:
        render_message(message)
