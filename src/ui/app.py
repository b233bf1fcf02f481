"""
EchoVoice Streamlit UI — main entry point.

Run with: ``streamlit run src/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/),
# which removes the project root needed for absolute ``src.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.ui.api_client import get_relay_client  # noqa: E402
from src.ui.chat_state import ChatSession  # noqa: E402
from src.ui.components.message_bubble import render_messages  # noqa: E402
from src.ui.components.recording_controls import (  # noqa: E402
    render_recording_controls,
    reset_recorder,
    take_pending_blob,
)
from src.ui.utils import scroll_to_latest  # noqa: E402

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="EchoVoice AI",
    page_icon="\U0001f4fb",
    layout="centered",
)

# ---------------------------------------------------------------------------
# Session state defaults
# ---------------------------------------------------------------------------
_settings = get_settings()

if "chat" not in st.session_state:
    st.session_state.chat = ChatSession()
if "relay_url" not in st.session_state:
    st.session_state.relay_url = _settings.relay_url

chat: ChatSession = st.session_state.chat
client = get_relay_client(st.session_state.relay_url)

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("\U0001f4fb EchoVoice AI")
    st.caption(f"Powered by {_settings.gemini_model}")
    st.divider()
    st.session_state.relay_url = st.text_input(
        "Relay URL",
        value=st.session_state.relay_url,
        help="Chat endpoint of the relay server (default: http://localhost:5000/api/chat)",
    )

    _conn_ok, _conn_msg = client.check_connection()
    if _conn_ok:
        st.success(f"Relay: {_conn_msg}")
    else:
        st.error(f"Relay: {_conn_msg}")

    if st.button("New conversation", use_container_width=True, disabled=not chat.can_record):
        reset_recorder()
        st.session_state.chat = ChatSession()
        st.rerun()

# ---------------------------------------------------------------------------
# Chat transcript
# ---------------------------------------------------------------------------
render_messages(chat.messages)
scroll_to_latest(len(chat.messages))

# ---------------------------------------------------------------------------
# Turn handling: a delivered clip is shown first, then relayed on the next run
# ---------------------------------------------------------------------------
turn = chat.pending_turn
if turn is not None:
    # Stays pending until resolved, so an interrupted run picks it up again
    with st.spinner("Waiting for a reply..."):
        chat.complete_turn(turn, client)
    st.rerun()

blob = take_pending_blob()
if blob is not None and chat.can_record:
    chat.begin_turn(blob)
    st.rerun()

# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------
st.divider()
render_recording_controls(disabled=not chat.can_record)
