"""UI utility functions."""

import streamlit.components.v1 as components

_SCROLL_SCRIPT = """
<script>
  // message_count={count}
  const main = window.parent.document.querySelector('section.main, [data-testid="stMain"]');
  if (main) {{ main.scrollTo({{ top: main.scrollHeight, behavior: "smooth" }}); }}
</script>
"""


def scroll_to_latest(message_count: int) -> None:
    """Scroll the page to the newest chat message.

    The message count is embedded in the snippet so Streamlit re-mounts it
    (and the scroll runs again) whenever the transcript changes.
    """
    components.html(_SCROLL_SCRIPT.format(count=message_count), height=0)
