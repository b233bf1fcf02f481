"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """EchoVoice settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive), except the
    provider credential which is read from ``API_KEY``.

    Attributes:
        api_key: Gemini API key used by the relay server.
        upload_dir: Directory where uploaded voice messages are written.
        relay_url: Chat endpoint the Streamlit front end posts to.
        max_recording_seconds: Recorder auto-stop threshold.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
        populate_by_name=True,
    )

    # --- AI provider ---
    llm_provider: str = "gemini"
    api_key: str = Field(default="", validation_alias="API_KEY")
    gemini_model: str = "gemini-2.5-flash"
    # Uploads are forwarded in their recorded container under this hint
    audio_mime_hint: str = "audio/mp3"
    voice_prompt: str = "Listen to this voice message and provide a helpful, natural response."

    # --- Relay server ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 5000
    log_level: str = "INFO"  # Python logging level
    upload_dir: str = "userAudio"
    cors_origins: list[str] = ["*"]

    # --- Front end ---
    relay_url: str = "http://localhost:5000/api/chat"
    relay_timeout: float = 60.0
    history_limit: int = 10
    max_recording_seconds: int = 60
    sample_rate: int = 16000  # 16 kHz is plenty for speech
    visualizer_refresh_seconds: float = 0.1


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
