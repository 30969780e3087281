"""Runtime configuration for the voice chat client and backend proxy."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VOICE_ID = "EXAVITQu4vr4xnSDxMaL"

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful voice assistant. Keep responses concise and conversational, "
    "ideally under 2-3 sentences since they will be spoken aloud."
)


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="ELEVEN_VOICE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "eleven-voice"
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = Field(default=3001, validation_alias=AliasChoices("ELEVEN_VOICE_PORT", "PORT", "port"))

    groq_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVEN_VOICE_GROQ_API_KEY", "GROQ_API_KEY", "groq_api_key"),
    )
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.1-70b-versatile"
    groq_system_prompt: str = DEFAULT_SYSTEM_PROMPT
    groq_temperature: float = 0.7
    groq_max_tokens: int = 150

    elevenlabs_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVEN_VOICE_ELEVENLABS_API_KEY", "ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    elevenlabs_agent_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVEN_VOICE_ELEVENLABS_AGENT_ID", "ELEVENLABS_AGENT_ID", "elevenlabs_agent_id"),
    )
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_tts_model: str = "eleven_monolingual_v1"

    upstream_timeout_seconds: float = 30.0

    serve_static: bool = False
    static_dir: str | None = Field(
        default=None,
        description="Built frontend directory served by the proxy when serve_static is enabled.",
    )

    backend_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the backend proxy used by the voice client.",
    )
    voice_id: str = DEFAULT_VOICE_ID
    audio_player: str | None = Field(
        default=None,
        description="Explicit audio player command, e.g. 'ffplay -nodisp -autoexit'.",
    )
    max_log_messages: int | None = None


settings = Settings()
