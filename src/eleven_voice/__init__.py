"""Voice-driven chat client and Groq/ElevenLabs backend proxy."""

__version__ = "0.1.0"
