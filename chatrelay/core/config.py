from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Chat Relay"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    db_url: str = f"sqlite:///{Path(__file__).resolve().parent.parent.parent / 'chatrelay.db'}"

    # LLM
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    default_model: str = "gemini-2.0-flash"
    text_models: dict[str, str] = {
        "gemini-2.0-flash": "Gemini 2.0 Flash",
        "gemini-1.5-pro": "Gemini 1.5 Pro",
        "gemini-1.5-flash": "Gemini 1.5 Flash",
    }
    inference_timeout: float | None = None  # seconds; None waits indefinitely

    # Auth
    auth_provider: str = "supabase"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    auth_timeout: float = 10.0

    # Conversation context
    history_limit: int = 20
    list_history_limit: int = 100
    title_length: int = 50
    serialize_turns: bool = True

    # Errors
    expose_error_details: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "CHATRELAY_",
    }


settings = Settings()
