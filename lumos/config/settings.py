from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for background jobs and admin user updates

    # OpenRouter (chat completions)
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_referer: str = "https://lumos-ai.vercel.app"
    openrouter_title: str = "Lumos AI Tutor"
    llm_timeout_seconds: float = 45.0
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.7

    # HuggingFace Whisper (speech-to-text)
    huggingface_api_key: Optional[str] = None
    whisper_url: str = "https://api-inference.huggingface.co/models/openai/whisper-large-v3-turbo"
    stt_timeout_seconds: float = 60.0

    # YouTube Data API v3
    youtube_api_key: Optional[str] = None
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3"

    # Automation webhooks (n8n); expected in the X-Webhook-Secret header
    n8n_webhook_secret: Optional[str] = None

    # Voice sessions
    voice_session_idle_minutes: int = 60
    voice_cleanup_interval_seconds: int = 3600

    # Credits
    starting_credits: int = 25

    # App
    app_name: str = "lumos-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:3001,https://lumos-ai.vercel.app,https://lumos-ai-git-main.vercel.app"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    llm_rate_limit: str = "20/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openrouter_api_key)

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
