from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin operations like changing roles

    # HeyGen
    heygen_api_key: Optional[str] = None
    heygen_base_url: str = "https://api.heygen.com"

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_text_model: str = "gpt-4"
    openai_image_size: str = "1024x1024"

    # RunwayML
    runwayml_api_key: Optional[str] = None
    runwayml_base_url: str = "https://api.runwayml.com"
    runwayml_api_version: str = "2024-11-06"

    # Cloudinary (will read from uppercase env vars automatically)
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_default_folder: str = "generated-assets"

    # Outbound HTTP
    http_timeout: float = 30.0
    download_timeout: float = 30.0
    upload_max_attempts: int = 3
    upload_base_delay: float = 1.0
    upload_max_delay: float = 10.0

    # Templates
    template_cache_ttl_seconds: int = 30 * 60
    default_client_id: str = "default"

    # App
    app_name: str = "adstudio-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cloudinary_configured(self) -> bool:
        return all([self.cloudinary_cloud_name, self.cloudinary_api_key, self.cloudinary_api_secret])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
