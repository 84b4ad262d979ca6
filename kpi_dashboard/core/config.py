import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "anthropic/claude-sonnet-4"))
    fallback_model: str = Field(default=os.getenv("AI_FALLBACK_MODEL", "anthropic/claude-3.5-haiku"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.7
    timeout_seconds: int = int(os.getenv("AI_TIMEOUT_SECONDS", "30"))

class Config(BaseModel):
    app_name: str = "KPI Dashboard"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./kpi.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # Uploads
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))
    allowed_upload_extensions: List[str] = [".xlsx", ".xls"]

    # AI reports kept in memory
    report_ttl_minutes: int = int(os.getenv("REPORT_TTL_MINUTES", "60"))
    report_sweep_seconds: int = int(os.getenv("REPORT_SWEEP_SECONDS", "300"))

    ai: AISettings = AISettings()

    # CORS: comma-separated origins loaded from env
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
else:
    if "dev-only" in settings.secret_key:
        _logger.warning("⚠ Using insecure default SECRET_KEY, only acceptable in development.")
