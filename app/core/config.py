from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"

    # Database
    DATABASE_URL: str

    # JWT sessions
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Cookies
    SESSION_COOKIE_NAME: str = "dashboard_session"
    THEME_COOKIE_NAME: str = "theme"

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"

    # Session gate: paths matching this pattern are never intercepted
    GATE_EXCLUDED_PATTERN: str = (
        r"^/(api|static|health|docs|redoc|openapi\.json|favicon\.ico)(/|$)"
        r"|\.(png|jpg|jpeg|svg|ico)$"
    )

    # Theme transition
    THEME_FLIP_DELAY_MS: int = 100
    THEME_TRANSITION_MS: int = 600
    THEME_RADIUS_MULTIPLIER: float = 1.5
    # Per-browser controllers kept in memory, and how long an unused one survives
    THEME_REGISTRY_SIZE: int = 1000
    THEME_CONTROLLER_IDLE_MINUTES: int = 60

    # Panels
    NOTIFICATION_LOG_SIZE: int = 20

    def validate_required_secrets(self) -> list[str]:
        """Validate that critical secrets are set. Returns list of errors."""
        errors = []
        if not self.SECRET_KEY or len(self.SECRET_KEY) < 16:
            errors.append("SECRET_KEY must be set and at least 16 characters")
        if not self.DATABASE_URL:
            errors.append("DATABASE_URL must be set")
        if self.THEME_FLIP_DELAY_MS >= self.THEME_TRANSITION_MS:
            errors.append("THEME_FLIP_DELAY_MS must be shorter than THEME_TRANSITION_MS")
        return errors

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
