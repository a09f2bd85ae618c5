from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Warfront"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/warfront"

    # Public site the API redirects to after email verification
    site_url: str = "http://localhost:5173"

    # Externally reachable base URL of this API, used in emailed links
    public_api_url: str = "http://localhost:8000"

    # Outbound email (Resend). Empty key disables delivery.
    resend_api_key: str = ""
    email_from: str = "Warfront <noreply@warfront.com>"

    # Accounts listed here are treated as privileged regardless of role
    privileged_emails: list[str] = []

    session_ttl_days: int = 7
    email_verification_ttl_hours: int = 24
    verify_token_ttl_minutes: int = 15

    # Cleanup sweeps
    unverified_account_max_age_days: int = 7
    battle_inactivity_minutes: int = 5


settings = Settings()


# =============================================================================
# DOMAIN LIMITS
# =============================================================================

# Multiplayer lobby size bounds
MIN_MULTIPLAYER_PLAYERS = 2
MAX_MULTIPLAYER_PLAYERS = 8

# Notification list is capped to the newest entries
NOTIFICATION_LIST_LIMIT = 50

USER_SEARCH_LIMIT = 20
