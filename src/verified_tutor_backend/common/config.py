'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "Verified Tutor Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Lesson verification and tutor reputation API."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///:memory:"
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = []

    # Other settings
    DEFAULT_TIMEZONE: str = "UTC"
    PARENT_HISTORY_LIMIT: int = 50

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# Create a single, importable instance of the settings
settings = Settings()
