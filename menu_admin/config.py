from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    ENV: str
    PORT: int

    # Database (Supabase PostgreSQL)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Supabase (for storage)
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_MENU_IMAGES_BUCKET: str = "menu-images"
    LOCAL_STORAGE_PATH: str = "uploads"  # Used when Supabase is not configured
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # OpenAI (image generation)
    OPENAI_API_KEY: str
    OPENAI_IMAGE_MODEL: str = "dall-e-3"
    OPENAI_TIMEOUT: int = 60  # Timeout w sekundach

    # Frontend
    WEB_APP_URL: str = "http://localhost:3000"

    # Image acquisition
    IMAGE_GENERATION_MAX_RETRIES: int = 3  # Additional attempts after a 429
    IMAGE_GENERATION_BACKOFF_SECONDS: float = 2.0  # First backoff delay, doubled per retry
    IMAGE_DOWNLOAD_TIMEOUT: float = 30.0
    IMAGE_ACQUISITION_TIMEOUT: float = 180.0  # Whole generate/download/compress/upload pipeline
    IMAGE_SIZE_BUDGET_BYTES: int = 50 * 1024
    IMAGE_INITIAL_SIZE: int = 600
    IMAGE_INITIAL_QUALITY: int = 80
    IMAGE_AUTOFILL_CONCURRENCY: int = 1  # 1 = one row at a time
    IMAGE_AUTOFILL_RATE_LIMIT_PER_MINUTE: int = 20

    # Bulk menu import
    MENU_IMPORT_DEFAULT_CATEGORY: str = "General"
    MENU_IMPORT_DEFAULT_PREP_TIME: int = 15
    MENU_IMPORT_STRICT_PRICES: bool = False  # True = unparseable price fails the row instead of becoming 0
    MENU_IMPORT_MAX_FILE_SIZE: int = 5 * 1024 * 1024
    MENU_IMPORT_DEADLINE_SECONDS: float | None = None

    model_config = {
        "env_file": ".env",
        "extra": "ignore"
    }

settings = Settings()
