from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration."""

    PROJECT_NAME: str = "Sales Force Automation Backend"
    API_V1_PREFIX: str = "/api/v1"
    ENVIRONMENT: str = Field(default="local", validation_alias="ENV", description="Deployment environment")

    # Database
    DATABASE_URL: str = Field(...)

    # Background jobs (Celery/Redis)
    CELERY_BROKER_URL: str = Field(default="redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str = Field(default="redis://localhost:6379/1")

    # Observability
    LOG_LEVEL: str = Field(default="INFO")

    # Supabase Storage (receipts, customer images)
    SUPABASE_URL: str = Field(default="")
    SUPABASE_SERVICE_KEY: str = Field(default="")
    SUPABASE_STORAGE_BUCKET: str = Field(default="uploads")

    # Bulk uploads
    BULK_UPLOAD_MAX_ROWS: int = Field(default=25000)

    # Sales defaults
    DEFAULT_CUSTOMER_TYPE: str = Field(default="retail")
    DEFAULT_GST_RATE: float = Field(default=18)
    DEFAULT_CUSTOMER_PASSWORD: str = Field(default="customer123")
    # "latest" picks the most recent effective price, "reject" refuses ambiguous price data
    PRICE_CONFLICT_POLICY: str = Field(default="latest")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
