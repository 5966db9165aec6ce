"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Object storage (image bucket)
    object_storage_url: str = "http://object-storage:9000/product-images"
    object_storage_token: str = ""
    object_storage_timeout: float = 30.0
    image_public_base_url: str = "https://images.example.com"
    default_image_url: str = "https://images.example.com/default-cover.jpg"

    # Listing
    default_page_limit: int = 24
    max_page_limit: int = 100
    catalog_row_cap: int = 500

    # Print layout (A4 content height in rendered pixels)
    print_page_capacity: int = 1000
    print_heading_cost: int = 60
    print_product_cost: int = 180

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
