"""
Configuration management for the order bot.
Loads settings from environment variables with validation.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Path(__file__).parent.parent / "data"

    # Telegram
    telegram_bot_token: str = Field(default="", description="Telegram Bot API token")

    # Business
    business_name: str = Field(
        default="[NOMBRE TIENDA]", description="Store name shown in the welcome message"
    )
    currency_code: str = Field(default="COP", description="Currency used to format prices")

    # Operator notifications
    operator_chat_id: Optional[int] = Field(
        default=None, description="Chat that receives new orders and payment receipts"
    )

    # Delivery cost service
    delivery_api_url: str = Field(
        default="http://localhost:9500", description="Base URL of the delivery cost API"
    )
    delivery_timeout_seconds: float = Field(
        default=20.0, description="Timeout for delivery cost requests"
    )

    # Catalog source
    spreadsheet_url: Optional[str] = Field(
        default=None, description="Google Sheets URL with the product catalog"
    )
    spreadsheet_sheet: str = Field(default="Articulos", description="Catalog sheet name")

    # Remote assets
    catalog_pdf_url: Optional[str] = Field(default=None, description="Catalog PDF download URL")
    qr_image_url: Optional[str] = Field(default=None, description="Payment QR download URL")

    # Sessions
    session_inactivity_minutes: int = Field(
        default=30, description="Minutes of inactivity before a session expires"
    )
    session_check_interval_minutes: int = Field(
        default=5, description="Minutes between expired-session sweeps"
    )
    session_farewell_enabled: bool = Field(
        default=True, description="Notify senders whose session expired"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'pedidobot.db'}"

    # Debug
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def catalog_cache_path(self) -> Path:
        """Local copy of the product catalog."""
        return self.data_dir / "catalog.json"

    @property
    def assets_dir(self) -> Path:
        """Directory for the catalog PDF and payment QR."""
        return self.data_dir / "assets"

    @property
    def catalog_pdf_path(self) -> Path:
        return self.assets_dir / "catalogo.pdf"

    @property
    def qr_image_path(self) -> Path:
        return self.assets_dir / "qr.jpg"

    @property
    def media_dir(self) -> Path:
        """Directory for received and generated media."""
        return self.data_dir / "media"

    @property
    def exports_dir(self) -> Path:
        """Directory for XLSX reports."""
        return self.data_dir / "exports"


# Global settings instance
settings = Settings()
