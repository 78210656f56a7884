"""
Configuration management for tilesplit
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Extraction
    batch_pixel_budget: int = Field(
        default=1_000_000,
        ge=1,
        description="Approximate number of tile pixels produced between scheduler yields"
    )
    background_color: str = Field(
        default="#FFFFFF",
        description="Fill colour for padded edge tiles"
    )

    # Planning
    default_dpi: int = Field(
        default=300,
        ge=1,
        description="Resolution offered for physical units when none is given"
    )

    # Export
    output_dir: str = Field(
        default="./tiles",
        description="Default directory for exported tiles"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format"
    )

    model_config = SettingsConfigDict(
        env_prefix="TILESPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create global settings instance
settings = Settings()


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure root logging from settings

    Args:
        level: Optional level name overriding settings.log_level

    Returns:
        Package logger
    """
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format=settings.log_format,
        handlers=handlers,
        force=True
    )

    return logging.getLogger("tilesplit")
