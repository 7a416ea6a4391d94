"""
leasekeeper.settings
====================

Configuration settings for the leasekeeper application.

Module-level constants cover paths and process wiring (database, API,
blob storage) and are read straight from ``LEASEKEEPER_*`` environment
variables.  Tunables used by the services live on the pydantic
:class:`Settings` model so callers can construct their own instance and
pass it in explicitly.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("LEASEKEEPER_DB_FILE", BASE_DIR / "leasekeeper.db")
DB_URL = os.environ.get("LEASEKEEPER_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("LEASEKEEPER_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("LEASEKEEPER_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("LEASEKEEPER_API_PORT", "8000"))
API_DEBUG = os.environ.get("LEASEKEEPER_API_DEBUG", "False").lower() == "true"

# Blob storage
# ---------------------------------------------------------------------------
BLOB_ROOT = Path(os.environ.get("LEASEKEEPER_BLOB_ROOT", BASE_DIR / "documents"))


# ---------------------------------------------------------------------------
# Pydantic settings model for the service layer
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Service tunables, loaded from environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="LEASEKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Statutory offsets (Commonhold and Leasehold Reform Act 2002)
    counter_notice_days: int = Field(30, description="Days after claim notice service for a counter-notice")
    acquisition_days: int = Field(90, description="Days after claim notice service until acquisition")

    # Deadline presentation
    urgent_deadline_days: int = Field(7, ge=0, description="A deadline this many days away or fewer is urgent")
    upcoming_window_days: int = Field(30, ge=0, description="Default look-ahead for upcoming deadlines")
    recent_evidence_limit: int = Field(5, ge=1, description="Evidence records shown on the overview")

    log_level: str = Field("INFO", description="Root log level for the API and CLI")


# Initialize settings
settings = Settings()
