"""Settings shared by every environment; each module overrides what differs."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def db_config(default_name: str) -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_name),
    }


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Rendered invoice PDFs are written under DOCUMENT_ROOT and served from DOCUMENT_BASE_URL.
DOCUMENT_ROOT = os.getenv("DOCUMENT_ROOT", "uploads")
DOCUMENT_BASE_URL = os.getenv("DOCUMENT_BASE_URL", "/uploads")

BUSINESS_NAME = os.getenv("BUSINESS_NAME", "ASHAPURI SECURITY SERVICES")
BUSINESS_TAGLINE = os.getenv("BUSINESS_TAGLINE", "Security & Manpower Solutions")

INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "30"))
