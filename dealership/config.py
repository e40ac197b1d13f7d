"""Application settings, read from the environment (and a local .env file)."""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[1]
load_dotenv(BASE_DIR / ".env")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")

    # "local" -> pickle-backed Store, "rest" -> hosted BaaS over HTTP
    DATA_BACKEND = os.environ.get("DATA_BACKEND", "local")
    DATA_PATH = os.environ.get("DATA_PATH", str(BASE_DIR / "data.pkl"))
    UPLOAD_DIR = os.environ.get("UPLOAD_DIR", str(BASE_DIR / "uploads"))
    UPLOAD_URL_PREFIX = os.environ.get("UPLOAD_URL_PREFIX", "/uploads")

    BAAS_URL = os.environ.get("BAAS_URL", "")
    BAAS_KEY = os.environ.get("BAAS_KEY", "")
    BAAS_TIMEOUT = float(os.environ.get("BAAS_TIMEOUT", "10"))

    # The dealership owner's account is always treated as admin.
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@autotron.com")
    TIMEZONE = os.environ.get("TIMEZONE", "America/Santiago")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
