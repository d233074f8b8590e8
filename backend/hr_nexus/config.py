import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so edits to backend/.env take effect on process reload.
#
# Tests point DATABASE_URL at a temporary SQLite file; set DISABLE_DOTENV=1 so a
# developer's backend/.env cannot override it.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_bool(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in {"1", "true", "True", "yes", "YES"}


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# The key-value store lives in a local SQLite file unless configured otherwise.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "hr_nexus.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# -------------------- AI (Gemini) --------------------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
GEMINI_API_VERSION = os.getenv("GEMINI_API_VERSION", "v1")

# Drafting is interactive; keep the timeout short so the dashboard stays responsive.
AI_TIMEOUT_S = float(os.getenv("AI_TIMEOUT_S", "10") or "10")
AI_MAX_RETRIES = int(os.getenv("AI_MAX_RETRIES", "1") or "1")
AI_LOG_PAYLOADS = _env_bool("AI_LOG_PAYLOADS", "0")

# -------------------- Portal --------------------
# Master code HR staff must enter to register an admin account.
ADMIN_ACCESS_CODE = os.getenv("ADMIN_ACCESS_CODE", "ADMIN_2024")
COMPANY_NAME = os.getenv("COMPANY_NAME", "TechNexus Solutions")
DEFAULT_ROLE_TITLE = os.getenv("DEFAULT_ROLE_TITLE", "Fullstack Developer")

# CVs are stored inline as data URIs, so keep them small.
MAX_CV_BYTES = int(os.getenv("MAX_CV_BYTES", str(5 * 1024 * 1024)) or str(5 * 1024 * 1024))

FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]
