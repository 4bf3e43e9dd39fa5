# limeai/config.py
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Upstream credentials
    DEEPSEEK_API_KEY: str = os.getenv("DEEPSEEK_API_KEY", "")
    DEEPSEEK_API_URL: str = os.getenv(
        "DEEPSEEK_API_URL", "https://api.deepseek.com/v1/chat/completions"
    )
    DEEPSEEK_MODEL: str = os.getenv("DEEPSEEK_MODEL", "deepseek-coder")

    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_SUMMARY_MODEL: str = os.getenv("GEMINI_SUMMARY_MODEL", "gemini-2.0-flash")
    GEMINI_CHAT_MODEL: str = os.getenv("GEMINI_CHAT_MODEL", "gemini-2.5-pro-exp-03-25")

    PLAYDIALOG_USER_ID: str = os.getenv("PLAYDIALOG_USER_ID", "")
    PLAYDIALOG_SECRET_KEY: str = os.getenv("PLAYDIALOG_SECRET_KEY", "")

    UPSTREAM_TIMEOUT_SECS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECS", "15"))

    # Admission quota (defaults match the documented policy)
    ADMISSION_LIMIT_PER_WINDOW: int = int(os.getenv("ADMISSION_LIMIT_PER_WINDOW", "20"))
    ADMISSION_WINDOW_SECONDS: float = float(os.getenv("ADMISSION_WINDOW_SECONDS", "60"))
    ADMISSION_COOLDOWN_SECONDS: float = float(os.getenv("ADMISSION_COOLDOWN_SECONDS", "60"))
    ADMISSION_MAX_COOLDOWN_SECONDS: float = float(
        os.getenv("ADMISSION_MAX_COOLDOWN_SECONDS", "600")
    )

    FLOWCHART_CACHE_MAX_ENTRIES: int = int(os.getenv("FLOWCHART_CACHE_MAX_ENTRIES", "100"))

    # 10 MB upload cap for document extraction
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Comma-separated origins; "*" allows all
    _origins = os.getenv("CORS_ALLOW_ORIGINS", "*").strip()
    CORS_ALLOW_ORIGINS: list[str] = [s.strip() for s in _origins.split(",") if s.strip()] or ["*"]


settings = Settings()
