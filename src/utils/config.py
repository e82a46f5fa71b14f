from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/retailpulse.sqlite"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings, read from the environment (and a .env file if present).

    Fields:
      - db_path: SQLite file holding catalog and transaction log
      - gemini_api_key: enables AI insights when set
      - gemini_model: model name for the generateContent endpoint
      - insights_timeout: seconds before an insights request is abandoned
      - debug: switches loggers to DEBUG
    """

    db_path: str = DEFAULT_DB_PATH
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    insights_timeout: float = 20.0
    debug: bool = False


def load_settings(env_file: Optional[str] = None) -> Settings:
    load_dotenv(env_file)
    try:
        timeout = float(os.getenv("INSIGHTS_TIMEOUT", "20"))
    except ValueError:
        timeout = 20.0
    return Settings(
        db_path=os.getenv("RETAILPULSE_DB_PATH") or DEFAULT_DB_PATH,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        insights_timeout=timeout,
        debug=bool(os.getenv("DEBUG")),
    )
