"""
Question board settings.

Every value can be overridden through an environment variable of the same
name, e.g.

    export QUESTIONS_FILE=/var/lib/questions/questions.json
    export LOGLEVEL=DEBUG
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

# ===== Storage =====
QUESTIONS_FILE = Path(os.getenv("QUESTIONS_FILE", str(BASE_DIR / "data" / "questions.json")))

# ===== Frontend =====
STATIC_DIR = Path(os.getenv("STATIC_DIR", str(BASE_DIR / "public")))

# ===== Server =====
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3000"))
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

# ===== Logging =====
LOGLEVEL = os.getenv("LOGLEVEL", "INFO").upper()
