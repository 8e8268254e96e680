# core/config.py
import os

from dotenv import load_dotenv

# Load .env
load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# ---- VERSE STORE ----
BIBLE_DB_PATH = os.getenv("BIBLE_DB_PATH", os.path.join(BASE_DIR, "data", "bible.db"))
DEFAULT_TRANSLATION = os.getenv("DEFAULT_BIBLE_TRANSLATION", "kjv")

# Must match how the verse table was imported: "genesis_special" or "digit_packed"
VERSE_ID_SCHEME = os.getenv("VERSE_ID_SCHEME", "genesis_special")

# ---- IMPORT ----
BIBLE_JSON_URL = os.getenv(
    "BIBLE_JSON_URL",
    "https://raw.githubusercontent.com/godlytalias/Bible-Database/"
    "edd4eb0a80ddeaea54ec0b2ff3e1cb72c09b85d0/English/bible.json",
)
IMPORT_BATCH_SIZE = int(os.getenv("IMPORT_BATCH_SIZE", "1000"))

# ---- SERVER ----
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
CORS_ALLOWED_ORIGIN = os.getenv("CORS_ALLOWED_ORIGIN", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
