"""
Application configuration.

Values come from the environment (optionally a ``.env`` file).  Every
setting can be overridden per application through ``create_app``.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

BASE_DIR = Path(__file__).resolve().parent.parent

COMPANY = os.getenv("COMPANY", "Company")

# ---------------------------------------------------------------------------
# Record store

DB_PATH = os.getenv("DBPATH", str(BASE_DIR / "staffboard.db"))

# Optional JSON file used to seed an empty database
SEED_PATH = os.getenv("SEED_PATH", str(BASE_DIR / "data" / "seed.json"))

# ---------------------------------------------------------------------------
# Templates and media

TEMPLATES_DIR = os.path.join(os.getenv("APPFOLDER", str(BASE_DIR)), "templates")

# Photos are written to IMAGE_ROOT/IMAGE_SUBDIR, or static/IMAGE_SUBDIR when
# IMAGE_ROOT is unset
IMAGE_ROOT = os.getenv("IMAGE_ROOT", str(BASE_DIR / "static"))
IMAGE_SUBDIR = os.getenv("IMAGE_SUBDIR", "images")

# ---------------------------------------------------------------------------
# Employee list

ITEMS_PER_PAGE = int(os.getenv("ITEMS_PER_PAGE", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
