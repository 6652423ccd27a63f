import os
import logging
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI
from pinecone import Pinecone
from pyairtable import Api

# Project root = one level above this file's directory
BASE_DIR = os.path.dirname(os.path.dirname(__file__))

# Look for apikey.env at project root
env_path = os.path.join(BASE_DIR, "apikey.env")
load_dotenv(env_path)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4-turbo-preview")
OPENAI_EMBEDDING_MODEL = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002")

# Create client lazily / safely
client: Optional[OpenAI]
if OPENAI_API_KEY:
    client = OpenAI(api_key=OPENAI_API_KEY)
else:
    client = None  # we'll error later if someone actually needs it

# =========================
# AIRTABLE CONFIG
# =========================

AIRTABLE_API_KEY = os.getenv("AIRTABLE_API_KEY")

AIRTABLE_BASE_ID_COURSES = os.getenv("AIRTABLE_BASE_ID_COURSES")
AIRTABLE_BASE_ID_SECTIONS = os.getenv("AIRTABLE_BASE_ID_SECTIONS")
AIRTABLE_BASE_ID_DESCRIPTIONS = os.getenv(
    "AIRTABLE_BASE_ID_DESCRIPTIONS", AIRTABLE_BASE_ID_COURSES
)

AIRTABLE_TABLE_NAME_COURSES = os.getenv("AIRTABLE_TABLE_NAME_COURSES", "Courses")
AIRTABLE_TABLE_NAME_SECTIONS = os.getenv("AIRTABLE_TABLE_NAME_SECTIONS", "Sections")
AIRTABLE_TABLE_NAME_DESCRIPTIONS = os.getenv(
    "AIRTABLE_TABLE_NAME_DESCRIPTIONS", "Descriptions"
)

# =========================
# PINECONE CONFIG
# =========================

PINECONE_API_KEY = os.getenv("PINECONE_API_KEY")
PINECONE_INDEX_NAME = os.getenv("PINECONE_INDEX_NAME", "ucsd-courses")

# =========================
# APP SETTINGS
# =========================

CAMPUS_TIMEZONE = os.getenv("CAMPUS_TIMEZONE", "America/Los_Angeles")
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TOP_K = 10            # fetched before resort and truncation
DISPLAY_COUNT = 3
CHAT_TEMPERATURE = 0.7

SMALL_CLASS_MAX = 30   # classes <= 30 seats
LARGE_CLASS_MIN = 100  # classes >= 100 seats

UPCOMING_WINDOW_MINUTES = 120
REFRESH_INTERVAL_SECONDS = 60
CATALOG_PAGE_SIZE = 25

# Building code used for remote / asynchronous placeholder sections
REMOTE_BUILDING_CODE = "RCLAS"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def get_openai_client() -> OpenAI:
    if client is None:
        raise RuntimeError("OPENAI_API_KEY is not configured")
    return client


def get_vector_index():
    """Return a handle on the Pinecone index that holds course embeddings."""
    if not PINECONE_API_KEY:
        raise RuntimeError("PINECONE_API_KEY is not configured")
    pc = Pinecone(api_key=PINECONE_API_KEY)
    return pc.Index(PINECONE_INDEX_NAME)


def get_airtable_api() -> Api:
    if not AIRTABLE_API_KEY:
        raise RuntimeError("AIRTABLE_API_KEY is not configured")
    return Api(AIRTABLE_API_KEY)
