import os
from functools import lru_cache

from dotenv import load_dotenv

from .engine.tool_config import DEFAULT_UPGRADE_MESSAGE

load_dotenv()


class Settings:
    APP_VERSION: str = "1.0.0"
    ENGINE_VERSION: str = "eval-v1"
    SCHEMA_VERSION: str = "v1-tool-snapshots"

    # --- CONFIG ---
    ENV = os.getenv("TOOLEVAL_ENV", "production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tooleval.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"
    SEED_DEMO_TOOL = os.getenv("SEED_DEMO_TOOL", "1") == "1"

    # --- ENGINE ---
    DEFAULT_UPGRADE_MESSAGE = os.getenv("DEFAULT_UPGRADE_MESSAGE", DEFAULT_UPGRADE_MESSAGE)
    # widest allowed step between one range's max and the next range's min
    RANGE_ADJACENCY = float(os.getenv("RANGE_ADJACENCY", "1"))


@lru_cache
def get_settings():
    return Settings()
