import os
import logging
from dotenv import load_dotenv
from logtail import LogtailHandler

# 1. Load the .env file
load_dotenv()

# 2. Project Root Directory
# We are in: /app/core/config.py -> core -> app -> ROOT
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
PROMPTS_PATH = os.path.join(BASE_DIR, "app", "prompts.yaml")

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"

# 3. Setup Logging (Centralized)
def setup_logging():
    # Parent of every `app.*` module logger
    logger = logging.getLogger("app")

    # Stop the log from bubbling up to the Root/Uvicorn logger
    logger.propagate = False

    # Hot-reload leaves old handlers behind
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    stream_handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    # Better Stack (Logtail) - ONLY if Token exists
    logtail_token = os.getenv("LOGTAIL_SOURCE_TOKEN")

    if logtail_token:
        try:
            handler = LogtailHandler(source_token=logtail_token)
            logger.addHandler(handler)
            logger.info("✅ Better Stack Cloud Logging ENABLED")
        except Exception as e:
            logger.error(f"❌ Failed to connect to Better Stack: {e}")
    else:
        logger.warning("⚠️ No LOGTAIL_SOURCE_TOKEN found. Logging to console only.")

    return logger

def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")

def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"⚠️ {name}={raw!r} is not a number. Using {default}.")
        return default

def mask_key(key: str) -> str:
    if not key or len(key) < 5:
        return "❌ NOT SET"
    return f"✅ ...{key[-4:]}"  # Shows only last 4 chars

class Settings:
    """
    Snapshot of the process environment.

    Built per request (see get_settings) so a key rotated or added to the
    environment is picked up without a restart.
    """
    PROJECT_NAME = "Skill Gap Analyzer"
    VERSION = "1.0.0"

    def __init__(self):
        # --- IDENTITY PROVIDER ---
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

        # --- TEXT GENERATION GATEWAY ---
        self.AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")
        self.AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", DEFAULT_GATEWAY_URL)
        self.AI_MODEL = os.getenv("AI_MODEL", DEFAULT_MODEL)
        self.AI_TIMEOUT_SECONDS = _env_float("AI_TIMEOUT_SECONDS", 60.0)

        # --- BEHAVIOUR ---
        self.VALIDATE_ANALYSIS_SCHEMA = _env_flag("VALIDATE_ANALYSIS_SCHEMA", True)
        self.CORS_ALLOW_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        ]

def get_settings() -> Settings:
    return Settings()

logger = setup_logging()
