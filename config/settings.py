import os
from typing import Optional, List
from dotenv import load_dotenv
from pathlib import Path

# Load .env from project folder explicitly (works even if CWD differs)
_BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=_BASE_DIR / ".env")


class Settings:
    # Database
    DATABASE_URL: str = os.getenv("ENGINE_DATABASE_URL", "sqlite:///./interaction_engine.db")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8010"))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # CORS
    ALLOWED_ORIGINS: List[str] = os.getenv("ALLOWED_ORIGINS", "*").split(",")

    # Tunables file (similarity weights, thresholds, page sizes)
    CONFIG_PATH: Optional[str] = os.getenv("ENGINE_CONFIG_PATH")

    # Copy recomputed vote totals onto content_items.upvotes after each vote
    SYNC_ENTITY_UPVOTES: bool = os.getenv("SYNC_ENTITY_UPVOTES", "True").lower() == "true"


settings = Settings()
