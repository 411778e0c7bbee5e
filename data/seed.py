from pathlib import Path
import sys

# Ensure project root is on sys.path so `from models import ...` works whether this
# script is run inside the container or from the repository root.
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session
from models import ContentItem, ItemStatus, ItemType
from config.database import engine, create_db_and_tables
from services.alternative_service import AlternativeService
from utils.logger import setup_logger

logger = setup_logger(__name__)


SAMPLE_TOOLS = [
    {"id": "figma-ai", "name": "Figma AI", "short_description": "Design assistant for interface layouts and prototypes", "category_id": "design", "pricing_type": "freemium", "rating": 4.6, "features": ["layout generation", "prototyping", "collaboration"]},
    {"id": "uizard", "name": "Uizard", "short_description": "Turn sketches into interface layouts and prototypes", "category_id": "design", "pricing_type": "freemium", "rating": 4.2, "features": ["sketch to design", "prototyping", "templates"]},
    {"id": "galileo", "name": "Galileo AI", "short_description": "Generate interface designs from text prompts", "category_id": "design", "pricing_type": "paid", "rating": 4.0, "features": ["text to design", "layout generation"]},
    {"id": "midjourney", "name": "Midjourney", "short_description": "Image generation from text prompts", "category_id": "image", "pricing_type": "paid", "rating": 4.8, "features": ["image generation", "upscaling"]},
    {"id": "copilot", "name": "GitHub Copilot", "short_description": "Code completion inside your editor", "category_id": "coding", "pricing_type": "paid", "rating": 4.5, "features": ["code completion", "chat"]},
]


def seed(materialize: bool = True) -> int:
    create_db_and_tables()
    created = 0
    with Session(engine) as s:
        for payload in SAMPLE_TOOLS:
            if s.get(ContentItem, payload["id"]):
                continue
            s.add(ContentItem(item_type=ItemType.TOOL.value, status=ItemStatus.APPROVED.value, **payload))
            created += 1
        s.commit()

        if materialize:
            service = AlternativeService()
            for payload in SAMPLE_TOOLS:
                service.materialize_alternatives(s, payload["id"])

    logger.info("Seed complete", extra={"items_created": created})
    return created


if __name__ == "__main__":
    seed()
