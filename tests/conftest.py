import os

os.environ.setdefault("ENGINE_DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from config.config_loader import reset_config_loader
from models import ContentItem, ItemStatus, ItemType


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture(autouse=True)
def default_tunables():
    reset_config_loader()
    yield
    reset_config_loader()


@pytest.fixture
def make_item(session):
    def _make(
        item_id,
        name="Item",
        short_description="",
        category_id="design",
        pricing_type="freemium",
        rating=4.0,
        item_type=ItemType.TOOL,
        status=ItemStatus.APPROVED,
        features=None,
    ):
        item = ContentItem(
            id=item_id,
            item_type=item_type.value,
            name=name,
            short_description=short_description,
            category_id=category_id,
            pricing_type=pricing_type,
            rating=rating,
            status=status.value,
            features=features or [],
        )
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _make
