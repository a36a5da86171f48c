import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shortforge import models  # noqa: F401
from shortforge.core.database import Base
from shortforge.models import Climate, GenerationJob, JobStatus, Style
from shortforge.services.credits import CreditLedger
from shortforge.services.model_registry import ModelConfigCache


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def model_cache():
    return ModelConfigCache(loader=lambda: {}, ttl=300)


@pytest.fixture
def style(db):
    style = Style(
        id="style_test",
        name="Curious Facts",
        hook_type="QUESTION",
        hook_example="Did you know?",
        cta_type="COMMUNITY",
        visual_prompt_base="cinematic vertical frame",
        is_system=True,
    )
    db.add(style)
    db.commit()
    return style


@pytest.fixture
def climate(db):
    climate = Climate(
        id="climate_test",
        name="Curiosity & Mystery",
        emotional_state="CURIOSITY",
        revelation_dynamic="PROGRESSIVE",
        narrative_pressure="FLUID",
        is_system=True,
    )
    db.add(climate)
    db.commit()
    return climate


@pytest.fixture
def make_job(db, style, climate):
    def _make_job(**overrides):
        values = {
            "id": f"short_{uuid.uuid4().hex[:8]}",
            "user_id": "user_1",
            "premise": "The deep sea is stranger than space",
            "target_duration": 30,
            "format": "SHORT",
            "style_id": style.id,
            "climate_id": climate.id,
            "status": JobStatus.DRAFT,
            "progress": 0,
        }
        values.update(overrides)
        job = GenerationJob(**values)
        db.add(job)
        db.commit()
        return job

    return _make_job


@pytest.fixture
def fund(db):
    def _fund(user_id: str = "user_1", amount: int = 100):
        return CreditLedger(db).grant(user_id, amount, "test credits")

    return _fund
