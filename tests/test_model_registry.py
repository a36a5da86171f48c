import pytest
from sqlalchemy.exc import OperationalError

from shortforge.models import AdminSetting
from shortforge.models.settings import SINGLETON_ID
from shortforge.services.model_registry import (
    ModelConfigCache,
    ModelFeature,
    ModelRef,
    Provider,
    hardcoded_defaults,
    load_admin_default_models,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingLoader:
    def __init__(self, overrides=None):
        self.overrides = overrides or {}
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return dict(self.overrides)


def test_parse_model_ref():
    ref = ModelRef.parse("fal:fal-ai/flux/schnell")
    assert ref.provider == Provider.FAL
    assert ref.model_id == "fal-ai/flux/schnell"
    assert str(ref) == "fal:fal-ai/flux/schnell"


def test_only_first_colon_splits():
    ref = ModelRef.parse("groq:org/model:beta")
    assert ref.provider == Provider.GROQ
    assert ref.model_id == "org/model:beta"


@pytest.mark.parametrize("value", ["", "llama-3", "openai:gpt-4o", "groq:"])
def test_invalid_model_strings(value):
    with pytest.raises(ValueError):
        ModelRef.parse(value)


def test_defaults_without_overrides():
    cache = ModelConfigCache(loader=lambda: {})

    for feature, raw in hardcoded_defaults().items():
        assert cache.get(feature) == ModelRef.parse(raw)


def test_override_wins():
    cache = ModelConfigCache(loader=lambda: {ModelFeature.IMAGE: "gemini:gemini-2.5-flash-image"})

    assert cache.get(ModelFeature.IMAGE) == ModelRef(Provider.GEMINI, "gemini-2.5-flash-image")


def test_invalid_override_falls_back_to_default():
    cache = ModelConfigCache(loader=lambda: {ModelFeature.SCRIPTWRITER: "nonsense"})

    expected = ModelRef.parse(hardcoded_defaults()[ModelFeature.SCRIPTWRITER])
    assert cache.get(ModelFeature.SCRIPTWRITER) == expected


def test_cache_is_reused_until_ttl_expires():
    clock = FakeClock()
    loader = CountingLoader()
    cache = ModelConfigCache(loader=loader, ttl=300, clock=clock)

    cache.get(ModelFeature.IMAGE)
    clock.now += 299
    cache.get(ModelFeature.SCRIPTWRITER)
    assert loader.calls == 1

    clock.now += 2
    cache.get(ModelFeature.IMAGE)
    assert loader.calls == 2


def test_invalidate_forces_reload():
    loader = CountingLoader()
    cache = ModelConfigCache(loader=loader, ttl=300, clock=FakeClock())

    cache.get(ModelFeature.IMAGE)
    loader.overrides = {ModelFeature.IMAGE: "fal:fal-ai/flux/dev"}
    assert cache.get(ModelFeature.IMAGE).model_id != "fal-ai/flux/dev"

    cache.invalidate()
    assert cache.value is None
    assert cache.get(ModelFeature.IMAGE).model_id == "fal-ai/flux/dev"
    assert loader.calls == 2


def test_store_errors_serve_defaults_without_caching():
    calls = []

    def broken_loader():
        calls.append(1)
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    cache = ModelConfigCache(loader=broken_loader)

    expected = ModelRef.parse(hardcoded_defaults()[ModelFeature.IMAGE])
    assert cache.get(ModelFeature.IMAGE) == expected
    assert cache.get(ModelFeature.IMAGE) == expected
    assert cache.value is None
    assert len(calls) == 2


def test_load_admin_default_models(db, session_factory):
    assert load_admin_default_models(session_factory) == {}

    db.add(AdminSetting(id=SINGLETON_ID, default_models={ModelFeature.IMAGE: "fal:fal-ai/flux/dev"}))
    db.commit()

    assert load_admin_default_models(session_factory) == {ModelFeature.IMAGE: "fal:fal-ai/flux/dev"}
