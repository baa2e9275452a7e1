import pandas as pd
import pytest

from vetting_dashboard.config import Settings
from vetting_dashboard.data.enrichment import enrich_bundle
from vetting_dashboard.data.samples import build_sample_bundle

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


@pytest.fixture(autouse=True)
def _no_latency(monkeypatch):
    monkeypatch.setenv("SIMULATED_LATENCY_MS", "0")


@pytest.fixture
def as_of() -> pd.Timestamp:
    return AS_OF


@pytest.fixture
def settings() -> Settings:
    return Settings(as_of=AS_OF.isoformat(), sample_seed=42, sample_case_count=40)


@pytest.fixture(scope="session")
def raw_bundle():
    return build_sample_bundle(Settings(as_of=AS_OF.isoformat(), sample_seed=42, sample_case_count=40))


@pytest.fixture
def bundle(raw_bundle, settings):
    return enrich_bundle(raw_bundle, AS_OF, settings)
