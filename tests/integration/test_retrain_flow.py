"""
End-to-end: label-ready data -> retrain -> published artifacts -> evaluation.
Runs against an in-memory database and a temporary models directory.
"""

import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock
import pytest

from imobml.artifacts.mirrors import ModelCache, S3Mirror
from imobml.artifacts.store import ArtifactStore
from imobml.db.models import Analysis, FeatureSnapshot, ModelMetrics, PriceHistory, ScoreSnapshot, TtsLabel
from imobml.evaluation.service import EvaluationService
from imobml.valuation.config import RetrainConfig
from imobml.valuation.dataset import DatasetBuilder
from imobml.valuation.service import RetrainService

T0 = datetime(2026, 5, 4)
NOW = datetime(2026, 10, 14, 4, 30, 0)


def true_price(area, rooms):
    return 20000 + 1000 * area + 5000 * rooms


@pytest.fixture
def seeded_session(db_session):
    for i in range(12):
        analysis_id = f"an{i:02d}"
        url = f"https://www.imobiliare.ro/oferta/{analysis_id}"
        area, rooms = 45 + 7 * i, i % 3 + 1
        price = true_price(area, rooms)
        created = T0 + timedelta(days=i)

        db_session.add(Analysis(id=analysis_id, source_url=url, created_at=created, updated_at=created))
        db_session.add(FeatureSnapshot(
            analysis_id=analysis_id,
            features={"area_m2": area, "rooms": rooms, "city": "Cluj-Napoca"},
            created_at=created,
        ))
        db_session.add(ScoreSnapshot(
            analysis_id=analysis_id,
            avm_low=price * 0.95,
            avm_high=price * (1.02 if i % 2 else 1.15),
        ))
        db_session.add(TtsLabel(
            analysis_id=analysis_id,
            days=20 + 3 * i,
            censored=False,
            created_at=created + timedelta(days=20 + 3 * i),
        ))
        db_session.add(PriceHistory(source_url=url, price=price * 1.05, ts=created))
        db_session.add(PriceHistory(source_url=url, price=price, ts=created + timedelta(days=5)))
    db_session.commit()
    return db_session


def test_retrain_publish_evaluate(seeded_session, tmp_path):
    s3 = MagicMock()
    redis_client = MagicMock()
    store = ArtifactStore(
        tmp_path,
        mirror=S3Mirror("imob-models", s3),
        cache=ModelCache(redis_client),
        clock=lambda: NOW,
    )
    config = RetrainConfig(gbm_enabled=False)

    result = RetrainService(seeded_session, store, config=config, clock=lambda: NOW).run()

    assert result.keys == ["area_m2", "rooms", "city"]
    assert result.avm_samples == 12 and result.tts_samples == 12
    assert result.avm.trainer == "ridge"
    assert set(result.published.files) == {"avm", "tts"}
    assert result.published.invalidated

    avm = store.load("avm@2026-42.json")
    tts = store.load("tts@2026-42.json")
    for artifact in (avm, tts):
        assert len(artifact.model) == len(artifact.keys) + 1

    # Exactly linear prices: the fitted weights reproduce the training targets
    builder = DatasetBuilder(seeded_session)
    data = builder.build(avm.keys)
    residuals = [
        avm.predict(dict(zip(avm.keys, x[1:]))) - y
        for x, y in zip(data.avm.X.tolist(), data.avm.y.tolist())
    ]
    assert max(abs(r) for r in residuals) < 50

    latest = json.loads((tmp_path / "latest.json").read_text())
    assert latest["avm"] == "s3://imob-models/models/avm@2026-42.json"
    assert (tmp_path / "INVALIDATE").exists()
    redis_client.set.assert_called_once()

    metrics = EvaluationService(seeded_session, clock=lambda: NOW).run()
    assert metrics.sample_count == 12
    assert metrics.pi_coverage == pytest.approx(1.0)
    assert 0 < metrics.mdape < 0.1
    assert seeded_session.query(ModelMetrics).count() == 1


def test_retrain_without_data_writes_null_models(db_session, tmp_path):
    store = ArtifactStore(tmp_path, clock=lambda: NOW)

    result = RetrainService(db_session, store, clock=lambda: NOW).run()

    assert result.avm.model is None
    assert result.avm.error == "empty dataset"
    assert json.loads((tmp_path / "avm@2026-42.json").read_text())["model"] is None
    assert json.loads((tmp_path / "latest.json").read_text())["tts"] == "tts@2026-42.json"
    assert not result.published.invalidated
