import importlib.util
import json
from datetime import datetime, timedelta
import httpx
import pytest
from pathlib import Path
from pydantic import ValidationError

from imobml.artifacts.store import ArtifactStore
from imobml.db.models import Analysis, ExtractedListing, FeatureSnapshot, ScoreSnapshot
from imobml.providers.vision import VisionClient
from imobml.valuation.config import VisionTrainConfig
from imobml.valuation.vision import VisionSelfTrainService

NOW = datetime(2026, 10, 14, 2, 0, 0)
T0 = datetime(2026, 9, 1)

SCORES = {
    "https://cdn.example/p1.jpg": 0.95,
    "https://cdn.example/p2.jpg": 0.5,
    "https://cdn.example/p3.jpg": 0.1,
    "https://cdn.example/p4.jpg": 0.02,
}


def add_listing(session, analysis_id, photos, features, offset):
    session.add(Analysis(id=analysis_id, source_url=None, created_at=T0 + timedelta(days=offset)))
    session.add(ExtractedListing(analysis_id=analysis_id, price=100000, photos=photos))
    session.add(FeatureSnapshot(analysis_id=analysis_id, features=features, created_at=T0))
    session.commit()


def seed(session):
    for i, photo in enumerate(SCORES, start=1):
        add_listing(session, f"l{i}", [photo, "https://cdn.example/extra.jpg"], {"area_m2": 40 + i, "rooms": i}, i)
    add_listing(session, "nophotos", [], {"area_m2": 70}, 10)
    session.add(ScoreSnapshot(analysis_id="l2", condition_score=0.7))
    session.commit()


def scoring_handler(request):
    photos = json.loads(request.content)["photos"]
    return httpx.Response(200, json={"score": SCORES[photos[0]]})


def make_service(session, tmp_path, handler, **config):
    vision = VisionClient("http://vision.local", client=httpx.Client(transport=httpx.MockTransport(handler)))
    store = ArtifactStore(tmp_path, clock=lambda: NOW)
    return VisionSelfTrainService(
        session, vision, store,
        config=VisionTrainConfig(progress=False, **config),
        clock=lambda: NOW,
    )


def test_confidence_band():
    config = VisionTrainConfig(threshold=0.9)
    assert config.is_confident(0.9)
    assert config.is_confident(0.1)
    assert not config.is_confident(0.5)
    assert not config.is_confident(0.11)


def test_only_confident_scores_become_pseudo_labels(db_session, tmp_path):
    seed(db_session)

    result = make_service(db_session, tmp_path, scoring_handler).run()

    assert result.pseudo_labels == 3
    assert result.discarded == 1
    assert result.true_labels == 1
    assert result.train.trainer == "ridge"
    assert result.published.files == {"vision": "vision-condition@2026-42.json"}
    latest = json.loads((tmp_path / "latest.json").read_text())
    assert latest["vision"] == "vision-condition@2026-42.json"
    artifact = json.loads((tmp_path / "vision-condition@2026-42.json").read_text())
    assert artifact["samples"] == 4
    assert len(artifact["model"]) == len(artifact["keys"]) + 1


def test_sends_at_most_sample_limit_photos(db_session, tmp_path):
    seed(db_session)
    sent = []

    def handler(request):
        photos = json.loads(request.content)["photos"]
        sent.append(photos)
        return httpx.Response(200, json={"score": 0.99})

    make_service(db_session, tmp_path, handler, sample_limit=1).run()
    assert sent and all(len(photos) == 1 for photos in sent)


def test_unreachable_service_trains_on_true_labels(db_session, tmp_path):
    seed(db_session)

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = make_service(db_session, tmp_path, handler).run()

    assert result.pseudo_labels == 0
    assert result.true_labels == 1
    assert result.published is not None


def test_no_samples_writes_nothing(db_session, tmp_path):
    add_listing(db_session, "l1", ["https://cdn.example/p2.jpg"], {"area_m2": 50}, 1)

    result = make_service(db_session, tmp_path, scoring_handler).run()

    assert result.samples == 0
    assert result.published is None
    assert list(tmp_path.iterdir()) == []


def test_vision_client_degrades_to_none():
    def handler(request):
        return httpx.Response(503, text="busy")

    client = VisionClient("http://vision.local/", client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert client.classify(["https://cdn.example/p1.jpg"]) is None


def test_low_thresholds_are_accepted():
    config = VisionTrainConfig(threshold=0.3)
    assert config.is_confident(0.5)
    with pytest.raises(ValidationError):
        VisionTrainConfig(threshold=1.5)


def test_script_rejects_out_of_range_threshold():
    script = Path(__file__).resolve().parents[2] / "scripts" / "vision_self_train.py"
    spec = importlib.util.spec_from_file_location("vision_self_train", script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    assert module.main(["--threshold", "1.5"]) == 1
