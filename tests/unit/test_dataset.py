from datetime import datetime, timedelta
import pytest

from imobml.db.models import Analysis, FeatureSnapshot, PriceHistory, ScoreSnapshot, TtsLabel
from imobml.db.repositories.price_history_repo import PriceHistoryRepository
from imobml.valuation.dataset import Dataset, DatasetBuilder, resolve_true_price

T0 = datetime(2026, 2, 1)


def add_candidate(session, analysis_id, features, days=40, censored=False, label_at=None, with_score=True):
    url = f"https://www.imobiliare.ro/oferta/{analysis_id}"
    session.add(Analysis(id=analysis_id, source_url=url, created_at=T0))
    session.add(FeatureSnapshot(analysis_id=analysis_id, features=features, created_at=T0))
    if with_score:
        session.add(ScoreSnapshot(analysis_id=analysis_id, avm_low=90000, avm_high=110000))
    session.add(TtsLabel(
        analysis_id=analysis_id,
        days=days,
        censored=censored,
        created_at=label_at or T0 + timedelta(days=days),
    ))
    session.commit()
    return url


def add_price(session, url, price, ts):
    session.add(PriceHistory(source_url=url, price=price, ts=ts))
    session.commit()


def test_true_price_is_last_before_label(db_session):
    url = add_candidate(db_session, "a1", {"area_m2": 60}, label_at=T0 + timedelta(days=30))
    add_price(db_session, url, 200000, T0 + timedelta(days=1))
    add_price(db_session, url, 195000, T0 + timedelta(days=10))
    add_price(db_session, url, 180000, T0 + timedelta(days=60))

    price = resolve_true_price(PriceHistoryRepository(db_session), url, T0 + timedelta(days=30))
    assert price == 195000

    data = DatasetBuilder(db_session).build(["area_m2"])
    assert data.avm.y.tolist() == [195000.0]
    assert data.avm.X.tolist() == [[1.0, 60.0]]


def test_non_positive_or_missing_price_is_dropped(db_session):
    url = add_candidate(db_session, "a1", {"area_m2": 60})
    add_price(db_session, url, 0, T0)
    add_candidate(db_session, "a2", {"area_m2": 45})

    data = DatasetBuilder(db_session).build(["area_m2"])
    assert len(data.avm) == 0
    assert sorted(data.report.missing_price) == ["a1", "a2"]


def test_tts_rows_do_not_require_price(db_session):
    url = add_candidate(db_session, "a1", {"area_m2": 60}, days=21)
    add_price(db_session, url, 150000, T0)
    add_candidate(db_session, "a2", {"area_m2": 45}, days=35)

    data = DatasetBuilder(db_session).build(["area_m2"])
    assert len(data.avm) == 1
    assert sorted(data.tts.y.tolist()) == [21.0, 35.0]


def test_censored_and_unscored_analyses_are_not_candidates(db_session):
    add_candidate(db_session, "censored", {"area_m2": 60}, days=120, censored=True)
    add_candidate(db_session, "unscored", {"area_m2": 60}, with_score=False)

    data = DatasetBuilder(db_session).build(["area_m2"])
    assert data.report.candidates == 0
    assert len(data.tts) == 0


def test_sample_feature_keys(db_session):
    add_candidate(db_session, "a1", {"area_m2": 60, "rooms": 2, "tags": ["x"]})
    add_candidate(db_session, "a2", {"city": "Iasi", "area_m2": 50})

    keys = DatasetBuilder(db_session).sample_feature_keys()
    assert keys == ["area_m2", "rooms", "city"]


def test_dataset_validates_vector_length():
    dataset = Dataset(["a", "b"])
    dataset.add([1.0, 2.0, 3.0], 10)
    assert len(dataset) == 1
    with pytest.raises(ValueError):
        dataset.add([1.0, 2.0], 10)


def test_empty_dataset_shapes():
    dataset = Dataset(["a", "b"])
    assert dataset.X.shape == (0, 3)
    assert dataset.y.shape == (0,)


def test_candidate_failure_is_isolated(db_session):
    for analysis_id in ("a1", "a2", "a3"):
        url = add_candidate(db_session, analysis_id, {"area_m2": 60}, days=20)
        add_price(db_session, url, 150000, T0)

    builder = DatasetBuilder(db_session)
    get_features = builder.feature_repo.get_features

    def flaky_features(analysis_id):
        if analysis_id == "a2":
            raise RuntimeError("corrupt snapshot")
        return get_features(analysis_id)

    builder.feature_repo.get_features = flaky_features
    data = builder.build(["area_m2"])

    assert data.report.failures == {"a2": "corrupt snapshot"}
    assert len(data.avm) == 2
    assert len(data.tts) == 2
