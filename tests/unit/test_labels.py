from datetime import datetime, timedelta
import httpx
import pytest

from imobml.db.models import Analysis, TtsLabel
from imobml.db.repositories.tts_label_repo import TtsLabelRepository
from imobml.labels.config import LabelingConfig
from imobml.labels.probe import ListingProbe, ListingState, looks_like_sold
from imobml.labels.rules import CENSOR_HORIZON_DAYS, days_between, derive_label
from imobml.labels.service import LabelService
from imobml.providers.listing import ListingClient
from imobml.providers.rate_limiter import HostRateLimiter

DAY0 = datetime(2026, 1, 5, 12, 0, 0)


def make_probe(handler, at):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    listing_client = ListingClient(client=client, limiter=HostRateLimiter(min_interval=0))
    return ListingProbe(listing_client, clock=lambda: at)


def sold_page(request):
    return httpx.Response(200, text="<div class='badge'>Apartament VÂNDUT</div>")


def active_page(request):
    return httpx.Response(200, text="<h1>Apartament 2 camere, Zorilor</h1>")


def add_analysis(session, analysis_id="a1", url="https://www.imobiliare.ro/oferta/a1"):
    session.add(Analysis(id=analysis_id, source_url=url, created_at=DAY0, updated_at=DAY0))
    session.commit()


# --- Rules ---

def test_looks_like_sold_is_case_insensitive():
    assert looks_like_sold("<span>S-a vândut</span>")
    assert looks_like_sold("Accepted Offer")
    assert not looks_like_sold("<p>Disponibil imediat</p>")


def test_days_between_rounds_to_nearest_day():
    assert days_between(DAY0, DAY0 + timedelta(days=3, hours=11)) == 3
    assert days_between(DAY0, DAY0 + timedelta(days=3, hours=12)) == 4
    assert days_between(DAY0 + timedelta(days=2), DAY0) == 2


def test_derive_label_sold_within_horizon():
    label = derive_label(DAY0, DAY0 + timedelta(days=50), ListingState.SOLD)
    assert (label.days, label.censored) == (50, False)


def test_derive_label_sold_after_horizon_is_clamped():
    label = derive_label(DAY0, DAY0 + timedelta(days=200), ListingState.SOLD)
    assert (label.days, label.censored) == (CENSOR_HORIZON_DAYS, True)
    assert label.observed_days == 200


def test_derive_label_active_is_censored():
    label = derive_label(DAY0, DAY0 + timedelta(days=10), ListingState.ACTIVE)
    assert (label.days, label.censored) == (120, True)
    assert label.observed_days is None


def test_derive_label_exactly_at_horizon_is_observed():
    label = derive_label(DAY0, DAY0 + timedelta(days=120), ListingState.INACCESSIBLE)
    assert (label.days, label.censored) == (120, False)


# --- Probe ---

@pytest.mark.parametrize("status", [404, 410, 500])
def test_probe_error_statuses_are_inaccessible(status):
    probe = make_probe(lambda request: httpx.Response(status, text="sold"), DAY0)
    result = probe.probe("https://www.imobiliare.ro/oferta/x")
    assert result.state == ListingState.INACCESSIBLE
    assert result.status_code == status


def test_probe_transport_error_is_inaccessible():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = make_probe(handler, DAY0).probe("https://www.imobiliare.ro/oferta/x")
    assert result.state == ListingState.INACCESSIBLE
    assert result.status_code is None


def test_probe_sold_and_active():
    assert make_probe(sold_page, DAY0).probe("https://x.ro/1").state == ListingState.SOLD
    assert make_probe(active_page, DAY0).probe("https://x.ro/1").state == ListingState.ACTIVE


# --- Service ---

def run_labeling(session, handler, at):
    service = LabelService(session, probe=make_probe(handler, at), config=LabelingConfig(progress=False))
    return service.run()


def test_sold_at_day_50(db_session):
    add_analysis(db_session)
    report = run_labeling(db_session, sold_page, DAY0 + timedelta(days=50))

    label = db_session.get(TtsLabel, "a1")
    assert (label.days, label.censored) == (50, False)
    assert label.created_at == DAY0 + timedelta(days=50)
    assert report.labeled == {"a1": 50}


def test_sold_at_day_200_is_clamped(db_session):
    add_analysis(db_session)
    run_labeling(db_session, sold_page, DAY0 + timedelta(days=200))

    label = db_session.get(TtsLabel, "a1")
    assert (label.days, label.censored, label.observed_days) == (120, True, 200)


def test_still_active_at_day_10(db_session):
    add_analysis(db_session)
    report = run_labeling(db_session, active_page, DAY0 + timedelta(days=10))

    label = db_session.get(TtsLabel, "a1")
    assert (label.days, label.censored) == (120, True)
    assert report.censored == ["a1"]


def test_analysis_without_url_is_not_labeled(db_session):
    db_session.add(Analysis(id="nourl", source_url=None, created_at=DAY0))
    db_session.commit()
    report = run_labeling(db_session, sold_page, DAY0 + timedelta(days=5))
    assert report.attempted == []
    assert db_session.query(TtsLabel).count() == 0


def test_labeling_twice_keeps_one_label(db_session):
    add_analysis(db_session, "a1", "https://www.imobiliare.ro/oferta/a1")
    add_analysis(db_session, "a2", "https://www.imobiliare.ro/oferta/a2")

    first = run_labeling(db_session, sold_page, DAY0 + timedelta(days=30))
    second = run_labeling(db_session, active_page, DAY0 + timedelta(days=90))

    assert first.labeled_count == 2
    assert second.labeled_count == 0
    assert db_session.query(TtsLabel).count() == 2
    assert db_session.get(TtsLabel, "a1").days == 30


def test_insert_if_absent_ignores_existing(db_session):
    add_analysis(db_session)
    repo = TtsLabelRepository(db_session)
    assert repo.insert_if_absent("a1", days=12, censored=False) is True
    assert repo.insert_if_absent("a1", days=120, censored=True) is False
    db_session.expire_all()
    assert db_session.get(TtsLabel, "a1").days == 12


def test_probe_failure_is_isolated(db_session):
    add_analysis(db_session, "a1", "https://www.imobiliare.ro/oferta/a1")
    add_analysis(db_session, "a2", "https://www.imobiliare.ro/oferta/a2")

    class BrokenProbe:
        def probe(self, url):
            if url.endswith("a1"):
                raise RuntimeError("parser exploded")
            return make_probe(sold_page, DAY0 + timedelta(days=7)).probe(url)

    service = LabelService(db_session, probe=BrokenProbe(), config=LabelingConfig(progress=False))
    report = service.run()

    assert "a1" in report.failures
    assert report.labeled == {"a2": 7}


def test_malformed_url_is_labeled_inaccessible(db_session):
    add_analysis(db_session, "bad", "https://[oferta-123")

    report = run_labeling(db_session, sold_page, DAY0 + timedelta(days=30))

    label = db_session.get(TtsLabel, "bad")
    assert (label.days, label.censored) == (30, False)
    assert report.failures == {}
