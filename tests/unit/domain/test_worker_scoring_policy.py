"""Tests for WorkerScoringPolicy."""

import math
from decimal import Decimal

import pytest

from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.policies.worker_scoring import (
    ACCEPTANCE_THRESHOLD,
    WEIGHTS,
    AssignmentScore,
    availability_score,
    distance_score,
    rank_scores,
    rating_score,
    score_worker,
    specialization_score,
    workload_score,
)
from dispatch_engine.domain.value_objects.enums import ServiceCategory, WorkerAvailability
from dispatch_engine.domain.value_objects.geo_point import GeoPoint

CUSTOMER = GeoPoint(latitude=-6.2088, longitude=106.8456)

# One degree of latitude in km on a 6371 km sphere
KM_PER_DEGREE = 6371 * math.pi / 180


def _service(category=ServiceCategory.CAR_WASH) -> Service:
    return Service(
        id=1, category=category, name="Cuci Mobil Reguler",
        base_price=Decimal("50000"), duration_minutes=60,
    )


def _worker(
    wid: int = 1,
    location: GeoPoint | None = CUSTOMER,
    specializations: set[str] | None = None,
    rating: float | None = 5.0,
    availability=WorkerAvailability.AVAILABLE,
) -> Worker:
    return Worker(
        id=wid, employee_id=f"W{wid}",
        specializations={"cuci_mobil"} if specializations is None else specializations,
        availability=availability, location=location, average_rating=rating,
    )


def _km_south(km: float) -> GeoPoint:
    return GeoPoint(latitude=CUSTOMER.latitude - km / KM_PER_DEGREE, longitude=CUSTOMER.longitude)


# ─── weights ─────────────────────────────────────────────────────────


def test_weights_sum_to_exactly_one():
    assert math.fsum(WEIGHTS.values()) == 1.0


def test_weights_cover_five_factors():
    assert set(WEIGHTS) == {"distance", "specialization", "rating", "workload", "availability"}


def test_threshold_value():
    assert ACCEPTANCE_THRESHOLD == 0.3


# ─── distance_score ──────────────────────────────────────────────────


@pytest.mark.parametrize(
    "distance_km,expected",
    [
        (0.0, 1.0),
        (1.99, 1.0),
        (2.0, 1.0),
        (2.0001, 0.8),
        (5.0, 0.8),
        (5.0001, 0.6),
        (10.0, 0.6),
        (10.0001, 0.4),
        (20.0, 0.4),
        (20.0001, 0.1),
        (500.0, 0.1),
    ],
)
def test_distance_tiers_are_inclusive(distance_km, expected):
    assert distance_score(distance_km) == expected


def test_unknown_distance_is_worst_tier():
    assert distance_score(None) == 0.1


# ─── specialization_score ────────────────────────────────────────────


def test_exact_specialization():
    assert specialization_score({"cuci_mobil"}, "cuci_mobil") == 1.0


@pytest.mark.parametrize(
    "specializations,category",
    [
        ({"cuci_motor"}, "cuci_mobil"),
        ({"detailing"}, "cuci_mobil"),
        ({"cuci_mobil"}, "cuci_motor"),
        ({"detailing"}, "cuci_motor"),
        ({"gardening"}, "potong_rumput"),
        ({"landscaping"}, "potong_rumput"),
    ],
)
def test_related_specialization(specializations, category):
    assert specialization_score(specializations, category) == 0.7


@pytest.mark.parametrize(
    "specializations,category",
    [
        (set(), "cuci_mobil"),
        ({"potong_rumput"}, "cuci_mobil"),
        ({"cuci_mobil", "detailing"}, "potong_rumput"),
        ({"gardening"}, "cuci_motor"),
    ],
)
def test_mismatched_specialization_is_soft(specializations, category):
    assert specialization_score(specializations, category) == 0.3


# ─── rating / workload / availability ────────────────────────────────


@pytest.mark.parametrize(
    "rating,expected",
    [(5.0, 1.0), (4.0, 0.8), (3.0, 0.6), (0.0, 0.0), (7.5, 1.0), (-1.0, 0.0)],
)
def test_rating_score_clamped(rating, expected):
    assert rating_score(rating) == pytest.approx(expected)


@pytest.mark.parametrize(
    "active,expected",
    [(0, 1.0), (1, 0.7), (2, 0.4), (3, 0.1), (10, 0.1)],
)
def test_workload_score(active, expected):
    assert workload_score(active) == expected


def test_availability_score():
    assert availability_score(_worker()) == 1.0
    assert availability_score(_worker(availability=WorkerAvailability.BUSY)) == 0.5
    assert availability_score(_worker(availability=WorkerAvailability.OFFLINE)) == 0.5


# ─── score_worker ────────────────────────────────────────────────────


def test_perfect_candidate_scores_one():
    """Same spot, exact match, rating 5, idle → maximum score."""
    result = score_worker(_worker(), _service(), CUSTOMER, active_orders=0)
    assert result.score == pytest.approx(1.0)
    assert result.distance_km == 0.0
    assert result.is_acceptable()


def test_far_mismatched_busy_candidate_is_rejected():
    """25 km, no match, rating 3, 3 active orders → 0.295, under the threshold."""
    worker = _worker(location=_km_south(25), specializations={"potong_rumput"}, rating=3.0)
    result = score_worker(worker, _service(), CUSTOMER, active_orders=3)
    assert result.score == pytest.approx(0.295)
    assert not result.is_acceptable()


def test_missing_location_does_not_raise():
    worker = _worker(location=None)
    result = score_worker(worker, _service(), CUSTOMER, active_orders=0)
    assert result.distance_km is None
    # 0.1*0.40 + 1*0.25 + 1*0.20 + 1*0.10 + 1*0.05
    assert result.score == pytest.approx(0.64)
    assert "Distance: unknown" in result.breakdown


def test_unrated_worker_scored_as_three():
    worker = _worker(rating=None)
    result = score_worker(worker, _service(), CUSTOMER, active_orders=0)
    # rating factor 0.6 instead of 1.0 → loses 0.4 * 0.20
    assert result.score == pytest.approx(0.92)


@pytest.mark.parametrize(
    "km,expected_distance_factor",
    [(1.0, 1.0), (4.0, 0.8), (8.0, 0.6), (15.0, 0.4), (30.0, 0.1)],
)
def test_distance_factor_flows_into_score(km, expected_distance_factor):
    result = score_worker(_worker(location=_km_south(km)), _service(), CUSTOMER, active_orders=0)
    assert result.score == pytest.approx(0.6 + 0.4 * expected_distance_factor)
    assert result.distance_km == pytest.approx(km, abs=0.01)


def test_breakdown_mentions_every_factor():
    result = score_worker(_worker(), _service(), CUSTOMER, active_orders=1)
    for label in ("Score:", "Distance:", "Specialization:", "Rating:", "Workload: 1 active", "Available:"):
        assert label in result.breakdown


def test_score_always_within_unit_interval():
    for km in (0.0, 3.0, 12.0, 40.0):
        for specs in (set(), {"detailing"}, {"cuci_mobil"}):
            for rating in (None, 0.0, 2.5, 5.0):
                for active in range(5):
                    result = score_worker(
                        _worker(location=_km_south(km), specializations=specs, rating=rating),
                        _service(), CUSTOMER, active,
                    )
                    assert 0.0 <= result.score <= 1.0


# ─── rank_scores ─────────────────────────────────────────────────────


def test_rank_by_score_descending():
    scores = [
        AssignmentScore(worker_id=1, score=0.5, distance_km=1.0, breakdown=""),
        AssignmentScore(worker_id=2, score=0.9, distance_km=1.0, breakdown=""),
        AssignmentScore(worker_id=3, score=0.7, distance_km=1.0, breakdown=""),
    ]
    assert [s.worker_id for s in rank_scores(scores)] == [2, 3, 1]


def test_ties_go_to_lower_worker_id():
    scores = [
        AssignmentScore(worker_id=9, score=0.8, distance_km=1.0, breakdown=""),
        AssignmentScore(worker_id=3, score=0.8, distance_km=1.0, breakdown=""),
        AssignmentScore(worker_id=5, score=0.8, distance_km=1.0, breakdown=""),
    ]
    for _ in range(5):
        assert [s.worker_id for s in rank_scores(scores)] == [3, 5, 9]


def test_identical_workers_tie_deterministically():
    a = score_worker(_worker(wid=12), _service(), CUSTOMER, 0)
    b = score_worker(_worker(wid=4), _service(), CUSTOMER, 0)
    assert a.score == b.score
    assert rank_scores([a, b])[0].worker_id == 4


def test_non_finite_rating_cannot_outrank_a_perfect_candidate():
    unrated = score_worker(_worker(wid=1, rating=float("nan")), _service(), CUSTOMER, 0)
    perfect = score_worker(_worker(wid=2, rating=5.0), _service(), CUSTOMER, 0)

    assert not math.isnan(unrated.score)
    assert unrated.score == pytest.approx(0.92)
    ranked = rank_scores([unrated, perfect])
    assert ranked[0].worker_id == 2
    assert ranked[0].is_acceptable()
