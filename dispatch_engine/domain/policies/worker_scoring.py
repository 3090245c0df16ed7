"""WorkerScoringPolicy — weighted multi-factor ranking of candidate workers."""

from __future__ import annotations

import math
from dataclasses import dataclass

from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import ServiceCategory
from dispatch_engine.domain.value_objects.geo_point import GeoPoint

WEIGHTS: dict[str, float] = {
    "distance": 0.40,
    "specialization": 0.25,
    "rating": 0.20,
    "workload": 0.10,
    "availability": 0.05,
}

ACCEPTANCE_THRESHOLD = 0.3

# (upper bound in km, score); bounds are inclusive
DISTANCE_TIERS: tuple[tuple[float, float], ...] = (
    (2.0, 1.0),
    (5.0, 0.8),
    (10.0, 0.6),
    (20.0, 0.4),
)
FAR_DISTANCE_SCORE = 0.1

RELATED_SPECIALIZATIONS: dict[str, frozenset[str]] = {
    ServiceCategory.CAR_WASH.value: frozenset({ServiceCategory.MOTORCYCLE_WASH.value, "detailing"}),
    ServiceCategory.MOTORCYCLE_WASH.value: frozenset({ServiceCategory.CAR_WASH.value, "detailing"}),
    ServiceCategory.LAWN_CARE.value: frozenset({"gardening", "landscaping"}),
}

EXACT_MATCH_SCORE = 1.0
RELATED_MATCH_SCORE = 0.7
GENERALIST_SCORE = 0.3

# Indexed by active order count; anything beyond the table gets the last value
WORKLOAD_SCORES: tuple[float, ...] = (1.0, 0.7, 0.4, 0.1)

MAX_RATING = 5.0


@dataclass(frozen=True)
class AssignmentScore:
    """Score of one candidate for one order. Ephemeral, used for ranking and audit."""

    worker_id: int
    score: float
    distance_km: float | None  # None when the worker never reported a location
    breakdown: str

    def is_acceptable(self) -> bool:
        return self.score >= ACCEPTANCE_THRESHOLD


def distance_score(distance_km: float | None) -> float:
    """Map a distance to its dispatch tier. Unknown distance is the worst tier."""
    if distance_km is None:
        return FAR_DISTANCE_SCORE
    for upper_bound, score in DISTANCE_TIERS:
        if distance_km <= upper_bound:
            return score
    return FAR_DISTANCE_SCORE


def specialization_score(specializations: set[str], category: str) -> float:
    """Soft preference: exact match > related match > generalist.

    Workers are never excluded here; a mismatched worker still gets
    GENERALIST_SCORE.
    """
    if category in specializations:
        return EXACT_MATCH_SCORE
    related = RELATED_SPECIALIZATIONS.get(category, frozenset())
    if specializations & related:
        return RELATED_MATCH_SCORE
    return GENERALIST_SCORE


def rating_score(rating: float) -> float:
    return min(max(rating / MAX_RATING, 0.0), 1.0)


def workload_score(active_orders: int) -> float:
    index = min(max(active_orders, 0), len(WORKLOAD_SCORES) - 1)
    return WORKLOAD_SCORES[index]


def availability_score(worker: Worker) -> float:
    # Candidates are pre-filtered, this only guards against stale reads
    return 1.0 if worker.is_available() else 0.5


def score_worker(
    worker: Worker,
    service: Service,
    customer_location: GeoPoint,
    active_orders: int,
) -> AssignmentScore:
    """Compute the composite score of a single candidate.

    Args:
        worker: candidate worker.
        service: the ordered service (its category drives specialization).
        customer_location: where the job takes place.
        active_orders: number of the worker's orders in an active status.

    Returns:
        AssignmentScore with a breakdown string suitable for the order timeline.
    """
    distance_km = (
        worker.location.haversine_km(customer_location) if worker.location else None
    )
    rating = worker.effective_rating()
    factors = {
        "distance": distance_score(distance_km),
        "specialization": specialization_score(worker.specializations, service.category.value),
        "rating": rating_score(rating),
        "workload": workload_score(active_orders),
        "availability": availability_score(worker),
    }
    total = math.fsum(WEIGHTS[name] * value for name, value in factors.items())

    distance_label = f"{distance_km:.1f}km" if distance_km is not None else "unknown"
    parts = [
        f"Distance: {distance_label} ({factors['distance'] * WEIGHTS['distance'] * 100:.0f}%)",
        f"Specialization: {factors['specialization'] * WEIGHTS['specialization'] * 100:.0f}%",
        f"Rating: {rating:g}/5 ({factors['rating'] * WEIGHTS['rating'] * 100:.0f}%)",
        f"Workload: {active_orders} active ({factors['workload'] * WEIGHTS['workload'] * 100:.0f}%)",
        f"Available: {worker.availability.value}",
    ]
    breakdown = f"Score: {total * 100:.0f}% ({', '.join(parts)})"

    return AssignmentScore(
        worker_id=worker.id,
        score=total,
        distance_km=round(distance_km, 2) if distance_km is not None else None,
        breakdown=breakdown,
    )


def rank_scores(scores: list[AssignmentScore]) -> list[AssignmentScore]:
    """Sort by score descending; exact ties go to the lower worker id."""
    return sorted(scores, key=lambda s: (-s.score, s.worker_id))
