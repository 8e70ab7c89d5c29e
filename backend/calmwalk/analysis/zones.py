"""Zone classification and incremental merge into the persistent zone stores.

Merging is copy-on-write: the input stores are never modified, and callers
persist the returned lists together with the session that produced them.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from calmwalk.analysis.clustering import Cluster, cluster_entries
from calmwalk.core.constants import (
    MIN_ZONE_ENTRIES,
    NEW_ZONE_RADIUS_M,
    ZONE_CLUSTER_RADIUS_M,
    ZONE_MERGE_RADIUS_M,
    ZONE_RATE_THRESHOLD,
    ZONE_SCORE_INCREMENT,
)
from calmwalk.core.geo import distance_m
from calmwalk.core.time_utils import now_ms as _now_ms
from calmwalk.schemas.walk import CalmZone, Mood, StressZone, WalkSession

logger = logging.getLogger(__name__)


class ZoneKind(str, Enum):
    calm = "calm"
    stress = "stress"


@dataclass(frozen=True, slots=True)
class ZoneUpdate:
    """Result of a merge: the complete replacement stores."""

    calm_zones: list[CalmZone]
    stress_zones: list[StressZone]


def classify_cluster(cluster: Cluster) -> ZoneKind | None:
    """Decide whether a cluster is evidence for a stress zone, a calm zone, or neither.

    Clusters smaller than MIN_ZONE_ENTRIES and neutral-dominated clusters are
    ignored. Stress is checked first.
    """

    if cluster.size < MIN_ZONE_ENTRIES:
        return None
    if cluster.rate(Mood.stressed) > ZONE_RATE_THRESHOLD:
        return ZoneKind.stress
    if cluster.rate(Mood.calm) > ZONE_RATE_THRESHOLD:
        return ZoneKind.calm
    return None


def _new_zone_id(kind: ZoneKind, now_ms: int) -> str:
    return f"{kind.value}_{now_ms}_{uuid.uuid4().hex[:9]}"


def _find_nearby(zones: Sequence[CalmZone | StressZone], cluster: Cluster) -> int | None:
    """Index of the first zone whose center is closer than the merge radius."""

    for i, zone in enumerate(zones):
        if distance_m(zone.center, cluster.center) < ZONE_MERGE_RADIUS_M:
            return i
    return None


def _coerce(zones: Iterable[Any], model):
    # Dicts (e.g. loaded from JSON) are validated; malformed records raise.
    return [z if isinstance(z, model) else model.model_validate(z) for z in zones]


def _merge_stress(zones: list[StressZone], cluster: Cluster, now_ms: int) -> None:
    idx = _find_nearby(zones, cluster)
    if idx is not None:
        zone = zones[idx]
        zones[idx] = zone.model_copy(
            update={
                "stress_count": zone.stress_count + cluster.size,
                "stress_score": min(1.0, zone.stress_score + ZONE_SCORE_INCREMENT),
                "last_stressed": max(zone.last_stressed, cluster.latest_timestamp),
            }
        )
        logger.debug("merged %d entries into stress zone %s", cluster.size, zone.id)
        return

    zone = StressZone(
        id=_new_zone_id(ZoneKind.stress, now_ms),
        center=cluster.center,
        radius=NEW_ZONE_RADIUS_M,
        stress_score=cluster.rate(Mood.stressed),
        stress_count=cluster.size,
        last_stressed=cluster.latest_timestamp,
    )
    zones.append(zone)
    logger.debug("created stress zone %s from %d entries", zone.id, cluster.size)


def _merge_calm(zones: list[CalmZone], cluster: Cluster, now_ms: int) -> None:
    idx = _find_nearby(zones, cluster)
    if idx is not None:
        zone = zones[idx]
        zones[idx] = zone.model_copy(
            update={
                "visit_count": zone.visit_count + cluster.size,
                "calm_score": min(1.0, zone.calm_score + ZONE_SCORE_INCREMENT),
                "last_visited": max(zone.last_visited, cluster.latest_timestamp),
            }
        )
        logger.debug("merged %d entries into calm zone %s", cluster.size, zone.id)
        return

    zone = CalmZone(
        id=_new_zone_id(ZoneKind.calm, now_ms),
        center=cluster.center,
        radius=NEW_ZONE_RADIUS_M,
        calm_score=cluster.rate(Mood.calm),
        visit_count=cluster.size,
        last_visited=cluster.latest_timestamp,
    )
    zones.append(zone)
    logger.debug("created calm zone %s from %d entries", zone.id, cluster.size)


def merge_clusters(
    clusters: Iterable[Cluster],
    calm_zones: Iterable[CalmZone | dict],
    stress_zones: Iterable[StressZone | dict],
    *,
    now_ms: int | None = None,
) -> ZoneUpdate:
    """Fold classified clusters into copies of the zone stores.

    A cluster updates the first zone of its kind whose center lies within the
    merge radius (count += size, score += increment capped at 1, last
    timestamp = max). Otherwise a new zone is created at the cluster center.
    Zones created earlier in the same pass can absorb later clusters.

    Raises:
        pydantic.ValidationError: If a stored zone record is malformed.
    """

    stamp = _now_ms() if now_ms is None else now_ms
    calm = _coerce(calm_zones, CalmZone)
    stress = _coerce(stress_zones, StressZone)

    for cluster in clusters:
        kind = classify_cluster(cluster)
        if kind is ZoneKind.stress:
            _merge_stress(stress, cluster, stamp)
        elif kind is ZoneKind.calm:
            _merge_calm(calm, cluster, stamp)

    return ZoneUpdate(calm_zones=calm, stress_zones=stress)


def update_zones_from_session(
    session: WalkSession,
    calm_zones: Iterable[CalmZone | dict],
    stress_zones: Iterable[StressZone | dict],
    *,
    now_ms: int | None = None,
) -> ZoneUpdate:
    """Cluster a finished session at the zone radius and merge it into the stores."""

    clusters = cluster_entries(session.mood_entries, ZONE_CLUSTER_RADIUS_M)
    return merge_clusters(clusters, calm_zones, stress_zones, now_ms=now_ms)
