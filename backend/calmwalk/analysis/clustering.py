"""Greedy, anchor-based spatial clustering of mood entries."""

from dataclasses import dataclass
from typing import Sequence

from calmwalk.core.geo import within_radius
from calmwalk.schemas.walk import Location, Mood, MoodEntry


@dataclass(frozen=True, slots=True)
class Cluster:
    """Entries grouped around an anchor.

    Attributes:
        center: Location of the anchor entry. Never recomputed as a centroid.
        entries: Members in input order; the anchor is always first.
    """

    center: Location
    entries: tuple[MoodEntry, ...]

    @property
    def size(self) -> int:
        return len(self.entries)

    def count(self, mood: Mood) -> int:
        return sum(1 for e in self.entries if e.mood == mood)

    def rate(self, mood: Mood) -> float:
        """Fraction of members carrying `mood` (0 for an empty cluster)."""

        if not self.entries:
            return 0.0
        return self.count(mood) / len(self.entries)

    @property
    def latest_timestamp(self) -> int:
        return max(e.timestamp for e in self.entries)


def cluster_entries(entries: Sequence[MoodEntry], radius_m: float) -> list[Cluster]:
    """Partition entries into proximity clusters.

    Entries are visited in input order. Each unprocessed entry anchors a new
    cluster that absorbs every other unprocessed entry within `radius_m` of
    the anchor. Earlier entries therefore become anchors, so the result
    depends on input order; sort by timestamp first when that matters.

    Args:
        entries: Mood entries (any order).
        radius_m: Membership radius around each anchor, inclusive.

    Returns:
        Clusters covering every input entry exactly once.
    """

    processed: set[int] = set()
    clusters: list[Cluster] = []

    for i, anchor in enumerate(entries):
        if i in processed:
            continue
        processed.add(i)
        members = [anchor]
        for j, other in enumerate(entries):
            if j in processed:
                continue
            if within_radius(anchor.location, other.location, radius_m):
                members.append(other)
                processed.add(j)
        clusters.append(Cluster(center=anchor.location, entries=tuple(members)))

    return clusters


def mood_rates(cluster: Cluster) -> dict[Mood, float]:
    """Rate per mood; sums to 1 for any non-empty cluster."""

    return {mood: cluster.rate(mood) for mood in Mood}
