"""
Data models for streaming clustering.

Defines cluster state, the ordered cluster registry, and the per-input result.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Hashable, Optional

from src.embedding.vectors import EmbeddingVector


def new_cluster_id() -> str:
    """Generate a fresh cluster id (e.g. cluster-<uuid4 hex>)."""
    return "cluster-" + uuid.uuid4().hex


@dataclass
class Cluster:
    """State of a single live cluster."""

    id: str
    centroid: EmbeddingVector           # Replaced, never mutated, on update
    members: set[Hashable] = field(default_factory=set)

    @property
    def size(self) -> int:
        return len(self.members)

    def absorb(self, vector: EmbeddingVector, key: Hashable, drift_resistance: float) -> None:
        """Add a member and drift the centroid toward it."""
        self.members.add(key)
        self.centroid = self.centroid.centroid_blend(vector, drift_resistance)

    def to_meta_dict(self) -> dict:
        """Convert to dict for JSON serialization (excludes centroid)."""
        return {
            "id": self.id,
            "size": self.size,
        }


class ClusterRegistry:
    """
    Live clusters in insertion order.

    Iteration order is the tie-break order for nearest-cluster search and
    the fold order for merges.
    """

    def __init__(self):
        self.clusters: dict[str, Cluster] = {}

    def __len__(self) -> int:
        return len(self.clusters)

    def __iter__(self):
        return iter(list(self.clusters.values()))

    def get(self, cluster_id: str) -> Optional[Cluster]:
        return self.clusters.get(cluster_id)

    def all_clusters(self) -> list[Cluster]:
        return list(self.clusters.values())

    def spawn_cluster(
        self,
        centroid: EmbeddingVector,
        members: Optional[set[Hashable]] = None,
    ) -> Cluster:
        """Create a new cluster with a fresh id, appended last."""
        cluster = Cluster(
            id=new_cluster_id(),
            centroid=centroid,
            members=set(members) if members else set(),
        )
        self.clusters[cluster.id] = cluster
        return cluster

    def remove(self, cluster_id: str) -> Cluster:
        return self.clusters.pop(cluster_id)

    def clear(self) -> None:
        self.clusters.clear()

    def member_index(self) -> dict[Hashable, Cluster]:
        """key -> cluster, keeping the first cluster in registry order per key."""
        index: dict[Hashable, Cluster] = {}
        for cluster in self.clusters.values():
            for key in cluster.members:
                index.setdefault(key, cluster)
        return index


@dataclass
class ClusteringResult:
    """Per-input cluster labels and outlier scores, in input order."""

    labels: list[str] = field(default_factory=list)
    outlier_scores: list[float] = field(default_factory=list)

    def __post_init__(self):
        if len(self.labels) != len(self.outlier_scores):
            raise ValueError(
                f"labels ({len(self.labels)}) and outlier_scores "
                f"({len(self.outlier_scores)}) must be the same length"
            )

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def num_clusters(self) -> int:
        return len(set(self.labels))

    def groups(self) -> dict[str, list[int]]:
        """label -> input positions, labels in first-seen order."""
        groups: dict[str, list[int]] = {}
        for position, label in enumerate(self.labels):
            groups.setdefault(label, []).append(position)
        return groups

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "outlier_scores": list(self.outlier_scores),
        }
