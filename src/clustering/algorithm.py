"""
Clustering algorithms for streaming clustering.

Core functions for the two-phase algorithm: greedy centroid assignment,
then merging of clusters whose centroids have drifted within threshold.
"""

from __future__ import annotations

from typing import Callable, Hashable, Optional

from src.embedding.distance import DistanceMetric
from src.embedding.vectors import EmbeddingVector

from .models import Cluster, ClusterRegistry


def find_nearest_cluster(
    vector: EmbeddingVector,
    registry: ClusterRegistry,
    metric: DistanceMetric,
) -> tuple[Optional[Cluster], float]:
    """Find the nearest cluster by unit-sphere distance. Ties keep the earliest cluster."""
    best_cluster = None
    best_distance = float('inf')

    for cluster in registry.all_clusters():
        distance = metric.unit_sphere_distance(vector, cluster.centroid)
        if distance < best_distance:
            best_distance = distance
            best_cluster = cluster

    return best_cluster, best_distance


def assign_vector(
    vector: EmbeddingVector,
    key: Hashable,
    registry: ClusterRegistry,
    metric: DistanceMetric,
    threshold: float,
    drift_resistance: float,
) -> tuple[Cluster, bool]:
    """
    Assign one vector to its nearest cluster, or spawn a new one.

    Args:
        vector: Incoming vector
        key: Member key recorded for the vector
        registry: Live clusters (updated in place)
        metric: Distance metric (unit-sphere form is used)
        threshold: Max distance to join an existing cluster
        drift_resistance: Weight passed to centroid_blend on join

    Returns:
        (cluster, created) where created is True for a new cluster
    """
    best_cluster, distance = find_nearest_cluster(vector, registry, metric)

    if best_cluster is None or distance > threshold:
        return registry.spawn_cluster(centroid=vector, members={key}), True

    best_cluster.absorb(vector, key, drift_resistance)
    return best_cluster, False


class DisjointSet:
    """Union-find over 0..n-1 with path compression and union by size."""

    def __init__(self, n: int):
        self.parent = list(range(n))
        self.size = [1] * n

    def find(self, i: int) -> int:
        root = i
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[i] != root:
            self.parent[i], i = root, self.parent[i]
        return root

    def union(self, i: int, j: int) -> bool:
        """Join the sets of i and j. Returns False if already joined."""
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return False
        if self.size[root_i] < self.size[root_j]:
            root_i, root_j = root_j, root_i
        self.parent[root_j] = root_i
        self.size[root_i] += self.size[root_j]
        return True

    def groups(self) -> list[list[int]]:
        """Components as sorted index lists, ordered by smallest index."""
        by_root: dict[int, list[int]] = {}
        for i in range(len(self.parent)):
            by_root.setdefault(self.find(i), []).append(i)
        return list(by_root.values())


def find_merge_groups(
    registry: ClusterRegistry,
    metric: DistanceMetric,
    threshold: float,
) -> list[list[Cluster]]:
    """
    Connected components of the "centroids within threshold" graph.

    Only components with more than one cluster are returned. Each group
    lists its clusters in registry order.
    """
    clusters = registry.all_clusters()
    components = DisjointSet(len(clusters))

    for i in range(len(clusters)):
        for j in range(i + 1, len(clusters)):
            distance = metric.unit_sphere_distance(clusters[i].centroid, clusters[j].centroid)
            if distance <= threshold:
                components.union(i, j)

    return [
        [clusters[i] for i in indices]
        for indices in components.groups()
        if len(indices) > 1
    ]


def merge_pass(
    registry: ClusterRegistry,
    metric: DistanceMetric,
    threshold: float,
    drift_resistance: float,
) -> int:
    """
    Merge every connected group once.

    Centroids fold into the group's last cluster: starting from its
    centroid, each other member is blended in registry order. The merged
    cluster gets a fresh id and the union of all member sets.

    Returns:
        Number of groups merged
    """
    groups = find_merge_groups(registry, metric, threshold)

    for group in groups:
        base = group[-1]
        centroid = base.centroid
        members = set(base.members)

        for cluster in group[:-1]:
            members |= cluster.members
            centroid = centroid.centroid_blend(cluster.centroid, drift_resistance)

        for cluster in group:
            registry.remove(cluster.id)

        registry.spawn_cluster(centroid=centroid, members=members)

    return len(groups)


def merge_clusters(
    registry: ClusterRegistry,
    metric: DistanceMetric,
    threshold: float,
    drift_resistance: float,
    verbose: bool = False,
    on_pass: Optional[Callable[[int, int, int], None]] = None,
) -> int:
    """
    Run merge passes until one performs zero merges.

    Every pass with a merge strictly lowers the cluster count, so this
    terminates.

    Args:
        registry: Live clusters (updated in place)
        metric: Distance metric (unit-sphere form is used)
        threshold: Max centroid distance for two clusters to connect
        drift_resistance: Weight passed to centroid_blend when folding
        verbose: Print progress
        on_pass: Called as on_pass(pass_num, groups_merged, num_clusters)

    Returns:
        Total number of groups merged across all passes
    """
    total = 0
    pass_num = 0

    while True:
        pass_num += 1
        merged = merge_pass(registry, metric, threshold, drift_resistance)
        total += merged

        if on_pass is not None:
            on_pass(pass_num, merged, len(registry))
        if verbose:
            print(f"  Merge pass {pass_num}: merged {merged} groups, {len(registry)} clusters remain")

        if merged == 0:
            return total
