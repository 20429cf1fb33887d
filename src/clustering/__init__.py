"""
Streaming clustering of embedding vectors.

Single pass, no preset cluster count: greedy centroid assignment followed
by merging of clusters whose centroids converged.
"""

from .models import (
    Cluster,
    ClusterRegistry,
    ClusteringResult,
    new_cluster_id,
)
from .algorithm import (
    find_nearest_cluster,
    assign_vector,
    DisjointSet,
    find_merge_groups,
    merge_pass,
    merge_clusters,
)
from .classifier import (
    ClusterClassifier,
    StreamingClusterClassifier,
    InvalidParameterError,
    validate_parameters,
    cluster_documents,
    IDENTITY_SEQUENCE,
    IDENTITY_CONTENT,
)

__all__ = [
    # Models
    "Cluster",
    "ClusterRegistry",
    "ClusteringResult",
    "new_cluster_id",
    # Algorithm
    "find_nearest_cluster",
    "assign_vector",
    "DisjointSet",
    "find_merge_groups",
    "merge_pass",
    "merge_clusters",
    # Classifier
    "ClusterClassifier",
    "StreamingClusterClassifier",
    "InvalidParameterError",
    "validate_parameters",
    "cluster_documents",
    "IDENTITY_SEQUENCE",
    "IDENTITY_CONTENT",
]
