"""
Streaming cluster classifier.

Assigns each vector to its nearest live cluster in a single pass, then
merges clusters whose centroids ended up within threshold of each other.
"""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from typing import Hashable, Iterable, Optional, Union

from src.core.logger import Logger
from src.embedding.contracts import Embedder, Vectorizer
from src.embedding.distance import DistanceMetric, EuclideanDistance
from src.embedding.vectors import EmbeddingVector

from .algorithm import assign_vector, merge_clusters
from .models import Cluster, ClusterRegistry, ClusteringResult

# Member identity modes
IDENTITY_SEQUENCE = "sequence"   # input position is the member key
IDENTITY_CONTENT = "content"     # content_key(); equal vectors collapse
IDENTITY_MODES = (IDENTITY_SEQUENCE, IDENTITY_CONTENT)


class InvalidParameterError(ValueError):
    """Raised for out-of-range clustering parameters."""
    pass


def validate_parameters(
    similarity_threshold: float,
    drift_resistance: float,
    identity: str = IDENTITY_SEQUENCE,
) -> None:
    """Check similarity_threshold in (0, 1], drift_resistance in [0, 1], known identity."""
    for name, value in (("similarity_threshold", similarity_threshold),
                        ("drift_resistance", drift_resistance)):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidParameterError(
                f"{name} must be a number, got {type(value).__name__} {value!r}"
            )
    if not 0.0 < similarity_threshold <= 1.0:
        raise InvalidParameterError(
            f"similarity_threshold must be in (0, 1], got {similarity_threshold}"
        )
    if not 0.0 <= drift_resistance <= 1.0:
        raise InvalidParameterError(
            f"drift_resistance must be in [0, 1], got {drift_resistance}"
        )
    if identity not in IDENTITY_MODES:
        raise InvalidParameterError(
            f"identity must be one of {IDENTITY_MODES}, got '{identity}'"
        )


class ClusterClassifier(ABC):
    """Anything that labels a vector sequence with clusters."""

    @abstractmethod
    def classify(self, vectors: Iterable[EmbeddingVector]) -> ClusteringResult:
        ...


class StreamingClusterClassifier(ClusterClassifier):
    """
    Single-pass clustering with no preset cluster count.

    Distances are unit-sphere distances under `metric`; a vector joins its
    nearest cluster when that distance is at most 1 - similarity_threshold.
    Results depend on input order.

    Not safe for concurrent classify() calls: cluster state lives on the
    instance and is rebuilt by every call.
    """

    def __init__(
        self,
        similarity_threshold: float,
        drift_resistance: float,
        metric: Optional[DistanceMetric] = None,
        identity: str = IDENTITY_SEQUENCE,
        verbose: bool = False,
        event_log: Optional[Logger] = None,
    ):
        """
        Args:
            similarity_threshold: In (0, 1]; higher means tighter clusters
            drift_resistance: In [0, 1]; weight for centroid_blend on updates
            metric: Distance metric (default: EuclideanDistance)
            identity: "sequence" (default) or "content" member keys
            verbose: Print progress
            event_log: Optional JSONL Logger for run events
        """
        validate_parameters(similarity_threshold, drift_resistance, identity)

        self.similarity_threshold = similarity_threshold
        self.distance_threshold = 1.0 - similarity_threshold
        self.drift_resistance = drift_resistance
        self.metric = metric if metric is not None else EuclideanDistance()
        self.identity = identity
        self.verbose = verbose
        self.event_log = event_log

        self.registry = ClusterRegistry()

    def params(self) -> dict:
        return {
            "similarity_threshold": self.similarity_threshold,
            "drift_resistance": self.drift_resistance,
            "metric": self.metric.name,
            "identity": self.identity,
        }

    def _member_key(self, position: int, vector: EmbeddingVector) -> Hashable:
        if self.identity == IDENTITY_CONTENT:
            return vector.content_key()
        return position

    def classify(self, vectors: Iterable[EmbeddingVector]) -> ClusteringResult:
        """
        Cluster `vectors` and label each one.

        Returns:
            ClusteringResult with one label and one outlier score
            (1 / final cluster size) per input, in input order
        """
        vectors = list(vectors)
        self.registry.clear()

        if self.event_log:
            self.event_log.log_classify_start(self.params(), len(vectors))

        try:
            result = self._classify(vectors)
        except Exception as e:
            if self.event_log:
                self.event_log.log_error(f"{type(e).__name__}: {e}")
            raise

        return result

    def _classify(self, vectors: list[EmbeddingVector]) -> ClusteringResult:
        if self.verbose:
            print(f"Classifying {len(vectors)} vectors "
                  f"(distance threshold {self.distance_threshold:.4f}, metric {self.metric.name})...")

        # 1. Greedy assignment, in input order
        keys = []
        first_copies: dict[Hashable, Cluster] = {}   # content_key -> cluster of earliest copy
        for position, vector in enumerate(vectors):
            if not isinstance(vector, EmbeddingVector):
                raise TypeError(
                    f"Input {position} is {type(vector).__name__}, expected an EmbeddingVector"
                )
            key = self._member_key(position, vector)
            keys.append(key)

            content = vector.content_key()
            earlier = first_copies.get(content)
            if earlier is not None:
                # Equal inputs share a cluster even if its centroid drifted away
                earlier.absorb(vector, key, self.drift_resistance)
                continue

            cluster, _ = assign_vector(
                vector,
                key,
                self.registry,
                self.metric,
                self.distance_threshold,
                self.drift_resistance,
            )
            first_copies[content] = cluster

        clusters_before_merge = len(self.registry)
        if self.verbose:
            print(f"  Assigned {len(vectors)} vectors to {clusters_before_merge} clusters")

        # 2. Merge to fixpoint
        on_pass = self.event_log.log_merge_pass if self.event_log else None
        merge_clusters(
            self.registry,
            self.metric,
            self.distance_threshold,
            self.drift_resistance,
            verbose=self.verbose,
            on_pass=on_pass,
        )

        # 3. Labels and outlier scores in input order
        index = self.registry.member_index()
        labels = []
        outlier_scores = []
        for key in keys:
            cluster = index[key]
            labels.append(cluster.id)
            outlier_scores.append(1.0 / cluster.size)

        if self.verbose:
            print(f"  {len(self.registry)} clusters after merging")

        if self.event_log:
            self.event_log.log_classify_end(
                num_vectors=len(vectors),
                num_clusters=len(self.registry),
                clusters=[c.to_meta_dict() for c in self.registry],
                clusters_before_merge=clusters_before_merge,
            )

        return ClusteringResult(labels=labels, outlier_scores=outlier_scores)


def cluster_documents(
    documents: Iterable[str],
    transformer: Union[Vectorizer, Embedder],
    classifier: ClusterClassifier,
    fit: bool = False,
) -> ClusteringResult:
    """
    Vectorize documents with an upstream transformer, then classify them.

    Args:
        documents: Texts to cluster
        transformer: Vectorizer or Embedder producing one vector per document
        classifier: Classifier to run on the vectors
        fit: Call fit_then_transform (vectorizers only) instead of transform

    Returns:
        ClusteringResult aligned with `documents`
    """
    documents = list(documents)

    if fit:
        if not isinstance(transformer, Vectorizer):
            raise TypeError("fit=True requires a Vectorizer with fit_then_transform()")
        vectors = list(transformer.fit_then_transform(documents))
    else:
        vectors = list(transformer.transform(documents))

    if len(vectors) != len(documents):
        raise ValueError(
            f"Transformer returned {len(vectors)} vectors for {len(documents)} documents"
        )

    return classifier.classify(vectors)
