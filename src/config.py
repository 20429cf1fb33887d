"""
Configuration for streaming clustering runs.
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Union

import yaml

from src.clustering.classifier import (
    IDENTITY_SEQUENCE,
    InvalidParameterError,
    StreamingClusterClassifier,
    validate_parameters,
)
from src.core.logger import Logger
from src.embedding.distance import METRICS, get_metric

__all__ = [
    "ClusteringConfig",
    "InvalidParameterError",
    "load_config",
    "build_classifier",
]


@dataclass
class ClusteringConfig:
    """Configuration for a StreamingClusterClassifier."""

    # Thresholds
    similarity_threshold: float = 0.9   # Distance threshold is 1 - this
    drift_resistance: float = 1.0       # 1.0 = centroid moves halfway per member

    # Metric
    metric: str = "euclidean"           # manhattan | euclidean | cosine
    missing_as_zero: bool = False       # Sparse raw distance over union of keys

    # Member keys: "sequence" (input position) or "content" (value-derived)
    identity: str = IDENTITY_SEQUENCE

    # Output
    verbose: bool = False

    def __post_init__(self):
        if not isinstance(self.metric, str):
            raise InvalidParameterError(
                f"metric must be a string, got {type(self.metric).__name__} {self.metric!r}"
            )
        self.metric = self.metric.lower()
        if self.metric not in METRICS:
            raise InvalidParameterError(
                f"metric must be one of {sorted(METRICS)}, got '{self.metric}'"
            )
        validate_parameters(self.similarity_threshold, self.drift_resistance, self.identity)

    def to_dict(self) -> dict:
        """Convert to JSON/YAML-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClusteringConfig":
        """Create from dict, filtering out unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def load_config(path: Union[str, Path], overrides: Optional[dict] = None) -> ClusteringConfig:
    """
    Load config from a YAML file, merging with defaults.

    Args:
        path: YAML file with ClusteringConfig fields at top level
        overrides: Values applied on top of the file (None values ignored)

    Returns:
        Validated ClusteringConfig
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No config file at {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidParameterError(f"Could not parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidParameterError(f"Config file {path} must contain a mapping")

    merged = ClusteringConfig().to_dict()
    merged.update(data)
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    return ClusteringConfig.from_dict(merged)


def build_classifier(
    config: ClusteringConfig,
    event_log: Optional[Logger] = None,
) -> StreamingClusterClassifier:
    """Construct a classifier from config."""
    return StreamingClusterClassifier(
        similarity_threshold=config.similarity_threshold,
        drift_resistance=config.drift_resistance,
        metric=get_metric(config.metric, missing_as_zero=config.missing_as_zero),
        identity=config.identity,
        verbose=config.verbose,
        event_log=event_log,
    )
