#!/usr/bin/env python3
"""
Cluster a file of embedding vectors.

Usage:
    python scripts/cluster.py vectors.npy
    python scripts/cluster.py vectors.jsonl --config clustering.yaml --output result.json
    python scripts/cluster.py vectors.json --threshold 0.8 --metric cosine --log-dir logs/

Input formats:
    .npy          2-D array, one dense vector per row
    .json         list of vectors
    .jsonl        one vector per line
    A vector is a list of numbers (dense) or an {index: value} object (sparse).
"""

import argparse
import json
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import ClusteringConfig, InvalidParameterError, load_config, build_classifier
from src.core.logger import Logger
from src.embedding.distance import METRICS
from src.embedding.vectors import DenseVector, SparseVector, ShapeMismatchError


def _to_vector(item):
    if isinstance(item, dict):
        return SparseVector({int(k): v for k, v in item.items()})
    return DenseVector(item)


def load_vectors(path: Path) -> list:
    """Load dense or sparse vectors from .npy, .json or .jsonl."""
    suffix = path.suffix.lower()

    if suffix == ".npy":
        array = np.load(path)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2-D array in {path}, got shape {array.shape}")
        return [DenseVector(row) for row in array]

    if suffix == ".jsonl":
        with open(path) as f:
            return [_to_vector(json.loads(line)) for line in f if line.strip()]

    if suffix == ".json":
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON list of vectors in {path}")
        return [_to_vector(item) for item in data]

    raise ValueError(f"Unsupported vector file type: {suffix}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Streaming clustering of embedding vectors",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("vectors", help="Vector file (.npy, .json, .jsonl)")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--threshold", type=float, dest="similarity_threshold",
                        help="Similarity threshold in (0, 1]")
    parser.add_argument("--drift", type=float, dest="drift_resistance",
                        help="Drift resistance in [0, 1]")
    parser.add_argument("--metric", choices=sorted(METRICS), help="Distance metric")
    parser.add_argument("--identity", choices=["sequence", "content"],
                        help="Member identity mode")
    parser.add_argument("--output", "-o", help="Write result JSON here (default: stdout)")
    parser.add_argument("--log-dir", help="Directory for clustering.jsonl event log")
    parser.add_argument("--verbose", "-v", action="store_true", default=None,
                        help="Print progress")
    args = parser.parse_args()

    overrides = {
        "similarity_threshold": args.similarity_threshold,
        "drift_resistance": args.drift_resistance,
        "metric": args.metric,
        "identity": args.identity,
        "verbose": args.verbose,
    }

    try:
        if args.config:
            config = load_config(args.config, overrides=overrides)
        else:
            config = ClusteringConfig.from_dict({k: v for k, v in overrides.items() if v is not None})
    except (FileNotFoundError, InvalidParameterError) as e:
        print(f"Error: {e}")
        return 1

    vectors_path = Path(args.vectors)
    if not vectors_path.exists():
        print(f"Error: vector file not found: {vectors_path}")
        return 1

    try:
        vectors = load_vectors(vectors_path)
    except (ValueError, OSError) as e:
        print(f"Error: could not load vectors: {e}")
        return 1

    event_log = Logger(Path(args.log_dir)) if args.log_dir else None
    try:
        classifier = build_classifier(config, event_log=event_log)
        result = classifier.classify(vectors)
    except (ShapeMismatchError, TypeError) as e:
        print(f"Error: {e}")
        return 1
    finally:
        if event_log:
            event_log.close()

    output = {
        "config": config.to_dict(),
        "num_vectors": len(result),
        "num_clusters": result.num_clusters,
        **result.to_dict(),
    }

    if args.output:
        with open(args.output, "w") as f:
            json.dump(output, f, indent=2)
        print(f"Wrote: {args.output} ({len(result)} vectors, {result.num_clusters} clusters)")
    else:
        print(json.dumps(output, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
