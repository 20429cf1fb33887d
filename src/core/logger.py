"""
Structured logging for clustering runs.

Single JSONL file with typed events for streaming and analysis.

Event types:
- classify_start: Parameters, number of input vectors
- merge_pass: Groups merged and clusters remaining after each pass
- classify_end: Final cluster count and sizes
- error: Failed runs
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional


class Logger:
    def __init__(self, output_dir: Path, filename: str = "clustering.jsonl"):
        """
        Initialize logger for clustering runs.

        Args:
            output_dir: Directory for log files (created if missing)
            filename: Log file name inside output_dir
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / filename

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()  # Ensure streaming writes

    def log_classify_start(self, params: dict[str, Any], num_vectors: int) -> None:
        """
        Log start of a classify call.

        Args:
            params: Classifier parameters (threshold, drift, metric, identity)
            num_vectors: Number of input vectors
        """
        self._write_event("classify_start", {
            "params": params,
            "num_vectors": num_vectors,
        })

    def log_merge_pass(self, pass_num: int, groups_merged: int, num_clusters: int) -> None:
        self._write_event("merge_pass", {
            "pass": pass_num,
            "groups_merged": groups_merged,
            "num_clusters": num_clusters,
        })

    def log_classify_end(
        self,
        num_vectors: int,
        num_clusters: int,
        clusters: list[dict],
        clusters_before_merge: Optional[int] = None,
    ) -> None:
        """
        Log completion of a classify call.

        Args:
            num_vectors: Number of input vectors
            num_clusters: Clusters after merging
            clusters: Cluster details (id, size), centroids excluded
            clusters_before_merge: Cluster count at the end of assignment
        """
        data = {
            "num_vectors": num_vectors,
            "num_clusters": num_clusters,
            "clusters": [{"id": c["id"], "size": c["size"]} for c in clusters],
        }
        if clusters_before_merge is not None:
            data["clusters_before_merge"] = clusters_before_merge

        self._write_event("classify_end", data)

    def log_error(self, message: str, error_type: str = "error") -> None:
        """
        Log error event.

        Args:
            message: Error description
            error_type: Error category (error, warning, abort)
        """
        self._write_event("error", {
            "message": message,
            "error_type": error_type,
        })

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
