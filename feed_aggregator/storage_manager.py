"""
Storage module for writing aggregation snapshots as JSON.
"""
import json
import logging
import os
import tempfile

from .models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """
    Writes the snapshot document consumed by the front end.

    The file is replaced on every run; no history is kept.
    """

    def __init__(self, output_path: str = 'data/articles.json', indent: int = 2):
        """
        Initialize the snapshot writer.

        Args:
            output_path: Path of the JSON snapshot file
            indent: JSON indentation
        """
        self.output_path = output_path
        self.indent = indent

        logger.debug(f"SnapshotWriter initialized with output path: {self.output_path}")

    def write(self, snapshot: Snapshot) -> str:
        """
        Serialize a snapshot and atomically replace the output file.

        Args:
            snapshot: Snapshot to write

        Returns:
            Path of the written file
        """
        directory = os.path.dirname(os.path.abspath(self.output_path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.snapshot-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot.to_dict(), f, indent=self.indent, ensure_ascii=False)
            os.replace(tmp_path, self.output_path)
        except OSError as e:
            logger.error(f"Error saving snapshot to {self.output_path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Wrote {self.output_path} with {len(snapshot.items)} items total")
        return self.output_path
