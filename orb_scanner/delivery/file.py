"""File-based snapshot delivery."""

import fcntl
from pathlib import Path
from typing import Any

from ..config.delivery import DeliveryMethod, FileDeliveryConfig
from ..utils.serialization import dumps_payload
from .base import BaseSnapshotDelivery, DeliveryResult, DeliveryStatus, SnapshotDeliveryPermanentError


class FileSnapshotDelivery(BaseSnapshotDelivery):
    """
    Writes snapshots to disk.

    ``json`` keeps one file per snapshot kind holding only the latest
    snapshot; ``jsonl`` appends one line per snapshot.
    """

    def __init__(self, name: str, config: FileDeliveryConfig):
        super().__init__(name, config)
        self.config: FileDeliveryConfig = config

        self.output_path = Path(config.output_path)

        if config.create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        if config.format not in ["json", "jsonl"]:
            raise SnapshotDeliveryPermanentError(f"Unsupported format: {config.format}",
                                                 delivery_method=DeliveryMethod.FILE_OUTPUT.value)

    def path_for(self, kind: str) -> Path:
        """Output file for a snapshot kind; the configured path holds ORB snapshots."""
        if kind == "orb":
            return self.output_path
        return self.output_path.with_name(f"{self.output_path.stem}_{kind}{self.output_path.suffix}")

    def deliver(self, kind: str, payload: dict[str, Any]) -> DeliveryResult:
        path = self.path_for(kind)
        try:
            if self.config.format == "json":
                self._write_latest(path, payload)
            else:
                self._append_line(path, payload)

        except OSError as e:
            self.logger.warning(
                "Snapshot delivery file error",
                delivery_name=self.name,
                output_path=str(path),
                error=str(e)
            )
            return DeliveryResult(status=DeliveryStatus.FAILED, message=f"File system error: {str(e)}", error=e)

        except TypeError as e:
            raise SnapshotDeliveryPermanentError(f"Encoding error: {str(e)}", delivery_method=DeliveryMethod.FILE_OUTPUT.value,
                                                 snapshot_kind=kind) from e

        self.logger.debug("Snapshot written to file", delivery_name=self.name, kind=kind, output_path=str(path))
        return DeliveryResult(status=DeliveryStatus.SUCCESS, message=f"Written to {path}")

    def _write_latest(self, path: Path, payload: dict[str, Any]) -> None:
        data = dumps_payload(payload, pretty=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "wb") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(data)
        tmp_path.replace(path)

    def _append_line(self, path: Path, payload: dict[str, Any]) -> None:
        with open(path, "ab") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(dumps_payload(payload))
            f.write(b"\n")

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            test_file = self.output_path.parent / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True

        except OSError as e:
            self.logger.warning("Health check failed", delivery_name=self.name, error=str(e))
            return False
