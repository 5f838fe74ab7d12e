"""Configuration for snapshot delivery sinks."""

from dataclasses import dataclass
from enum import Enum


class DeliveryMethod(Enum):
    """Supported snapshot delivery methods."""
    FILE_OUTPUT = "file_output"
    STDOUT = "stdout"


@dataclass(frozen=True)
class FileDeliveryConfig:
    """Configuration for file-based delivery."""
    output_path: str
    format: str = "json"  # json overwrites with the latest snapshot, jsonl appends
    create_dirs: bool = True


@dataclass(frozen=True)
class StdoutDeliveryConfig:
    """Configuration for stdout delivery."""
    format: str = "json"  # json, pretty
