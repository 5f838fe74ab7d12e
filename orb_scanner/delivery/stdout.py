"""Standard output snapshot delivery."""

import sys
from typing import Any

from ..config.delivery import DeliveryMethod, StdoutDeliveryConfig
from ..utils.serialization import dumps_payload
from .base import BaseSnapshotDelivery, DeliveryResult, DeliveryStatus, SnapshotDeliveryPermanentError


class StdoutSnapshotDelivery(BaseSnapshotDelivery):
    """Prints each snapshot as a JSON document."""

    def __init__(self, name: str, config: StdoutDeliveryConfig, stream=None):
        super().__init__(name, config)
        self.config: StdoutDeliveryConfig = config
        self.stream = stream

        if config.format not in ["json", "pretty"]:
            raise SnapshotDeliveryPermanentError(f"Unsupported format: {config.format}",
                                                 delivery_method=DeliveryMethod.STDOUT.value)

    def deliver(self, kind: str, payload: dict[str, Any]) -> DeliveryResult:
        stream = self.stream or sys.stdout
        try:
            output = dumps_payload(payload, pretty=self.config.format == "pretty").decode()
            print(output, file=stream, flush=True)
        except (OSError, TypeError) as e:
            self.logger.error("Failed to print snapshot", delivery_name=self.name, kind=kind, error=str(e))
            return DeliveryResult(status=DeliveryStatus.FAILED, message=f"Stdout error: {str(e)}", error=e)

        self.logger.debug("Snapshot printed to stdout", delivery_name=self.name, kind=kind)
        return DeliveryResult(status=DeliveryStatus.SUCCESS, message="Printed to stdout")

    def health_check(self) -> bool:
        stream = self.stream or sys.stdout
        return not stream.closed
