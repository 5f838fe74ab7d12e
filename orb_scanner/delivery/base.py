"""Base classes for snapshot delivery mechanisms."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from ..errors import DeliveryError
from ..validation.payload_schema import PayloadValidationError, validate_payload


class DeliveryStatus(Enum):
    """Snapshot delivery status."""
    SUCCESS = "success"
    FAILED = "failed"
    REJECTED = "rejected"
    DEAD_LETTER = "dead_letter"


@dataclass
class DeliveryResult:
    """Result of a snapshot delivery attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    attempt_count: int = 1
    delivery_time_ms: Optional[int] = None
    error: Optional[Exception] = None


class SnapshotDeliveryPermanentError(DeliveryError):
    """Delivery error that should not be retried."""
    pass


class BaseSnapshotDelivery(ABC):
    """Base class for snapshot delivery mechanisms."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"orb_scanner.delivery.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def deliver(self, kind: str, payload: dict[str, Any]) -> DeliveryResult:
        """
        Deliver one serialized snapshot.

        Args:
            kind: Snapshot kind, "orb" or "lotto"
            payload: Serialized scan result

        Returns:
            Delivery result
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if delivery mechanism is healthy."""
        pass

    def publish(self, kind: str, payload: dict[str, Any], max_retries: int = 0,
                retry_delay: float = 0) -> DeliveryResult:
        """Validate a payload against the output contract, then deliver it."""
        try:
            validate_payload(kind, payload)
        except PayloadValidationError as e:
            self._error_count += 1
            self.logger.error("Snapshot rejected", delivery_name=self.name, kind=kind, error=str(e))
            return DeliveryResult(status=DeliveryStatus.REJECTED, message=str(e), attempt_count=0, error=e)

        return self.deliver_with_retry(kind, payload, max_retries=max_retries, retry_delay=retry_delay)

    def deliver_with_retry(
        self,
        kind: str,
        payload: dict[str, Any],
        max_retries: int = 3,
        retry_delay: float = 1
    ) -> DeliveryResult:
        """
        Deliver a snapshot with retry logic.

        Args:
            kind: Snapshot kind
            payload: Serialized scan result
            max_retries: Maximum number of retry attempts
            retry_delay: Delay between retries in seconds

        Returns:
            Final delivery result
        """
        attempt = 0
        last_error = None

        while attempt <= max_retries:
            try:
                start_time = time.time()
                result = self.deliver(kind, payload)
                delivery_time = int((time.time() - start_time) * 1000)

                if result.status == DeliveryStatus.SUCCESS:
                    result.delivery_time_ms = delivery_time
                    result.attempt_count = attempt + 1
                    self._delivery_count += 1
                    return result
                last_error = result.error

            except SnapshotDeliveryPermanentError as e:
                self._error_count += 1
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Permanent error: {str(e)}",
                    attempt_count=attempt + 1,
                    error=e
                )

            except Exception as e:
                last_error = e

            attempt += 1

            if attempt <= max_retries:
                self.logger.warning(
                    "Delivery attempt failed, retrying",
                    delivery_name=self.name,
                    attempt=attempt,
                    retry_delay=retry_delay,
                    error=str(last_error)
                )
                if retry_delay:
                    time.sleep(retry_delay)

        self._error_count += 1
        return DeliveryResult(
            status=DeliveryStatus.DEAD_LETTER,
            message=f"Max retries exceeded: {str(last_error)}",
            attempt_count=attempt,
            error=last_error
        )

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self):
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0
