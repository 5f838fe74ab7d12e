"""Tests for snapshot delivery sinks."""

import io

import orjson
import pytest

from orb_scanner.config.delivery import FileDeliveryConfig, StdoutDeliveryConfig
from orb_scanner.delivery.base import (
    BaseSnapshotDelivery,
    DeliveryResult,
    DeliveryStatus,
    SnapshotDeliveryPermanentError,
)
from orb_scanner.delivery.file import FileSnapshotDelivery
from orb_scanner.delivery.stdout import StdoutSnapshotDelivery
from orb_scanner.errors import DeliveryError


@pytest.fixture
def orb_payload() -> dict:
    return {
        "timestamp": "2024-01-03T15:00:00.000Z",
        "sessionPhase": "morningSession",
        "vix": 16.0,
        "ranges": [],
        "breakouts": [],
        "pendingSetups": [],
    }


class FlakyDelivery(BaseSnapshotDelivery):
    def __init__(self, failures: int):
        super().__init__("flaky", None)
        self.failures = failures
        self.attempts = 0

    def deliver(self, kind, payload):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise OSError("disk busy")
        return DeliveryResult(status=DeliveryStatus.SUCCESS)

    def health_check(self):
        return True


class TestStdoutDelivery:
    """Test suite for stdout delivery."""

    def test_prints_json(self, orb_payload) -> None:
        stream = io.StringIO()
        delivery = StdoutSnapshotDelivery("stdout", StdoutDeliveryConfig(), stream=stream)

        result = delivery.publish("orb", orb_payload)

        assert result.status is DeliveryStatus.SUCCESS
        assert orjson.loads(stream.getvalue()) == orb_payload
        assert delivery.get_stats()["delivery_count"] == 1

    def test_pretty_format(self, orb_payload) -> None:
        stream = io.StringIO()
        StdoutSnapshotDelivery("stdout", StdoutDeliveryConfig(format="pretty"), stream=stream) \
            .publish("orb", orb_payload)

        assert "\n  \"sessionPhase\"" in stream.getvalue()

    def test_unsupported_format(self) -> None:
        with pytest.raises(SnapshotDeliveryPermanentError) as exc_info:
            StdoutSnapshotDelivery("stdout", StdoutDeliveryConfig(format="xml"))
        assert isinstance(exc_info.value, DeliveryError)

    def test_invalid_payload_is_rejected(self, orb_payload) -> None:
        stream = io.StringIO()
        delivery = StdoutSnapshotDelivery("stdout", StdoutDeliveryConfig(), stream=stream)
        orb_payload["sessionPhase"] = "lunch"

        result = delivery.publish("orb", orb_payload)

        assert result.status is DeliveryStatus.REJECTED
        assert stream.getvalue() == ""
        assert delivery.get_stats()["error_count"] == 1


class TestFileDelivery:
    """Test suite for file delivery."""

    def test_json_keeps_latest_snapshot(self, tmp_path, orb_payload) -> None:
        output = tmp_path / "out" / "orb.json"
        delivery = FileSnapshotDelivery("file", FileDeliveryConfig(output_path=str(output)))

        delivery.publish("orb", orb_payload)
        orb_payload["vix"] = 21.0
        delivery.publish("orb", orb_payload)

        assert orjson.loads(output.read_bytes())["vix"] == 21.0

    def test_jsonl_appends(self, tmp_path, orb_payload) -> None:
        output = tmp_path / "orb.jsonl"
        delivery = FileSnapshotDelivery("file", FileDeliveryConfig(output_path=str(output), format="jsonl"))

        delivery.publish("orb", orb_payload)
        delivery.publish("orb", orb_payload)

        lines = output.read_bytes().splitlines()
        assert len(lines) == 2
        assert orjson.loads(lines[1]) == orb_payload

    def test_lotto_snapshots_get_their_own_file(self, tmp_path) -> None:
        output = tmp_path / "orb.json"
        delivery = FileSnapshotDelivery("file", FileDeliveryConfig(output_path=str(output)))

        result = delivery.publish("lotto", {"indexData": [], "lottoPlays": []})

        assert result.status is DeliveryStatus.SUCCESS
        assert (tmp_path / "orb_lotto.json").exists()
        assert not output.exists()

    def test_health_check(self, tmp_path) -> None:
        delivery = FileSnapshotDelivery("file", FileDeliveryConfig(output_path=str(tmp_path / "orb.json")))
        assert delivery.health_check()


class TestRetry:
    """Test suite for retry handling."""

    def test_retries_until_success(self) -> None:
        delivery = FlakyDelivery(failures=2)

        result = delivery.deliver_with_retry("orb", {}, max_retries=3, retry_delay=0)

        assert result.status is DeliveryStatus.SUCCESS
        assert result.attempt_count == 3

    def test_dead_letter_after_max_retries(self) -> None:
        delivery = FlakyDelivery(failures=10)

        result = delivery.deliver_with_retry("orb", {}, max_retries=2, retry_delay=0)

        assert result.status is DeliveryStatus.DEAD_LETTER
        assert result.attempt_count == 3
        assert delivery.get_stats()["success_rate"] == 0.0

    def test_reset_stats(self) -> None:
        delivery = FlakyDelivery(failures=0)
        delivery.deliver_with_retry("orb", {}, retry_delay=0)

        delivery.reset_stats()

        assert delivery.get_stats()["delivery_count"] == 0
        assert delivery.get_stats()["success_rate"] == 0.0
