"""Output contract validation for scanner payloads."""

from datetime import datetime
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


SESSION_PHASES = ["premarket", "opening", "morningSession", "midday", "afternoon", "powerHour", "closed"]
TIMEFRAMES = ["15min", "30min", "60min"]

# Response contract for GET /api/scanner/orb
ORB_SCAN_SCHEMA = {
    "type": "object",
    "required": ["timestamp", "sessionPhase", "vix", "ranges", "breakouts", "pendingSetups"],
    "properties": {
        "timestamp": {"type": "string", "format": "date-time"},
        "sessionPhase": {"type": "string", "enum": SESSION_PHASES},
        "vix": {"type": "number", "minimum": 0},
        "ranges": {
            "type": "array",
            "items": {
                "required": ["symbol", "date", "timeframe", "high", "low", "rangeWidth",
                             "rangeWidthPct", "isValid"],
                "properties": {"timeframe": {"enum": TIMEFRAMES}},
            },
        },
        "breakouts": {
            "type": "array",
            "items": {
                "required": ["id", "symbol", "direction", "breakoutType", "timeframe", "breakoutPrice",
                             "currentPrice", "rangeHigh", "rangeLow", "entry", "stop", "target1",
                             "target2", "riskReward", "suggestedStrike", "suggestedExpiry",
                             "optionType", "confidence", "volumeScore", "flowScore", "patternScore",
                             "mlScore", "vix", "sessionPhase", "gammaZone", "signals", "thesis",
                             "timestamp"],
                "properties": {
                    "direction": {"enum": ["LONG", "SHORT"]},
                    "breakoutType": {"enum": ["0DTE", "SWING"]},
                    "timeframe": {"enum": TIMEFRAMES},
                    "optionType": {"enum": ["call", "put"]},
                    "gammaZone": {"enum": ["positive", "negative", "neutral"]},
                    "sessionPhase": {"enum": SESSION_PHASES},
                    "confidence": {"minimum": 0, "maximum": 100},
                },
            },
        },
        "pendingSetups": {
            "type": "array",
            "items": {
                "required": ["symbol", "timeframe", "rangeHigh", "rangeLow", "distanceToHigh",
                             "distanceToLow", "bias"],
                "properties": {
                    "timeframe": {"enum": TIMEFRAMES},
                    "bias": {"enum": ["bullish", "bearish", "neutral"]},
                },
            },
        },
    },
}

# Response contract for GET /api/scanner/index-lotto
LOTTO_SCAN_SCHEMA = {
    "type": "object",
    "required": ["indexData", "lottoPlays"],
    "properties": {
        "indexData": {
            "type": "array",
            "items": {
                "required": ["symbol", "name", "price", "change", "changePercent", "dayRange",
                             "pivotPoints", "rsi", "macdSignal", "volumeProfile"],
                "properties": {
                    "macdSignal": {"enum": ["bullish", "bearish", "neutral"]},
                    "volumeProfile": {"enum": ["above_avg", "below_avg", "average"]},
                },
            },
        },
        "lottoPlays": {
            "type": "array",
            "items": {
                "required": ["symbol", "underlying", "underlyingPrice", "strike", "expiry", "type",
                             "currentPrice", "estimatedTarget", "potentialReturn", "setups",
                             "overallScore", "suggestedEntry", "stopLoss", "target1", "target2",
                             "riskReward", "keyLevel", "levelType", "gammaExposure", "thesis",
                             "confidence"],
                "properties": {
                    "type": {"enum": ["call", "put"]},
                    "levelType": {"enum": ["support", "resistance", "pivot"]},
                    "gammaExposure": {"enum": ["positive", "negative", "neutral"]},
                    "confidence": {"enum": ["low", "medium", "high"]},
                },
            },
        },
    },
}

SCHEMAS = {
    "orb": ORB_SCAN_SCHEMA,
    "lotto": LOTTO_SCAN_SCHEMA,
}


class PayloadValidationError(Exception):
    """Payload does not match the output contract."""
    pass


class PayloadValidator:
    """Validates scanner payloads against the UI contract."""

    def __init__(self):
        self.logger = logger
        self.schemas = SCHEMAS

    def validate(self, kind: str, payload: dict[str, Any]) -> bool:
        """
        Validate a payload of the given kind.

        Args:
            kind: "orb" or "lotto"
            payload: Serialized scan result

        Returns:
            True if valid

        Raises:
            PayloadValidationError: If validation fails
        """
        schema = self.schemas.get(kind)
        if schema is None:
            raise PayloadValidationError(f"Unknown payload kind: {kind}")

        try:
            if not isinstance(payload, dict):
                raise ValueError("Payload must be an object")
            self._validate_object(payload, schema, kind)
            if kind == "orb":
                self._validate_orb_values(payload)
            return True

        except ValueError as e:
            error_msg = f"Payload validation failed: {str(e)}"
            self.logger.error(error_msg, kind=kind)
            raise PayloadValidationError(error_msg) from e

    def _validate_object(self, obj: dict[str, Any], schema: dict[str, Any], path: str) -> None:
        missing_fields = [name for name in schema.get("required", []) if name not in obj]
        if missing_fields:
            raise ValueError(f"{path}: missing required fields: {missing_fields}")

        for name, rules in schema.get("properties", {}).items():
            if name not in obj:
                continue
            value = obj[name]
            field_path = f"{path}.{name}"

            if "enum" in rules and value not in rules["enum"]:
                raise ValueError(f"{field_path}: invalid value {value!r}")

            expected = rules.get("type")
            if expected == "array":
                if not isinstance(value, list):
                    raise ValueError(f"{field_path}: must be an array")
                item_schema = rules.get("items")
                if item_schema:
                    for i, item in enumerate(value):
                        if not isinstance(item, dict):
                            raise ValueError(f"{field_path}[{i}]: must be an object")
                        self._validate_object(item, item_schema, f"{field_path}[{i}]")
            elif expected == "number" and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ValueError(f"{field_path}: must be a number")
            elif expected == "string" and not isinstance(value, str):
                raise ValueError(f"{field_path}: must be a string")

            if "minimum" in rules and isinstance(value, (int, float)) and value < rules["minimum"]:
                raise ValueError(f"{field_path}: {value} below minimum {rules['minimum']}")
            if "maximum" in rules and isinstance(value, (int, float)) and value > rules["maximum"]:
                raise ValueError(f"{field_path}: {value} above maximum {rules['maximum']}")

            if rules.get("format") == "date-time":
                try:
                    datetime.fromisoformat(value.replace("Z", "+00:00"))
                except (AttributeError, ValueError):
                    raise ValueError(f"{field_path}: invalid timestamp {value!r}")

    def _validate_orb_values(self, payload: dict[str, Any]) -> None:
        """Cross-field invariants on ranges and breakouts."""
        for i, item in enumerate(payload["ranges"]):
            if item["high"] < item["low"]:
                raise ValueError(f"ranges[{i}]: high below low")
            if item["rangeWidth"] < 0:
                raise ValueError(f"ranges[{i}]: negative rangeWidth")

        for i, item in enumerate(payload["breakouts"]):
            if not item["riskReward"] > 0:
                raise ValueError(f"breakouts[{i}]: riskReward must be positive")
            if item["direction"] == "LONG" and item["optionType"] != "call":
                raise ValueError(f"breakouts[{i}]: LONG breakout must use calls")
            if item["direction"] == "SHORT" and item["optionType"] != "put":
                raise ValueError(f"breakouts[{i}]: SHORT breakout must use puts")


# Global validator instance
validator = PayloadValidator()


def validate_payload(kind: str, payload: dict[str, Any]) -> bool:
    """Convenience function to validate a payload."""
    return validator.validate(kind, payload)
