"""
Scan orchestrator.

Runs one scan cycle at a time: fans out one task per configured symbol,
builds and finalizes opening ranges, detects and scores breakouts, and joins
everything into an immutable snapshot. The daily registry is the only state
carried between cycles.
"""

import asyncio
import dataclasses
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from .breakout.detector import (
    classify_breakout_type,
    detect_breakout,
    pending_setup,
    watch_item,
)
from .breakout.models import ORBBreakout, PendingSetup
from .config.defaults import DefaultConfig, TradeParams, get_default_config
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import SymbolSnapshot
from .delivery.base import BaseSnapshotDelivery, DeliveryStatus
from .errors import (
    ConfigurationError,
    DataQualityError,
    DegenerateRangeError,
    MarketDataUnavailableError,
    RecoverableError,
)
from .logging.config import get_gating_logger, log_gate_decision
from .lotto.models import LottoScanResult
from .lotto.scanner import LottoScanner
from .providers.base import MarketDataProvider
from .ranges.models import OpeningRange, Timeframe
from .risk.gamma import classify_gamma, gamma_zone
from .risk.sizing import PositionSizing, position_sizing
from .scoring.confidence import ConfidenceScorer
from .scoring.subscores import ModelScorer
from .session.clock import (
    AsyncioTicker,
    Clock,
    Countdown,
    SessionPhase,
    Ticker,
    classify_phase,
    is_market_open,
    resolve_clock,
    time_to_next_phase,
)
from .state.daily import DailyRegistry
from .trade.synthesizer import TradeSynthesizer
from .utils.time import format_market_time, get_timezone, time_elapsed_seconds, trading_date

logger = structlog.get_logger(__name__)
gating_logger = get_gating_logger(__name__)


@dataclass(frozen=True)
class ScanResult:
    """Immutable snapshot produced by one ORB scan cycle."""
    timestamp: datetime
    session_phase: SessionPhase
    vix: float
    ranges: tuple[OpeningRange, ...]
    breakouts: tuple[ORBBreakout, ...]
    pending_setups: tuple[PendingSetup, ...]
    position_sizing: Optional[PositionSizing] = None
    countdown: Optional[Countdown] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "timestamp": format_market_time(self.timestamp),
            "sessionPhase": self.session_phase.value,
            "vix": self.vix,
            "ranges": [item.to_payload() for item in self.ranges],
            "breakouts": [item.to_payload() for item in self.breakouts],
            "pendingSetups": [item.to_payload() for item in self.pending_setups],
        }
        if self.position_sizing is not None:
            payload["positionSizing"] = self.position_sizing.to_payload()
        if self.countdown is not None:
            payload["countdown"] = self.countdown.to_payload()
        return payload


@dataclass(frozen=True)
class ScannerStatus:
    """Lightweight scanner status."""
    is_active: bool
    session_phase: SessionPhase
    ranges_formed: int
    active_breakouts: int
    pending_setups: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "isActive": self.is_active,
            "sessionPhase": self.session_phase.value,
            "rangesFormed": self.ranges_formed,
            "activeBreakouts": self.active_breakouts,
            "pendingSetups": self.pending_setups,
        }


@dataclass(frozen=True)
class SymbolScan:
    """Contribution of one symbol to a scan cycle."""
    symbol: str
    ranges: tuple[OpeningRange, ...]
    breakouts: tuple[ORBBreakout, ...]
    pending_setups: tuple[PendingSetup, ...]


class ScanEngine:
    """
    Coordinator for ORB and index lotto scans.

    Pipeline per symbol:
    Snapshot → Range Builder → Breakout Detector → Scorer → Trade Synthesizer
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        config: Optional[DefaultConfig] = None,
        trade_params: Optional[dict[str, TradeParams]] = None,
        clock: Optional[Clock] = None,
        model: Optional[ModelScorer] = None
    ) -> None:
        self.logger = logger
        self.config = config or get_default_config()

        errors = ConfigValidator.validate_config(dataclasses.asdict(self.config))
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            self.logger.error("Scanner configuration invalid", errors=error_msgs)
            raise ConfigurationError("Invalid scanner configuration", errors=error_msgs)

        self.provider = provider
        self.clock = resolve_clock(clock)
        self.tz = get_timezone(self.config.session.timezone)
        self.trade_params = dict(trade_params or {})

        self.symbols: tuple[str, ...] = tuple(self.config.scan.symbols)
        self.timeframes: tuple[Timeframe, ...] = tuple(Timeframe(tf) for tf in self.config.range.timeframes)
        self.zero_dte_cutoff = SessionPhase(self.config.breakout.zero_dte_cutoff_phase)

        self.registry = DailyRegistry(self.config.range.min_range_pct, self.tz)
        self.scorer = ConfidenceScorer(self.config.scoring, model)
        self.synthesizer = TradeSynthesizer()
        self.lotto_scanner = LottoScanner(
            provider,
            self.config.lotto,
            self.trade_params_for,
            self.config.scan.symbol_timeout_seconds,
            self.tz,
        )

        self.last_result: Optional[ScanResult] = None
        self.last_lotto_result: Optional[LottoScanResult] = None

        self.logger.info(
            "Scan engine initialized",
            symbols=list(self.symbols),
            timeframes=[tf.value for tf in self.timeframes]
        )

    @classmethod
    def from_config_dir(
        cls,
        provider: MarketDataProvider,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        **kwargs: Any
    ) -> "ScanEngine":
        """Build an engine from instruments.yaml plus runtime overrides."""
        loader = ConfigLoader.create(config_dir)
        config = loader.build_config(overrides)

        symbols = set(config.scan.symbols) | set(config.lotto.symbols) | {"SPX"}
        trade_params = {symbol: loader.trade_params(symbol, overrides) for symbol in sorted(symbols)}

        return cls(provider, config=config, trade_params=trade_params, **kwargs)

    def trade_params_for(self, symbol: str) -> TradeParams:
        return self.trade_params.get(symbol, self.config.trade)

    async def run_scan(self) -> ScanResult:
        """
        Run one ORB scan cycle.

        Returns:
            Snapshot of ranges, breakouts and pending setups, ordered by
            configured symbol order then timeframe

        Raises:
            MarketDataUnavailableError: If every symbol failed this cycle
        """
        now = self.clock.now()
        today = trading_date(now, self.tz)
        self.registry.roll(today)
        phase = classify_phase(now, self.tz)

        timeout = self.config.scan.symbol_timeout_seconds

        # VIX and every symbol are fetched together under the same timeout
        vix_result, *snapshots = await asyncio.gather(
            asyncio.wait_for(self.provider.fetch_vix(), timeout),
            *(asyncio.wait_for(self.provider.fetch_snapshot(symbol), timeout)
              for symbol in self.symbols),
            return_exceptions=True
        )
        vix = self._resolve_vix(vix_result)

        scans: list[SymbolScan] = []
        failed = []
        for symbol, snapshot in zip(self.symbols, snapshots):
            if isinstance(snapshot, BaseException):
                failed.append(symbol)
                self._log_symbol_failure(symbol, snapshot)
                continue
            try:
                scans.append(self._process_snapshot(snapshot, now, phase, vix))
            except Exception as e:
                failed.append(symbol)
                self._log_symbol_failure(symbol, e)

        if self.symbols and not scans:
            raise MarketDataUnavailableError(
                "All symbols failed during scan",
                failed_symbols=failed
            )

        result = ScanResult(
            timestamp=now,
            session_phase=phase,
            vix=vix,
            ranges=tuple(item for scan in scans for item in scan.ranges),
            breakouts=tuple(item for scan in scans for item in scan.breakouts),
            pending_setups=tuple(item for scan in scans for item in scan.pending_setups),
            position_sizing=position_sizing(vix),
            countdown=time_to_next_phase(now, self.tz),
        )
        self.last_result = result

        self.logger.info(
            "ORB scan complete",
            session_phase=phase.value,
            vix=vix,
            ranges=len(result.ranges),
            breakouts=len(result.breakouts),
            pending_setups=len(result.pending_setups),
            failed_symbols=failed
        )
        return result

    async def run_lotto_scan(self) -> LottoScanResult:
        """
        Run one index lotto scan.

        Raises:
            MarketDataUnavailableError: If no lotto index could be fetched
        """
        result = await self.lotto_scanner.scan(self.clock.now())
        self.last_lotto_result = result
        return result

    def get_status(self) -> ScannerStatus:
        now = self.clock.now()
        pending = len(self.last_result.pending_setups) if self.last_result else 0
        return ScannerStatus(
            is_active=is_market_open(now, self.tz),
            session_phase=classify_phase(now, self.tz),
            ranges_formed=self.registry.ranges_formed,
            active_breakouts=self.registry.breakout_count,
            pending_setups=pending,
        )

    async def run_forever(
        self,
        ticker: Optional[Ticker] = None,
        deliveries: Sequence[BaseSnapshotDelivery] = (),
        max_cycles: Optional[int] = None
    ) -> int:
        """
        Scan on a fixed cadence until cancelled or ``max_cycles`` is reached.

        Outside regular market hours cycles are skipped unless
        ``scan_outside_market_hours`` is set. Lotto scans run on their own,
        slower cadence. Returns the number of cycles run.
        """
        ticker = ticker or AsyncioTicker()
        scan = self.config.scan
        last_lotto_at: Optional[datetime] = None
        cycles = 0

        while max_cycles is None or cycles < max_cycles:
            started = self.clock.now()
            in_hours = is_market_open(started, self.tz)

            log_gate_decision(
                gating_logger,
                gate_name="market_hours",
                passed=in_hours or scan.scan_outside_market_hours,
                symbol="*",
                reason="market open" if in_hours else "market closed",
                context={"scan_outside_market_hours": scan.scan_outside_market_hours}
            )

            if in_hours or scan.scan_outside_market_hours:
                try:
                    result = await self.run_scan()
                    self._publish(deliveries, "orb", result.to_payload())
                except MarketDataUnavailableError as e:
                    self.logger.error("ORB scan produced no data", failed_symbols=e.failed_symbols)

                lotto_due = (
                    last_lotto_at is None
                    or time_elapsed_seconds(last_lotto_at, started) >= scan.lotto_interval_seconds
                )
                if lotto_due:
                    last_lotto_at = started
                    try:
                        lotto = await self.run_lotto_scan()
                        self._publish(deliveries, "lotto", lotto.to_payload())
                    except MarketDataUnavailableError as e:
                        self.logger.error("Lotto scan produced no data", failed_symbols=e.failed_symbols)

            cycles += 1
            elapsed = time_elapsed_seconds(started, self.clock.now())
            await ticker.sleep(max(0.0, scan.orb_interval_seconds - elapsed))

        return cycles

    def _publish(self, deliveries: Iterable[BaseSnapshotDelivery], kind: str,
                 payload: dict[str, Any]) -> None:
        for delivery in deliveries:
            result = delivery.publish(kind, payload)
            if result.status is not DeliveryStatus.SUCCESS:
                self.logger.warning(
                    "Snapshot delivery failed",
                    delivery_name=delivery.name,
                    kind=kind,
                    status=result.status.value,
                    message=result.message
                )

    def _resolve_vix(self, vix: Any) -> float:
        """Fetched VIX level, or the configured default when the fetch failed."""
        default_vix = self.config.scan.default_vix
        if isinstance(vix, BaseException):
            self.logger.warning(
                "VIX unavailable, using default",
                default_vix=default_vix,
                error_type=type(vix).__name__,
                error=str(vix)
            )
            return default_vix

        if not isinstance(vix, (int, float)) or not math.isfinite(vix) or vix < 0:
            self.logger.warning("VIX value unusable, using default", vix=vix, default_vix=default_vix)
            return default_vix
        return float(vix)

    def _process_snapshot(self, snapshot: SymbolSnapshot, now: datetime,
                          phase: SessionPhase, vix: float) -> SymbolScan:
        symbol = snapshot.symbol
        price = snapshot.quote.price
        tick = snapshot.latest_tick()
        zone = gamma_zone(classify_gamma(price, snapshot.gamma_flip))
        trade = self.trade_params_for(symbol)

        ranges: list[OpeningRange] = []
        breakouts: list[ORBBreakout] = []
        pending: list[PendingSetup] = []

        for timeframe in self.timeframes:
            opening_range = self._resolve_range(snapshot, timeframe, now)
            if opening_range is None:
                continue
            ranges.append(opening_range)
            if not opening_range.is_valid:
                continue

            existing = self.registry.get_breakout(symbol, timeframe)

            if existing is None:
                detection = detect_breakout(
                    opening_range,
                    tick,
                    self.config.breakout.buffer_pct,
                    self.config.breakout.confirm_close,
                )
                if detection is None:
                    pending.append(pending_setup(opening_range, price))
                    continue

                scores = self.scorer.score(symbol, detection.direction, snapshot.bars, snapshot.flow)
                breakout_type = classify_breakout_type(phase, self.zero_dte_cutoff, trade.daily_expiries)
                try:
                    breakout = self.synthesizer.synthesize(
                        detection, opening_range, breakout_type, scores, trade,
                        vix, phase, zone, price
                    )
                except DegenerateRangeError as e:
                    self.logger.warning(
                        "Breakout excluded, degenerate range",
                        symbol=symbol,
                        timeframe=timeframe.value,
                        error=str(e)
                    )
                    continue
            else:
                scores = self.scorer.score(symbol, existing.direction, snapshot.bars, snapshot.flow)
                breakout = self.synthesizer.refresh(
                    existing, opening_range, scores,
                    self._breakout_strength(existing, price), vix, phase, zone, price
                )

            self.registry.put_breakout(breakout)

            if self.scorer.is_tradeable(symbol, breakout.confidence):
                breakouts.append(breakout)
            else:
                pending.append(watch_item(opening_range, price, breakout.direction))

        return SymbolScan(
            symbol=symbol,
            ranges=tuple(ranges),
            breakouts=tuple(breakouts),
            pending_setups=tuple(pending),
        )

    def _resolve_range(self, snapshot: SymbolSnapshot, timeframe: Timeframe,
                       now: datetime) -> Optional[OpeningRange]:
        """Finalized range for the slot, or None while still forming."""
        stored = self.registry.get_range(snapshot.symbol, timeframe)
        if stored is not None:
            return stored

        builder = self.registry.builder(snapshot.symbol, timeframe)
        if snapshot.bars:
            builder.observe_many(snapshot.bars)
        else:
            builder.observe_trade(snapshot.quote.ts, snapshot.quote.price)

        finalized = builder.advance(now)
        if finalized is None:
            return None
        return self.registry.record_range(finalized)

    @staticmethod
    def _breakout_strength(breakout: ORBBreakout, price: float) -> float:
        if breakout.range_width <= 0:
            return 0.0
        breach = breakout.direction.sign * (price - breakout.breakout_price)
        return min(max(0.0, breach) / breakout.range_width * 100, 100.0)

    def _log_symbol_failure(self, symbol: str, error: BaseException) -> None:
        if isinstance(error, asyncio.TimeoutError):
            self.logger.warning(
                "Symbol timed out, skipped this cycle",
                symbol=symbol,
                timeout_seconds=self.config.scan.symbol_timeout_seconds
            )
        elif isinstance(error, (DataQualityError, RecoverableError)):
            self.logger.warning(
                "Symbol skipped this cycle",
                symbol=symbol,
                error_type=type(error).__name__,
                error=str(error)
            )
        else:
            self.logger.error(
                "Unexpected error scanning symbol",
                symbol=symbol,
                error_type=type(error).__name__,
                error=str(error),
                exc_info=error
            )
