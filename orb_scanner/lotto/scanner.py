"""
Index lotto scan.

Builds daily technicals (RSI, MACD, floor pivots) for each lotto index and
turns them into cheap out-of-the-money option plays. Confidence labels are
looser than the ORB threshold.
"""

import asyncio
import math
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from typing import Optional

import structlog

from ..breakout.models import OptionType
from ..config.defaults import LottoParams, TradeParams
from ..data.models import Bar, Quote
from ..errors import DataQualityError, InsufficientDataError, MarketDataUnavailableError, RecoverableError
from ..providers.base import MarketDataProvider
from ..risk.gamma import GammaZone
from ..utils.time import trading_date
from .indicators import (
    MacdSignal,
    calculate_macd,
    calculate_pivots,
    calculate_rsi,
    macd_signal,
    volume_profile,
)
from .models import (
    ConfidenceLabel,
    IndexData,
    LevelType,
    LottoPlay,
    LottoScanResult,
    SetupType,
    TechnicalSetup,
)

logger = structlog.get_logger(__name__)

MIN_DAILY_BARS = 20
SPX_PER_SPY = 10.0

# Play premium heuristics as multiples of the estimated premium
ENTRY_MULT = 0.9
STOP_MULT = 0.4
TARGET1_MULT = 2.0
TARGET2_MULT = 3.5
ESTIMATED_TARGET_MULT = 3.0
POTENTIAL_RETURN = 200.0
LOTTO_RISK_REWARD = "1:4"


def prior_session_bar(bars: Sequence[Bar], today: date, tz=None) -> Bar:
    """Most recent daily bar from before ``today``."""
    for bar in reversed(bars):
        if trading_date(bar.ts, tz) < today:
            return bar
    return bars[-1]


def build_index_data(
    symbol: str,
    name: str,
    quote: Quote,
    daily_bars: Sequence[Bar],
    today: date,
    rsi_period: int = 14,
    tz=None
) -> IndexData:
    """
    Assemble the market snapshot for one index.

    Raises:
        InsufficientDataError: If fewer than 20 daily bars are available
    """
    if len(daily_bars) < MIN_DAILY_BARS:
        raise InsufficientDataError(
            f"Not enough daily history for {symbol}",
            required_count=MIN_DAILY_BARS,
            available_count=len(daily_bars),
            context={"symbol": symbol}
        )

    closes = [bar.close for bar in daily_bars]
    prior = prior_session_bar(daily_bars, today, tz)

    return IndexData(
        symbol=symbol,
        name=name,
        price=quote.price,
        change=quote.change or 0.0,
        change_percent=quote.change_percent or 0.0,
        day_low=quote.day_low or quote.price,
        day_high=quote.day_high or quote.price,
        pivot_points=calculate_pivots(prior.high, prior.low, prior.close),
        rsi=float(round(calculate_rsi(closes, rsi_period))),
        macd_signal=macd_signal(calculate_macd(closes)),
        volume_profile=volume_profile(daily_bars),
    )


def derive_spx(spy: IndexData, name: str = "S&P 500 Index") -> IndexData:
    """Approximate the cash index from SPY at ten times its price."""
    return IndexData(
        symbol="SPX",
        name=name,
        price=round(spy.price * SPX_PER_SPY, 2),
        change=spy.change * SPX_PER_SPY,
        change_percent=spy.change_percent,
        day_low=round(spy.day_low * SPX_PER_SPY, 2),
        day_high=round(spy.day_high * SPX_PER_SPY, 2),
        pivot_points=spy.pivot_points.scaled(SPX_PER_SPY),
        rsi=spy.rsi,
        macd_signal=spy.macd_signal,
        volume_profile=spy.volume_profile,
    )


def lotto_expiry(today: date) -> date:
    """Nearest weekday on or after ``today``; lotto plays are same-day."""
    day = today
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


def confidence_label(score: float, params: LottoParams) -> ConfidenceLabel:
    if score > params.high_confidence:
        return ConfidenceLabel.HIGH
    if score > params.medium_confidence:
        return ConfidenceLabel.MEDIUM
    return ConfidenceLabel.LOW


def bullish_setups(index: IndexData) -> list[TechnicalSetup]:
    pivots = index.pivot_points
    setups = []
    if index.rsi < 35:
        setups.append(TechnicalSetup(
            SetupType.RSI_DIVERGENCE, "1h", 65 + (35 - index.rsi),
            f"RSI oversold at {index.rsi:.0f}, potential reversal"))
    if pivots.pivot < index.price < pivots.r1:
        setups.append(TechnicalSetup(
            SetupType.SUPPORT_BOUNCE, "1h", 70,
            f"Holding above pivot {pivots.pivot}, targeting R1 {pivots.r1}"))
    if index.macd_signal is MacdSignal.BULLISH:
        setups.append(TechnicalSetup(
            SetupType.GAMMA_FLIP, "4h", 68,
            "MACD bullish, potential gamma acceleration"))
    return setups


def bearish_setups(index: IndexData) -> list[TechnicalSetup]:
    pivots = index.pivot_points
    setups = []
    if index.rsi > 70:
        setups.append(TechnicalSetup(
            SetupType.RSI_DIVERGENCE, "1h", 60 + (index.rsi - 70),
            f"RSI overbought at {index.rsi:.0f}, potential pullback"))
    if pivots.s1 < index.price < pivots.pivot:
        setups.append(TechnicalSetup(
            SetupType.RESISTANCE_REJECTION, "1h", 68,
            f"Rejected at pivot {pivots.pivot}, targeting S1 {pivots.s1}"))
    if index.macd_signal is MacdSignal.BEARISH:
        setups.append(TechnicalSetup(
            SetupType.GAMMA_FLIP, "4h", 65,
            "MACD bearish, potential downside acceleration"))
    return setups


def _lotto_strike(price: float, option_type: OptionType, trade: TradeParams) -> float:
    increment = trade.strike_increment
    if option_type is OptionType.CALL:
        steps = math.ceil((price + trade.lotto_otm_distance) / increment)
    else:
        steps = math.floor((price - trade.lotto_otm_distance) / increment)
    return round(steps * increment, 6)


def build_play(
    index: IndexData,
    option_type: OptionType,
    setups: list[TechnicalSetup],
    trade: TradeParams,
    expiry: date,
    params: LottoParams
) -> LottoPlay:
    strike = _lotto_strike(index.price, option_type, trade)
    premium = abs(strike - index.price) * trade.premium_multiplier * 2
    overall = float(round(sum(s.strength for s in setups) / len(setups)))
    pivots = index.pivot_points

    if option_type is OptionType.CALL:
        suffix, level_type = "C", LevelType.SUPPORT
        thesis = (f"{index.symbol} showing bullish signals with MACD {index.macd_signal.value} "
                  f"and RSI at {index.rsi:.0f}. Looking for move through {pivots.r1} resistance.")
    else:
        suffix, level_type = "P", LevelType.RESISTANCE
        thesis = (f"{index.symbol} showing bearish signals with MACD {index.macd_signal.value} "
                  f"and RSI at {index.rsi:.0f}. Looking for breakdown through {pivots.s1} support.")

    return LottoPlay(
        symbol=f"{index.symbol} {strike:g}{suffix} {expiry.isoformat()}",
        underlying=index.symbol,
        underlying_price=index.price,
        strike=strike,
        expiry=expiry,
        type=option_type,
        current_price=round(premium, 2),
        estimated_target=round(premium * ESTIMATED_TARGET_MULT, 2),
        potential_return=POTENTIAL_RETURN,
        setups=tuple(setups),
        overall_score=overall,
        suggested_entry=round(premium * ENTRY_MULT, 2),
        stop_loss=round(premium * STOP_MULT, 2),
        target1=round(premium * TARGET1_MULT, 2),
        target2=round(premium * TARGET2_MULT, 2),
        risk_reward=LOTTO_RISK_REWARD,
        key_level=pivots.pivot,
        level_type=level_type,
        # Lotto plays assume the momentum regime below the flip
        gamma_exposure=GammaZone.NEGATIVE,
        thesis=thesis,
        confidence=confidence_label(overall, params),
    )


def generate_plays(
    index_data: Sequence[IndexData],
    trade_params_for: Callable[[str], TradeParams],
    expiry: date,
    params: Optional[LottoParams] = None
) -> list[LottoPlay]:
    """Bullish and bearish plays for each index, best score first."""
    params = params or LottoParams()
    plays = []

    for index in index_data:
        trade = trade_params_for(index.symbol)
        pivots = index.pivot_points

        is_bullish = (index.macd_signal is MacdSignal.BULLISH
                      or (40 < index.rsi < 60 and index.price > pivots.pivot)
                      or index.rsi < 35)
        is_bearish = (index.macd_signal is MacdSignal.BEARISH
                      or index.rsi > 60)

        if is_bullish:
            setups = bullish_setups(index)
            if setups:
                plays.append(build_play(index, OptionType.CALL, setups, trade, expiry, params))

        if is_bearish:
            setups = bearish_setups(index)
            if setups:
                plays.append(build_play(index, OptionType.PUT, setups, trade, expiry, params))

    # Stable sort keeps index order among equal scores
    return sorted(plays, key=lambda play: -play.overall_score)


class LottoScanner:
    """Fetches lotto index data concurrently and ranks plays."""

    def __init__(
        self,
        provider: MarketDataProvider,
        params: LottoParams,
        trade_params_for: Callable[[str], TradeParams],
        symbol_timeout: float = 10.0,
        tz=None
    ):
        self.provider = provider
        self.params = params
        self.trade_params_for = trade_params_for
        self.symbol_timeout = symbol_timeout
        self.tz = tz

    async def _fetch_index(self, symbol: str, today: date) -> IndexData:
        quote, daily_bars = await asyncio.gather(
            self.provider.fetch_quote(symbol),
            self.provider.fetch_daily_bars(symbol, self.params.history_days),
        )
        name = self.params.names.get(symbol, symbol)
        return build_index_data(symbol, name, quote, daily_bars, today, self.params.rsi_period, self.tz)

    async def scan(self, now: datetime) -> LottoScanResult:
        """
        Run one lotto scan.

        Raises:
            MarketDataUnavailableError: If no lotto symbol could be fetched
        """
        today = trading_date(now, self.tz)
        symbols = list(self.params.symbols)

        results = await asyncio.gather(
            *(asyncio.wait_for(self._fetch_index(symbol, today), self.symbol_timeout)
              for symbol in symbols),
            return_exceptions=True
        )

        index_data: list[IndexData] = []
        failed = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, IndexData):
                index_data.append(result)
                continue
            failed.append(symbol)
            if isinstance(result, (DataQualityError, RecoverableError, asyncio.TimeoutError)):
                logger.warning("Lotto index skipped", symbol=symbol,
                               error_type=type(result).__name__, error=str(result))
            else:
                logger.error("Unexpected error fetching lotto index", symbol=symbol,
                             error_type=type(result).__name__, error=str(result))

        if symbols and not index_data:
            raise MarketDataUnavailableError(
                "No lotto index data could be fetched",
                failed_symbols=failed
            )

        if self.params.derive_spx_from_spy and "SPX" not in symbols:
            spy = next((item for item in index_data if item.symbol == "SPY"), None)
            if spy is not None:
                index_data.insert(0, derive_spx(spy, self.params.names.get("SPX", "S&P 500 Index")))

        plays = generate_plays(index_data, self.trade_params_for, lotto_expiry(today), self.params)

        logger.info(
            "Lotto scan complete",
            indices=len(index_data),
            plays=len(plays),
            failed_symbols=failed
        )

        return LottoScanResult(
            timestamp=now,
            index_data=tuple(index_data),
            lotto_plays=tuple(plays),
        )
