"""
Hedge Decision Engine

This module provides the protective put decision engine. Once per scheduling
tick the host hands it a portfolio snapshot; the engine decides which put to
hold against which equity position and returns the target adjustments needed
to get there.

Key patterns:
- Explicit state: all cross-call state lives in EngineState
- Protocol-based host: option chains, subscriptions and holdings come through HedgeHost
- Never raises to the host: data problems skip one underlying for one round
- Side channel: loguru lines plus structured HedgeEvents for optional observers

Per evaluation:
1. Update drawdown (high-water mark always tracks, even on throttled calls)
2. Throttle gate (one full evaluation per interval)
3. Drawdown above threshold → unwind every hedge, clear the ledger
4. Otherwise, per equity position: subscribe → chain → select put →
   size → reconcile against the ledger
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable

from loguru import logger

from protective_put.config.hedge_config import HedgeConfig
from protective_put.decisions.models import (
    AdjustmentReason,
    HedgeEvent,
    HedgeEventType,
    TargetAdjustment,
)
from protective_put.models.host import HedgeHost
from protective_put.models.internal_state import EngineState
from protective_put.models.market_models import (
    EquityPosition,
    OptionContract,
    PortfolioSnapshot,
    to_decimal,
)
from protective_put.strategy_builder.contract_filter import ContractFilter

logger = logger.bind(component="HedgeDecisionEngine")

EventSink = Callable[[HedgeEvent], None]


@runtime_checkable
class HedgeObserver(Protocol):
    """
    Observer protocol for hedge events.

    Observers see every HedgeEvent an evaluation produces. They carry no
    decision logic; an observer that raises is logged and ignored.
    """

    def on_event(self, event: HedgeEvent) -> None:
        ...


def hedge_scale(drawdown: Decimal, drawdown_cap) -> Decimal:
    """
    Linear hedge scale-up with drawdown severity.

    Returns:
        min(1, |drawdown| / drawdown_cap)
    """
    return min(Decimal("1"), abs(drawdown) / to_decimal(drawdown_cap))


def target_hedge_quantity(position_quantity: int, hedge_ratio, scale: Decimal) -> int:
    """
    Contracts to hold against a share position.

    Fractional counts are truncated toward zero, so a small position or a mild
    drawdown can size to 0 contracts.
    """
    return int(Decimal(abs(position_quantity)) * to_decimal(hedge_ratio) * scale)


def _safe_holding(host: HedgeHost, contract_symbol: str) -> Optional[int]:
    """Held quantity of a contract; None if the host doesn't track it or fails."""
    try:
        return host.holding_quantity(contract_symbol)
    except Exception as e:
        logger.error(f"Failed to read holding for {contract_symbol}: {e}")
        return None


def _safe_chain(host: HedgeHost, underlying: str) -> Optional[Sequence[OptionContract]]:
    try:
        return host.option_chain(underlying)
    except Exception as e:
        logger.error(f"Failed to read option chain for {underlying}: {e}")
        return None


def _guarded_sink(emit: Optional[EventSink]) -> EventSink:
    """Wrap an event sink so a failing sink is logged and never interrupts evaluation."""
    if emit is None:
        return lambda event: None

    def guarded(event: HedgeEvent) -> None:
        try:
            emit(event)
        except Exception as e:
            logger.error(f"Event sink failed on {event.event_type.value}: {e}")

    return guarded


def evaluate(
    state: EngineState,
    snapshot: PortfolioSnapshot,
    host: HedgeHost,
    config: HedgeConfig,
    emit: Optional[EventSink] = None,
    contract_filter: Optional[ContractFilter] = None,
) -> List[TargetAdjustment]:
    """
    Run one hedge evaluation.

    Args:
        state: Engine state, mutated in place
        snapshot: Portfolio snapshot for this tick
        host: Host collaborator (option chains, subscriptions, holdings)
        config: Hedge configuration
        emit: Optional sink for structured events
        contract_filter: Filter bound to `config` (built on demand if None)

    Returns:
        Ordered target adjustments (possibly empty)
    """
    emit = _guarded_sink(emit)
    contract_filter = contract_filter or ContractFilter(config)
    now = snapshot.timestamp
    adjustments: List[TargetAdjustment] = []

    # 1. High-water mark and drawdown
    old_high = state.drawdown.high_water_mark
    drawdown = state.drawdown.update(snapshot.total_value)
    if state.drawdown.high_water_mark != old_high:
        emit(HedgeEvent(
            event_type=HedgeEventType.HIGH_WATER_MARK,
            timestamp=now,
            drawdown=drawdown,
            metadata={"old": str(old_high), "new": str(state.drawdown.high_water_mark)},
        ))

    logger.info(
        f"Portfolio value: {snapshot.total_value:,.2f}, "
        f"High water mark: {state.drawdown.high_water_mark:,.2f}, "
        f"Current drawdown: {drawdown:.2%}"
    )

    # 2. Throttle
    if not state.throttle.should_run(now):
        emit(HedgeEvent(
            event_type=HedgeEventType.EVALUATION_THROTTLED,
            timestamp=now,
            drawdown=drawdown,
            metadata={"last_evaluation": state.throttle.last_evaluation.isoformat()},
        ))
        return adjustments

    # 3. Global hedge switch
    threshold = to_decimal(config.drawdown_threshold)
    need_hedge = drawdown <= threshold
    logger.info(f"Need hedge? {need_hedge} (Threshold: {threshold:.2%})")

    # 4. Hedge off: unwind everything
    if not need_hedge:
        if len(state.ledger) == 0:
            logger.debug("No existing hedges to clear")
            return adjustments

        logger.info(f"Drawdown not severe enough, clearing {len(state.ledger)} hedges")
        for underlying, contract_symbol in state.ledger.items():
            held = _safe_holding(host, contract_symbol)
            if not held:
                continue
            logger.info(f"Removing hedge for {underlying}: {contract_symbol}")
            adjustments.append(TargetAdjustment(
                symbol=contract_symbol,
                quantity=0,
                underlying=underlying,
                reason=AdjustmentReason.HEDGE_OFF,
            ))
            emit(HedgeEvent(
                event_type=HedgeEventType.HEDGE_CLOSED,
                timestamp=now,
                underlying=underlying,
                contract=contract_symbol,
                quantity=held,
                drawdown=drawdown,
                metadata={"reason": AdjustmentReason.HEDGE_OFF.value},
            ))

        cleared = state.ledger.clear_all()
        emit(HedgeEvent(
            event_type=HedgeEventType.HEDGE_OFF,
            timestamp=now,
            drawdown=drawdown,
            metadata={"cleared": cleared, "closed": len(adjustments)},
        ))
        return adjustments

    # 5. Per-position hedging
    scale = hedge_scale(drawdown, config.hedge_scale_drawdown_cap)
    positions = snapshot.hedgeable_positions()
    logger.info(f"Processing {len(positions)} equity positions (hedge scale {scale:.2f})")

    for position in positions:
        _hedge_position(
            position, state, host, config, contract_filter, drawdown, scale, now,
            adjustments, emit,
        )

    logger.info(
        f"Processed {len(positions)} equity positions, "
        f"returning {len(adjustments)} target adjustments"
    )
    emit(HedgeEvent(
        event_type=HedgeEventType.EVALUATION_COMPLETE,
        timestamp=now,
        drawdown=drawdown,
        metadata={"positions": len(positions), "adjustments": len(adjustments)},
    ))
    return adjustments


def _hedge_position(
    position: EquityPosition,
    state: EngineState,
    host: HedgeHost,
    config: HedgeConfig,
    contract_filter: ContractFilter,
    drawdown: Decimal,
    scale: Decimal,
    now: datetime,
    adjustments: List[TargetAdjustment],
    emit: EventSink,
) -> None:
    """Reconcile the hedge of one equity position, appending to `adjustments`."""
    underlying = position.symbol

    # a. Option data must be requested once before a chain can be expected
    if underlying not in state.subscribed_underlyings:
        try:
            host.request_option_data(underlying)
        except Exception as e:
            logger.error(f"Failed to request option data for {underlying}: {e}")
            return
        state.subscribed_underlyings.add(underlying)
        logger.info(f"Requested option data for {underlying}")
        emit(HedgeEvent(
            event_type=HedgeEventType.SUBSCRIPTION_REQUESTED,
            timestamp=now,
            underlying=underlying,
            drawdown=drawdown,
        ))
        return

    # b. Chain
    chain = _safe_chain(host, underlying)
    if not chain:
        logger.info(f"No option chain available for {underlying}")
        emit(HedgeEvent(
            event_type=HedgeEventType.CHAIN_UNAVAILABLE,
            timestamp=now,
            underlying=underlying,
            drawdown=drawdown,
        ))
        return

    # c-d. Select; no candidate leaves any existing hedge alone
    selected = contract_filter.select_for(chain, position.price, now)
    if selected is None:
        logger.info(f"No suitable put for {underlying} among {len(chain)} contracts")
        emit(HedgeEvent(
            event_type=HedgeEventType.NO_CANDIDATE,
            timestamp=now,
            underlying=underlying,
            drawdown=drawdown,
            metadata={"chain_size": len(chain)},
        ))
        return

    # e. Size
    target_quantity = target_hedge_quantity(position.quantity, config.hedge_ratio, scale)
    logger.debug(
        f"{underlying}: target put quantity {target_quantity} "
        f"({config.hedge_ratio:.0%} of {abs(position.quantity)} × scale {scale:.2f})"
    )

    # f. Reconcile against the ledger
    existing = state.ledger.get(underlying)
    if existing is not None:
        held = _safe_holding(host, existing)

        if held is None:
            logger.warning(f"Existing hedge {existing} for {underlying} no longer available")
            state.ledger.clear(underlying)
            emit(HedgeEvent(
                event_type=HedgeEventType.CONTRACT_UNAVAILABLE,
                timestamp=now,
                underlying=underlying,
                contract=existing,
                drawdown=drawdown,
            ))
            return

        if abs(held - target_quantity) <= config.optimal_quantity_tolerance:
            logger.info(
                f"Existing hedge for {underlying} is already optimal "
                f"({existing}, quantity {held})"
            )
            emit(HedgeEvent(
                event_type=HedgeEventType.HEDGE_UNCHANGED,
                timestamp=now,
                underlying=underlying,
                contract=existing,
                quantity=held,
                drawdown=drawdown,
            ))
            return

        # Close first; when the selection is the same contract the open below
        # re-targets it, and the host applies adjustments in order
        logger.info(f"Closing existing hedge for {underlying}: {existing}")
        adjustments.append(TargetAdjustment(
            symbol=existing,
            quantity=0,
            underlying=underlying,
            reason=AdjustmentReason.RESIZE,
        ))
        emit(HedgeEvent(
            event_type=HedgeEventType.HEDGE_CLOSED,
            timestamp=now,
            underlying=underlying,
            contract=existing,
            quantity=held,
            drawdown=drawdown,
            metadata={"reason": AdjustmentReason.RESIZE.value},
        ))
        state.ledger.clear(underlying)

    # g. Open
    if target_quantity <= 0:
        logger.info(f"No puts added for {underlying} (quantity would be 0)")
        emit(HedgeEvent(
            event_type=HedgeEventType.ZERO_QUANTITY,
            timestamp=now,
            underlying=underlying,
            contract=selected.symbol,
            quantity=0,
            drawdown=drawdown,
        ))
        return

    state.ledger.set(underlying, selected.symbol)
    adjustments.append(TargetAdjustment(
        symbol=selected.symbol,
        quantity=target_quantity,
        underlying=underlying,
        reason=AdjustmentReason.OPEN,
    ))
    logger.info(
        f"Added protective put for {underlying}: {target_quantity} contracts of "
        f"{selected.symbol}, strike={selected.strike}, expiry={selected.expiry:%Y-%m-%d}, "
        f"drawdown={drawdown:.2%}"
    )
    emit(HedgeEvent(
        event_type=HedgeEventType.HEDGE_OPENED,
        timestamp=now,
        underlying=underlying,
        contract=selected.symbol,
        quantity=target_quantity,
        drawdown=drawdown,
        metadata={"strike": str(selected.strike), "expiry": selected.expiry.isoformat()},
    ))


class HedgeDecisionEngine:
    """
    Long-lived protective put engine.

    Owns one EngineState and a ContractFilter bound to its config, and fans
    structured events out to registered observers.

    **Stats Tracking:**
    - Counts every event type seen across evaluations
    - Useful for monitoring how often hedges open, close, or get skipped

    Attributes:
        config: Hedge configuration (fixed for the engine's lifetime)
        state: Engine state carried between evaluations
        observers: Registered HedgeObservers

    Example:
        ```python
        engine = HedgeDecisionEngine(HedgeConfig())

        adjustments = engine.evaluate(snapshot, host)
        for adjustment in adjustments:
            host_place_target(adjustment.symbol, adjustment.quantity)
        ```
    """

    def __init__(
        self,
        config: Optional[HedgeConfig] = None,
        state: Optional[EngineState] = None,
        observers: Optional[List[HedgeObserver]] = None,
    ):
        self.config = config or HedgeConfig()
        self.state = state or EngineState.create(self.config.minimum_evaluation_interval)
        self.contract_filter = ContractFilter(self.config)
        self.observers: List[HedgeObserver] = list(observers or [])
        self._stats: dict[str, int] = {}

        logger.info(f"HedgeDecisionEngine initialized with parameters: {self.config!r}")

    def add_observer(self, observer: HedgeObserver) -> None:
        self.observers.append(observer)

    def evaluate(self, snapshot: PortfolioSnapshot, host: HedgeHost) -> List[TargetAdjustment]:
        """
        Evaluate hedges for one scheduling tick.

        Args:
            snapshot: Portfolio snapshot
            host: Host collaborator

        Returns:
            Ordered target adjustments (possibly empty)
        """
        logger.debug(f"Evaluate called at {snapshot.timestamp:%Y-%m-%d %H:%M:%S}")
        return evaluate(
            self.state,
            snapshot,
            host,
            self.config,
            emit=self._emit,
            contract_filter=self.contract_filter,
        )

    def _emit(self, event: HedgeEvent) -> None:
        self._stats[event.event_type.value] = self._stats.get(event.event_type.value, 0) + 1

        for observer in self.observers:
            try:
                observer.on_event(event)
            except Exception as e:
                # Observers never affect decisions
                logger.error(f"Observer {type(observer).__name__} failed on {event.event_type.value}: {e}")

    def get_stats(self) -> dict[str, int]:
        """Event counts by event type."""
        return self._stats.copy()

    def reset_stats(self) -> None:
        self._stats.clear()

    @property
    def hedges(self) -> dict[str, str]:
        """Current ledger contents (underlying -> contract)."""
        return self.state.ledger.to_dict()

    def __repr__(self) -> str:
        return f"HedgeDecisionEngine({self.state!r})"
