"""
Hedge Ledger for tracking which put protects which underlying.

The ledger is the authoritative record the hedge engine reconciles against:
one entry per hedged underlying, mapping it to the option contract currently
held as protection. It never expires entries on its own; every insertion and
removal is driven by the engine's reconciliation logic.

In-memory only. Engine state is not persisted across restarts.
"""

from typing import Iterator, Optional

from loguru import logger


class HedgeLedger:
    """
    Mapping of underlying symbol -> held hedge contract symbol.

    At most one hedge contract per underlying at any time; `set` replaces.

    Example:
        >>> ledger = HedgeLedger()
        >>> ledger.set("AAPL", "AAPL 240315P00090000")
        >>> ledger.get("AAPL")
        'AAPL 240315P00090000'
        >>> ledger.clear_all()
        1
    """

    def __init__(self):
        self._hedges: dict[str, str] = {}
        self.logger = logger.bind(component="HedgeLedger")

    def get(self, underlying: str) -> Optional[str]:
        """Return the contract held against `underlying`, or None."""
        return self._hedges.get(underlying)

    def set(self, underlying: str, contract_symbol: str) -> None:
        """
        Record `contract_symbol` as the hedge for `underlying`.

        Replaces any previous entry for the underlying.
        """
        previous = self._hedges.get(underlying)
        self._hedges[underlying] = contract_symbol

        if previous is not None and previous != contract_symbol:
            self.logger.debug(f"Replaced hedge for {underlying}: {previous} → {contract_symbol}")
        else:
            self.logger.debug(f"Recorded hedge for {underlying}: {contract_symbol}")

    def clear(self, underlying: str) -> Optional[str]:
        """
        Remove the entry for `underlying`.

        Returns:
            The removed contract symbol, or None if there was no entry
        """
        removed = self._hedges.pop(underlying, None)
        if removed is not None:
            self.logger.debug(f"Cleared hedge for {underlying}: {removed}")
        return removed

    def clear_all(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed
        """
        count = len(self._hedges)
        self._hedges.clear()
        if count:
            self.logger.debug(f"Cleared {count} hedges")
        return count

    def items(self) -> list[tuple[str, str]]:
        """(underlying, contract_symbol) pairs in insertion order."""
        return list(self._hedges.items())

    def underlyings(self) -> list[str]:
        return list(self._hedges)

    def to_dict(self) -> dict[str, str]:
        """Copy of the ledger contents."""
        return dict(self._hedges)

    def __contains__(self, underlying: object) -> bool:
        return underlying in self._hedges

    def __len__(self) -> int:
        return len(self._hedges)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._hedges))

    def __repr__(self) -> str:
        return f"HedgeLedger(hedges={len(self._hedges)})"
