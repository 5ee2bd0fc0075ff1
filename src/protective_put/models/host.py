"""
Host Runtime Protocol

The hedge engine never talks to a broker. Everything it needs beyond the
portfolio snapshot comes through this protocol, implemented by whatever runtime
schedules the engine (a live trading loop, a backtester, the replay host).
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

from protective_put.models.market_models import OptionContract


@runtime_checkable
class HedgeHost(Protocol):
    """
    Host collaborator protocol.

    Uses Protocol for duck-typing (flexible, no inheritance required).

    Methods:
        option_chain: Current option catalog for an underlying (None if unavailable)
        request_option_data: Ask the host to start listing options for an underlying.
            Fire-and-forget; the chain is expected on a later evaluation.
        holding_quantity: Currently held quantity of a contract, or None if the
            host no longer tracks the contract at all
    """

    def option_chain(self, underlying: str) -> Optional[Sequence[OptionContract]]:
        ...

    def request_option_data(self, underlying: str) -> None:
        ...

    def holding_quantity(self, contract_symbol: str) -> Optional[int]:
        ...
