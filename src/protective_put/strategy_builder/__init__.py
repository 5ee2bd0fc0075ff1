"""
Strategy Builder Package

Protective put contract selection.
"""

from protective_put.strategy_builder.contract_filter import (
    ContractFilter,
    filter_candidates,
    is_liquid,
    select_put_contract,
)

__all__ = [
    "ContractFilter",
    "filter_candidates",
    "is_liquid",
    "select_put_contract",
]
