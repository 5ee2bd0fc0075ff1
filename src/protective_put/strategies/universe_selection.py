"""
Universe Selection

Picks the equities the hedged portfolio trades from a fundamentals table.

Selection:
1. Keep names with fundamental data and price above the minimum
2. Coarse: walk names by dollar volume (descending), collecting
   non-restricted names until num_coarse are found
3. Fine: top num_fine of the coarse set by market cap (descending)

Names with no ISIN are treated as not restricted.
"""

from dataclasses import dataclass
from typing import List, Optional

import polars as pl
from loguru import logger

from protective_put.config.hedge_config import UniverseConfig
from protective_put.strategies.restricted_list import RestrictedList, load_restricted_list

logger = logger.bind(component="UniverseSelector")

REQUIRED_COLUMNS = (
    "symbol",
    "isin",
    "has_fundamental_data",
    "price",
    "dollar_volume",
    "market_cap",
)


@dataclass(slots=True)
class SelectionStats:
    """Counts from the last selection pass."""

    total: int = 0
    processed: int = 0
    restricted: int = 0
    selected: int = 0

    def __repr__(self) -> str:
        return (
            f"SelectionStats(total={self.total}, processed={self.processed}, "
            f"restricted={self.restricted}, selected={self.selected})"
        )


class UniverseSelector:
    """
    Fundamental universe selection with a restricted instrument list.

    Attributes:
        config: Universe configuration
        restricted: Restricted ISINs (empty if None)
        last_stats: Counts from the most recent `select` call
    """

    def __init__(self, config: Optional[UniverseConfig] = None, restricted: Optional[RestrictedList] = None):
        self.config = config or UniverseConfig()
        self.restricted = restricted or RestrictedList()
        self.last_stats = SelectionStats()

    @classmethod
    def from_config(cls, config: UniverseConfig) -> "UniverseSelector":
        """Build a selector, loading the restricted list from `config.restricted_list_path` if set."""
        restricted = None
        if config.restricted_list_path:
            restricted = load_restricted_list(config.restricted_list_path)
        return cls(config, restricted)

    def select(self, fundamentals: pl.DataFrame) -> List[str]:
        """
        Select symbols from a fundamentals table.

        Args:
            fundamentals: One row per equity with REQUIRED_COLUMNS

        Returns:
            Selected symbols, largest market cap first

        Raises:
            ValueError: If a required column is missing
        """
        missing = [c for c in REQUIRED_COLUMNS if c not in fundamentals.columns]
        if missing:
            raise ValueError(f"Fundamentals missing columns: {missing}")

        total = fundamentals.height
        restricted_isins = pl.Series("restricted_isins", sorted(self.restricted.isins), dtype=pl.String)

        ranked = (
            fundamentals
            .filter(pl.col("has_fundamental_data") & (pl.col("price") > self.config.min_price))
            .sort("dollar_volume", descending=True, maintain_order=True)
            .with_columns(
                pl.col("isin")
                .cast(pl.String)
                .str.strip_chars()
                .str.to_uppercase()
                .is_in(restricted_isins)
                .fill_null(False)
                .alias("is_restricted")
            )
            .with_columns(
                (~pl.col("is_restricted")).cast(pl.Int64).cum_sum().alias("kept_through")
            )
        )

        # A row is visited while fewer than num_coarse names have been kept before it
        kept_before = pl.col("kept_through") - (~pl.col("is_restricted")).cast(pl.Int64)
        processed = ranked.filter(kept_before < self.config.num_coarse)
        coarse = processed.filter(~pl.col("is_restricted"))
        restricted_count = processed.height - coarse.height

        if restricted_count:
            for symbol in processed.filter(pl.col("is_restricted")).get_column("symbol").head(5):
                logger.debug(f"Filtered out restricted symbol {symbol}")

        if coarse.height < self.config.num_coarse and restricted_count > 0:
            logger.warning(
                f"Only found {coarse.height} non-restricted stocks out of desired "
                f"{self.config.num_coarse}. Filtered out {restricted_count} restricted stocks."
            )

        fine = coarse.sort("market_cap", descending=True, maintain_order=True).head(self.config.num_fine)
        symbols = fine.get_column("symbol").to_list()

        self.last_stats = SelectionStats(
            total=total,
            processed=processed.height,
            restricted=restricted_count,
            selected=coarse.height,
        )
        logger.info(f"Universe selection stats: {self.last_stats!r}, fine={len(symbols)}")
        return symbols
