"""
Restricted Instrument List

ISINs the portfolio must never hold, loaded from a CSV file whose second
column carries the ISIN (first row is a header). Used by universe selection
to drop restricted names before the coarse cut.
"""

import io
from pathlib import Path
from typing import Iterable, Optional

import polars as pl
from loguru import logger

logger = logger.bind(component="RestrictedList")


class RestrictedListError(Exception):
    """Raised when a restricted list file can't be read and strict loading was asked for."""


def normalize_isin(value: Optional[str]) -> Optional[str]:
    """Trim, strip quotes and upper-case an ISIN. Blank values normalize to None."""
    if value is None:
        return None
    isin = value.strip().strip('"').strip().upper()
    return isin or None


class RestrictedList:
    """
    Set of normalized restricted ISINs.

    Example:
        >>> restricted = load_restricted_list("config/restricted.csv")
        >>> restricted.contains(" us0378331005 ")
        True
    """

    def __init__(self, isins: Iterable[str] = ()):
        self.isins: frozenset[str] = frozenset(
            isin for isin in (normalize_isin(v) for v in isins) if isin
        )

    def contains(self, isin: Optional[str]) -> bool:
        """True if `isin` (normalized) is restricted. Missing ISINs are never restricted."""
        normalized = normalize_isin(isin)
        return normalized is not None and normalized in self.isins

    def __contains__(self, isin: object) -> bool:
        return isinstance(isin, str) and self.contains(isin)

    def __len__(self) -> int:
        return len(self.isins)

    def __repr__(self) -> str:
        return f"RestrictedList({len(self.isins)} ISINs)"

    @classmethod
    def from_csv_text(cls, text: str) -> "RestrictedList":
        """
        Parse CSV content; the header row is skipped and column two holds the ISIN.

        Raises:
            RestrictedListError: If the content can't be parsed as CSV
        """
        if not text.strip():
            return cls()

        try:
            df = pl.read_csv(
                io.StringIO(text),
                has_header=True,
                infer_schema_length=0,
                truncate_ragged_lines=True,
            )
        except Exception as e:
            raise RestrictedListError(f"Could not parse restricted list: {e}") from e

        if df.width < 2:
            logger.warning("Restricted list has fewer than two columns, no ISINs loaded")
            return cls()

        return cls(df.get_column(df.columns[1]).drop_nulls().to_list())


def load_restricted_list(path: str | Path, strict: bool = False) -> RestrictedList:
    """
    Load a restricted list from a CSV file.

    Args:
        path: CSV file path
        strict: Raise instead of falling back to an empty list

    Returns:
        RestrictedList (empty if the file is missing or unreadable and not strict)

    Raises:
        RestrictedListError: If strict and the file is missing or unreadable
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        restricted = RestrictedList.from_csv_text(text)
    except (OSError, RestrictedListError) as e:
        if strict:
            raise RestrictedListError(f"Failed to load restricted list {path}: {e}") from e
        logger.error(f"Error loading restricted ISINs from {path}: {e}")
        return RestrictedList()

    logger.info(f"Loaded {len(restricted)} restricted ISINs from {path}")
    if len(restricted) > 0:
        sample = ", ".join(f'"{isin}"' for isin in sorted(restricted.isins)[:5])
        logger.debug(f"Sample ISINs: {sample}")
    return restricted
