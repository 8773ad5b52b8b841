"""CSV import of portfolio positions.

Expected layout: one row per position (lot), a header row, and at least the
``symbol, quantity, average_cost, current_price`` columns. Security metadata
(``name, sector, industry, exchange, currency, isin``), ``purchase_date`` and
fundamentals columns (``market_cap, revenue, ..., debt_to_equity``) are
optional; empty cells are treated as missing.

Example:
    symbol,quantity,average_cost,current_price,sector,dividend_per_share
    AAPL,10,100,150,Technology,0.96
    KO,20,55,60,Consumer Staples,1.94
"""

import io
import logging
from typing import Any

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from lookthrough.core.constants import CsvImportConstants
from lookthrough.core.exceptions import ValidationError
from lookthrough.schemas.portfolio import FundamentalDataCreate, PositionCreate, SecurityCreate

logger = logging.getLogger(__name__)


def read_positions_frame(csv_text: str) -> pd.DataFrame:
    """Parse CSV text into a frame of strings with normalized column names.

    Missing cells become None.

    Raises:
        ValidationError: If the text is not parseable or lacks required columns
    """
    try:
        frame = pd.read_csv(io.StringIO(csv_text), dtype=str, skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise ValidationError(f"Could not parse CSV: {e}") from e

    frame.columns = [str(column).strip().lower() for column in frame.columns]
    missing = [c for c in CsvImportConstants.REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValidationError(f"CSV is missing required columns: {', '.join(missing)}")

    return frame.astype(object).where(frame.notna(), None)


def _present(row: dict[str, Any], columns: tuple[str, ...]) -> dict[str, Any]:
    return {column: row[column] for column in columns if row.get(column) is not None}


def row_to_position(row: dict[str, Any]) -> PositionCreate:
    """Build a validated position (with its security and fundamentals) from one CSV row."""
    fundamentals = _present(row, CsvImportConstants.FUNDAMENTAL_COLUMNS)
    symbol = row["symbol"]
    security = SecurityCreate(
        symbol=symbol if symbol is not None else "",
        **_present(row, CsvImportConstants.SECURITY_COLUMNS),
        fundamentals=FundamentalDataCreate(**fundamentals) if fundamentals else None,
    )
    return PositionCreate(
        symbol=security.symbol,
        quantity=row["quantity"],
        average_cost=row["average_cost"],
        current_price=row["current_price"],
        purchase_date=row.get("purchase_date"),
        security=security,
    )


def parse_positions_csv(csv_text: str) -> list[PositionCreate]:
    """Parse a positions CSV document.

    Args:
        csv_text: The CSV document

    Returns:
        One PositionCreate per data row, in file order

    Raises:
        ValidationError: If the CSV is malformed or any row is invalid; the
            message names the offending line
    """
    frame = read_positions_frame(csv_text)

    positions = []
    # Line 1 is the header
    for line_number, row in enumerate(frame.to_dict(orient="records"), start=2):
        try:
            positions.append(row_to_position(row))
        except PydanticValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"])
            raise ValidationError(f"Line {line_number}: {location}: {error['msg']}") from e

    logger.debug(f"Parsed {len(positions)} positions from CSV")
    return positions
