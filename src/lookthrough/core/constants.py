"""Application-wide constants for portfolio analytics.

Centralizes the reserved names and scale factors used by the look-through
calculators so the engine, the API layer and the tests agree on them.
"""


class AnalyticsConstants:
    """Constants shared by the look-through calculators."""

    # Reserved sector buckets
    # Positions whose security has no (or a blank) sector are grouped here
    UNCLASSIFIED_SECTOR = "Unclassified"
    # Cash balance is reported as its own bucket when it is positive
    CASH_SECTOR = "Cash"

    # Ratios are reported in percent (0.5 -> 50.0)
    PERCENT_SCALE = 100.0

    # Used to derive the monthly dividend estimate from annual income
    MONTHS_PER_YEAR = 12

    # Default size of the top contributor/detractor lists
    DEFAULT_TOP_N = 5


class CsvImportConstants:
    """Column names recognized by the portfolio CSV importer."""

    REQUIRED_COLUMNS = ("symbol", "quantity", "average_cost", "current_price")

    SECURITY_COLUMNS = ("name", "isin", "sector", "industry", "exchange", "currency")

    FUNDAMENTAL_COLUMNS = (
        "market_cap",
        "revenue",
        "free_cash_flow",
        "revenue_growth",
        "earnings_growth",
        "dividend_yield",
        "dividend_per_share",
        "pe_ratio",
        "pb_ratio",
        "return_on_equity",
        "debt_to_equity",
    )
