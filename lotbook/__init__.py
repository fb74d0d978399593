"""lotbook: portfolio holdings, tax lots, realized gains and wash sales."""

__version__ = "0.1.0"
