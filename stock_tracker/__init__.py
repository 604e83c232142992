"""Stock tracker REST backend: validated data access for stocks, transactions, short data and diary entries."""

__version__ = "0.1.0"
