"""Load B3 trade history files into an SQLite database and query per-ticker summaries."""

__version__ = "0.1.0"