"""
XLSForm High-Frequency Check Generator

Builds a validated Instrument Model from an XLSForm survey definition
and renders it into a data-quality check script.

ARCHITECTURAL GUARANTEE:
------------------------
The instrument model contains ZERO knowledge of:
    - Spreadsheet formats
    - Stata syntax
    - File locations

Readers feed raw rows in, backends consume the finished model.
The model itself is immutable once built.
"""

__version__ = "0.1.0"
