"""opsreport: restaurant report normalization and KPI derivation."""

__version__ = "0.3.0"
