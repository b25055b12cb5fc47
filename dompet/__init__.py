"""Dompet: ledger and budget analytics for a shared two-person workspace."""

__version__ = "1.0.0"
