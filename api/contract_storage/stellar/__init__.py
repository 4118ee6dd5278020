"""Stellar network collaborators."""

from .ledger import LatestLedgerService, get_ledger_service

__all__ = [
    "LatestLedgerService",
    "get_ledger_service"
]
