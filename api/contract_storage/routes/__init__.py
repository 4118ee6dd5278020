"""API routes for the Contract Storage API."""

from .contract_data import router as contract_data_router

__all__ = ["contract_data_router"]
