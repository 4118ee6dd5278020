"""Database operations for contract data."""

import logging
from typing import List

import asyncpg
from asyncpg import Pool
from fastapi import Depends

from ..errors.api_errors import StorageError
from ..models.contract_data import ContractDataRow
from ..pagination.params import RequestParams
from ..pagination.query_builder import build_contract_data_query
from .connection import get_db_pool


logger = logging.getLogger(__name__)


class ContractDataRepository:
    """Read access to the contract_data relation."""
    
    def __init__(self, pool: Pool):
        self.pool = pool
    
    async def fetch_page(
        self,
        params: RequestParams,
        latest_ledger_sequence: int
    ) -> List[ContractDataRow]:
        """Fetch one page of contract data in the requested order.
        
        Args:
            params: Validated request parameters, including any decoded cursor
            latest_ledger_sequence: Ledger used to derive each row's expired flag
            
        Returns:
            At most ``params.limit`` rows; fewer means the walk reached the end
            
        Raises:
            StorageError: If the query fails
        """
        page_query = build_contract_data_query(params, latest_ledger_sequence)
        
        try:
            async with self.pool.acquire() as conn:
                records = await conn.fetch(page_query.query, *page_query.params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(
                f"Database error listing contract data for {params.contract_id}: {e}",
                extra={"query": page_query.query}
            )
            raise StorageError() from e
        
        rows = [ContractDataRow.model_validate(dict(record)) for record in records]
        if page_query.reverse_results:
            rows.reverse()
        
        logger.debug(
            f"Fetched {len(rows)} contract data rows for {params.contract_id} "
            f"sorted by {params.sort_field.value} {params.sort_direction.value}"
        )
        return rows


def get_contract_data_repository(pool: Pool = Depends(get_db_pool)) -> ContractDataRepository:
    """FastAPI dependency providing the contract data repository."""
    return ContractDataRepository(pool)
