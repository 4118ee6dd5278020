"""Contract storage API endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from stellar_sdk import StrKey

from ..config import Settings
from ..db.contract_data import ContractDataRepository, get_contract_data_repository
from ..errors.api_errors import ErrorResponse, InvalidParameterError
from ..models.contract_data import ContractDataPage, serialize_contract_data_results
from ..pagination import build_pagination_links, parse_request_params
from ..stellar.ledger import LatestLedgerService, get_ledger_service


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/{network}/contract/{contract_id}",
    tags=["Contract Data"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
        502: {"model": ErrorResponse, "description": "Bad Gateway"}
    }
)


def get_request_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the app was created with."""
    return request.app.state.settings


def validate_network(network: str, settings: Settings) -> str:
    if network not in settings.supported_networks:
        raise InvalidParameterError(
            f"Only {', '.join(settings.supported_networks)} is supported"
        )
    return network


def validate_contract_id(contract_id: str) -> str:
    contract_id = contract_id.strip()
    if not StrKey.is_valid_contract(contract_id):
        raise InvalidParameterError("Invalid Stellar contract ID")
    return contract_id


@router.get(
    "/storage",
    response_model=ContractDataPage,
    summary="List contract storage",
    description="List a contract's storage entries with cursor-based keyset pagination."
)
async def get_contract_storage(
    network: Annotated[str, Path(description="Stellar network name")],
    contract_id: Annotated[str, Path(description="Contract StrKey address")],
    repository: Annotated[ContractDataRepository, Depends(get_contract_data_repository)],
    ledger_service: Annotated[LatestLedgerService, Depends(get_ledger_service)],
    settings: Annotated[Settings, Depends(get_request_settings)],
    limit: Annotated[Optional[str], Query(description="Number of entries per page (1-200)")] = None,
    order: Annotated[Optional[str], Query(description="Sort order: asc or desc")] = None,
    sort_by: Annotated[Optional[str], Query(description="Sort field: durability, key_hash, ttl or updated_at")] = None,
    cursor: Annotated[Optional[str], Query(description="Cursor from a previous page's next or prev link")] = None
) -> ContractDataPage:
    """List storage entries of a contract, one page at a time.

    Entries are ordered by the requested field with ``key_hash`` breaking
    ties. The ``next`` link is present whenever the page is full; following
    it past the last entry returns an empty page. The ``prev`` link is
    present on pages reached through a cursor.
    """
    validate_network(network, settings)
    contract_id = validate_contract_id(contract_id)

    params = parse_request_params(
        network=network,
        contract_id=contract_id,
        limit=limit,
        order=order,
        sort_by=sort_by,
        cursor=cursor
    )

    latest_ledger_sequence = await ledger_service.get_latest_ledger_sequence()
    rows = await repository.fetch_page(params, latest_ledger_sequence)

    logger.info(
        f"Listed {len(rows)} storage entries for contract {contract_id} "
        f"(sort_by={params.sort_field.value}, order={params.sort_direction.value}, limit={params.limit})"
    )

    return ContractDataPage(
        links=build_pagination_links(params, rows, api_prefix=settings.api_prefix),
        results=serialize_contract_data_results(rows)
    )
