"""Pydantic models for contract data storage entries."""

import math
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, ConfigDict, model_serializer


class SortDirection(str, Enum):
    """Requested result order."""

    ASC = "asc"
    DESC = "desc"

    def inverted(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class SortField(str, Enum):
    """Public sort fields accepted by the storage endpoint."""

    DURABILITY = "durability"
    KEY_HASH = "key_hash"
    TTL = "ttl"
    UPDATED_AT = "updated_at"


class SortColumn(BaseModel):
    """Storage column backing a public sort field."""

    model_config = ConfigDict(frozen=True)

    name: str
    nullable: bool = False
    value_type: str = Field(description="JSON type of cursor sort values: 'number' or 'string'")


SORT_COLUMNS: Dict[SortField, SortColumn] = {
    SortField.DURABILITY: SortColumn(name="durability", value_type="string"),
    SortField.KEY_HASH: SortColumn(name="key_hash", value_type="string"),
    SortField.TTL: SortColumn(name="live_until_ledger_sequence", nullable=True, value_type="number"),
    SortField.UPDATED_AT: SortColumn(name="closed_at", value_type="number"),
}

DEFAULT_SORT_FIELD = SortField.KEY_HASH
DEFAULT_SORT_DIRECTION = SortDirection.DESC


class ContractDataRow(BaseModel):
    """Row of the contract_data relation as returned by the page query."""

    contract_id: str
    key_hash: str
    durability: str
    key_symbol: Optional[str] = None
    key: Optional[bytes] = None
    val: Optional[bytes] = None
    closed_at: datetime
    live_until_ledger_sequence: Optional[int] = None
    expired: Optional[bool] = None

    def to_dto(self) -> "ContractDataDTO":
        """Convert database row to the public representation."""
        return ContractDataDTO(
            durability=self.durability,
            key_hash=self.key_hash,
            key=decode_binary(self.key),
            value=decode_binary(self.val),
            ttl=self.live_until_ledger_sequence,
            updated=unix_seconds(self.closed_at),
            expired=bool(self.expired)
        )


class ContractDataDTO(BaseModel):
    """Public representation of a storage entry."""

    durability: str = Field(description="Entry durability: persistent, instance or temporary")
    key_hash: str = Field(description="Hex digest identifying the entry within its contract")
    key: Optional[str] = Field(default=None, description="Entry key payload as text")
    value: Optional[str] = Field(default=None, description="Entry value payload as text")
    ttl: Optional[int] = Field(default=None, description="Ledger sequence at which the entry's lease expires")
    updated: int = Field(description="Unix timestamp of the ledger close that produced this snapshot")
    expired: bool = Field(default=False, description="Whether the lease ended before the latest ledger")


class Link(BaseModel):
    """Single hypermedia link."""

    href: str


class PaginationLinks(BaseModel):
    """Navigation links for a storage page."""

    model_config = ConfigDict(populate_by_name=True)

    self_: Link = Field(alias="self")
    next: Optional[Link] = None
    prev: Optional[Link] = None

    @model_serializer(mode="wrap")
    def _omit_absent_links(self, handler):
        return {rel: link for rel, link in handler(self).items() if link is not None}


class ContractDataPage(BaseModel):
    """Response model for the storage endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    links: PaginationLinks = Field(alias="_links")
    results: List[ContractDataDTO]


def decode_binary(payload: Optional[bytes]) -> Optional[str]:
    """Best-effort text rendering of a binary payload."""
    if payload is None:
        return None
    return bytes(payload).decode("utf-8", errors="replace")


def unix_seconds(value: datetime) -> int:
    """Whole Unix seconds for a timestamp, flooring sub-second precision."""
    return math.floor(value.timestamp())


def serialize_contract_data_results(rows: List[ContractDataRow]) -> List[ContractDataDTO]:
    """Map fetched rows to their public representation, preserving order."""
    return [row.to_dto() for row in rows]
