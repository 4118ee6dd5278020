"""SQLAlchemy declaration of the contract_data relation.

The table is populated by the ingestion pipeline; this service only reads it.
The declaration documents column types and the indexes the page queries rely
on, and renders DDL for test databases.
"""

from sqlalchemy import (
    Column, Text, DateTime, LargeBinary, BigInteger, Index, PrimaryKeyConstraint
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import CreateIndex, CreateTable

# Create base class for models
Base = declarative_base()


class ContractData(Base):
    """Most recent snapshot of each key observed for a contract."""
    __tablename__ = 'contract_data'
    
    contract_id = Column(Text, nullable=False)
    key_hash = Column(Text, nullable=False)
    ledger_sequence = Column(BigInteger, nullable=False)
    durability = Column(Text, nullable=False)
    key_symbol = Column(Text)
    key = Column(LargeBinary)
    val = Column(LargeBinary)
    closed_at = Column(DateTime(timezone=True), nullable=False)
    live_until_ledger_sequence = Column(BigInteger)
    
    __table_args__ = (
        PrimaryKeyConstraint('contract_id', 'key_hash', name='contract_data_pkey'),
        Index('contract_data_durability_idx', 'contract_id', 'durability', 'key_hash'),
        Index('contract_data_ttl_idx', 'contract_id', 'live_until_ledger_sequence', 'key_hash'),
        Index('contract_data_closed_at_idx', 'contract_id', 'closed_at', 'key_hash'),
    )


def create_schema_statements() -> list[str]:
    """PostgreSQL DDL creating the contract_data table and its indexes."""
    dialect = postgresql.dialect()
    table = ContractData.__table__
    statements = [str(CreateTable(table).compile(dialect=dialect)).strip()]
    for index in sorted(table.indexes, key=lambda i: i.name):
        statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip())
    return statements
