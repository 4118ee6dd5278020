"""Pytest configuration and shared fixtures for the Contract Storage API tests."""

import logging
import socket
from datetime import timedelta
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contract_storage.config import Settings
from contract_storage.db.connection import DatabaseManager
from contract_storage.db.contract_data import get_contract_data_repository
from contract_storage.main import create_app
from contract_storage.models.contract_data import ContractDataRow

from .fakes import (
    BASE_CLOSED_AT, CONTRACT_ID, LATEST_LEDGER, TEST_DATABASE_URL,
    FakeLedgerService, InMemoryContractDataRepository, hex_hash, make_row
)


# Disable logging for cleaner test output
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


@pytest.fixture
def test_settings() -> Settings:
    """Override settings for testing."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        host="127.0.0.1",
        port=8001,
        debug=True,
        log_level="ERROR",
        rpc_url="https://rpc.example.test"
    )


@pytest.fixture
def ttl_rows() -> List[ContractDataRow]:
    """Five rows: three with ttl 901-903 and two without a ttl."""
    return [
        make_row(hex_hash("c1"), durability="persistent", ttl=902,
                 closed_at=BASE_CLOSED_AT + timedelta(days=2)),
        make_row(hex_hash("aa"), durability="temporary", ttl=None,
                 closed_at=BASE_CLOSED_AT + timedelta(days=1)),
        make_row(hex_hash("d4"), durability="instance", ttl=901,
                 closed_at=BASE_CLOSED_AT),
        make_row(hex_hash("bb"), durability="persistent", ttl=None,
                 closed_at=BASE_CLOSED_AT + timedelta(days=1)),
        make_row(hex_hash("0e"), durability="persistent", ttl=903,
                 closed_at=BASE_CLOSED_AT + timedelta(days=3)),
    ]


@pytest.fixture
def ledger_service() -> FakeLedgerService:
    return FakeLedgerService(LATEST_LEDGER)


@pytest.fixture
def repository(ttl_rows: List[ContractDataRow]) -> InMemoryContractDataRepository:
    return InMemoryContractDataRepository(ttl_rows)


@pytest.fixture
def mock_db_manager() -> MagicMock:
    """Database manager whose pool is never touched."""
    manager = MagicMock(spec=DatabaseManager)
    manager.pool = None
    manager.initialize = AsyncMock()
    manager.close = AsyncMock()
    manager.ping = AsyncMock()
    return manager


@pytest.fixture
def app(
    test_settings: Settings,
    mock_db_manager: MagicMock,
    ledger_service: FakeLedgerService,
    repository: InMemoryContractDataRepository
) -> FastAPI:
    """Create FastAPI application instance backed by in-memory collaborators."""
    app = create_app(
        settings=test_settings,
        db_manager=mock_db_manager,
        ledger_service=ledger_service
    )
    app.dependency_overrides[get_contract_data_repository] = lambda: repository
    return app


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create test client for API testing."""
    return TestClient(app)


@pytest.fixture
def storage_path() -> str:
    return f"/api/mainnet/contract/{CONTRACT_ID}/storage"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


def pytest_runtest_setup(item):
    """Skip tests that require database if it's not available."""
    if item.get_closest_marker("integration"):
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.settimeout(1)
            result = sock.connect_ex(("localhost", 5432))
            sock.close()
            if result != 0:
                pytest.skip("PostgreSQL database not available for integration tests")
        except OSError:
            pytest.skip("Cannot verify database availability for integration tests")
