"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, client and service fixtures.

==============================================================================
"""

import os
import tempfile

# Settings are cached on first use, so the test environment must be set
# before the application is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIRECTORY"] = tempfile.mkdtemp(prefix="orderpiqr-logs-")
os.environ["AUTO_CLEANUP_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

import pytest
from pathlib import Path
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from orderpiqr.main import app
from orderpiqr.config import Settings
from orderpiqr.db.database import Base, get_db
from orderpiqr.picklist import PickListEngine
from orderpiqr.services.scan_session_service import ScanSessionService
from orderpiqr.utils.pick_logger import PickLogger


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

# In-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# ENGINE AND SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def pick_engine() -> PickListEngine:
    """Pick list engine with the default message table."""
    return PickListEngine()


@pytest.fixture
def settings() -> Settings:
    """Settings with the default scan threshold."""
    return Settings(pick_list_length_threshold=12, no_pick_list_message="Scan eerst een pickbon.")


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Per-test directory for completion logs."""
    return tmp_path / "logs"


@pytest.fixture
def service(db: Session, settings: Settings, log_dir: Path) -> ScanSessionService:
    """Scan session service writing logs to a temporary directory."""
    return ScanSessionService(db, settings=settings, pick_logger=PickLogger(log_dir))


# ============================================================================
# PICK LIST FIXTURES
# ============================================================================

@pytest.fixture
def two_line_list() -> str:
    """Two line pick list as scanned from a QR code (literal backslash-n)."""
    return r"SKU1 LOC1\nSKU2"


@pytest.fixture
def warehouse_list() -> str:
    """Three line pick list with item codes and bin locations."""
    return "8712345000017 A-01-03\r\n8712345000024\tB-02-01\r\n8712345000031 C-04-02"
