"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- A ledger with a manual clock
- Registries and application services
- Sample locations, trees, sites and initiatives
- FastAPI test client bound to a fresh ledger
"""
import os

# Rate limiting would trip across the whole session otherwise
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from treeledger.main import app
from treeledger.api.dependencies import get_planting_coordinator
from treeledger.domain.models import Location
from treeledger.infrastructure.ledger import Ledger, ManualClock, get_ledger
from treeledger.services.domain.tree_registry import TreeRegistry
from treeledger.services.domain.planting_coordinator import (
    CoordinatorConfig,
    PlantingCoordinator,
)
from treeledger.services.application.tree_service import TreeService
from treeledger.services.application.planting_service import PlantingService


SENDER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
OTHER_SENDER = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
COORDINATOR = "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0"
BLOCK_TIME = 1625097600  # July 1, 2021
ONE_YEAR = 31536000
TWO_WEEKS = 1209600


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def sample_location() -> Location:
    """Location from the registry fixtures: 123 Main St, New York."""
    return Location(
        latitude=40712776,
        longitude=-74005974,
        address="123 Main St, New York, NY",
    )


# ============================================================
# Ledger and Registry Fixtures
# ============================================================

@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=BLOCK_TIME)


@pytest.fixture
def ledger(clock) -> Ledger:
    return Ledger(clock=clock)


@pytest.fixture
def tree_registry() -> TreeRegistry:
    return TreeRegistry()


@pytest.fixture
def coordinator_config() -> CoordinatorConfig:
    return CoordinatorConfig(coordinator_identities=[COORDINATOR])


@pytest.fixture
def coordinator(coordinator_config) -> PlantingCoordinator:
    return PlantingCoordinator(config=coordinator_config)


@pytest.fixture
def tree_service(ledger, tree_registry) -> TreeService:
    return TreeService(ledger=ledger, registry=tree_registry)


@pytest.fixture
def planting_service(ledger, coordinator) -> PlantingService:
    return PlantingService(ledger=ledger, coordinator=coordinator)


@pytest.fixture
def registered_tree(tree_service, sample_location) -> str:
    """Register tree-001 as SENDER, planted one year before block time."""
    result = tree_service.register_tree(
        SENDER,
        "tree-001",
        "Quercus rubra",
        sample_location,
        500,
        30,
        "healthy",
        BLOCK_TIME - ONE_YEAR,
    )
    assert result.is_ok
    return "tree-001"


@pytest.fixture
def registered_site(planting_service, sample_location) -> str:
    """Register site-001 as SENDER."""
    result = planting_service.register_planting_site(
        SENDER, "site-001", sample_location, "sidewalk", "loam", "partial", 200,
    )
    assert result.is_ok
    return "site-001"


@pytest.fixture
def active_initiative(planting_service) -> str:
    """Create initiative-001 running for one year with a target of 100 trees."""
    result = planting_service.create_initiative(
        SENDER,
        "initiative-001",
        "Green Streets Initiative",
        "Planting trees along main streets to improve air quality and aesthetics",
        "Downtown",
        BLOCK_TIME,
        BLOCK_TIME + ONE_YEAR,
        100,
    )
    assert result.is_ok
    return "initiative-001"


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(ledger, coordinator) -> TestClient:
    """Test client whose requests run against a fresh ledger."""
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_planting_coordinator] = lambda: coordinator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def caller_headers() -> dict:
    return {"X-Caller-Identity": SENDER}
