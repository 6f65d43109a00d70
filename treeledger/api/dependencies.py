"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, Request, status

from treeledger.config import settings
from treeledger.infrastructure.ledger import Ledger, get_ledger
from treeledger.services.domain.tree_registry import TreeRegistry
from treeledger.services.domain.planting_coordinator import PlantingCoordinator
from treeledger.services.application.tree_service import TreeService
from treeledger.services.application.planting_service import PlantingService


def get_caller(request: Request) -> str:
    """
    Resolve the authenticated caller identity for a mutating request.

    Args:
        request: The incoming request

    Returns:
        Caller identity from the configured header

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    caller = request.headers.get(settings.caller_identity_header, "").strip()
    if not caller:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.caller_identity_header} header",
        )
    return caller


def get_tree_registry() -> TreeRegistry:
    """
    Dependency factory for TreeRegistry.

    Returns:
        TreeRegistry instance
    """
    return TreeRegistry()


def get_planting_coordinator() -> PlantingCoordinator:
    """
    Dependency factory for PlantingCoordinator.

    Returns:
        PlantingCoordinator configured from settings
    """
    return PlantingCoordinator()


def get_tree_service(
    ledger: Annotated[Ledger, Depends(get_ledger)],
    registry: Annotated[TreeRegistry, Depends(get_tree_registry)],
) -> TreeService:
    """
    Dependency factory for TreeService.

    Args:
        ledger: Ledger substrate (injected)
        registry: Tree registry (injected)

    Returns:
        TreeService instance
    """
    return TreeService(ledger=ledger, registry=registry)


def get_planting_service(
    ledger: Annotated[Ledger, Depends(get_ledger)],
    coordinator: Annotated[PlantingCoordinator, Depends(get_planting_coordinator)],
) -> PlantingService:
    """
    Dependency factory for PlantingService.

    Args:
        ledger: Ledger substrate (injected)
        coordinator: Planting coordinator (injected)

    Returns:
        PlantingService instance
    """
    return PlantingService(ledger=ledger, coordinator=coordinator)


# Type aliases for cleaner route signatures
CallerDep = Annotated[str, Depends(get_caller)]
TreeServiceDep = Annotated[TreeService, Depends(get_tree_service)]
PlantingServiceDep = Annotated[PlantingService, Depends(get_planting_service)]
