"""
API router for tree registry endpoints.
"""
from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse
from typing import Annotated

from treeledger.api.dependencies import CallerDep, TreeServiceDep
from treeledger.api.v1.models.requests import (
    RegisterTreeRequest,
    TransferOwnershipRequest,
    UpdateTreeRequest,
    UpdateTreeStatusRequest,
)
from treeledger.api.v1.models.responses import (
    COMMON_RESPONSES,
    MUTATION_RESPONSES,
    OkResponse,
    to_response,
)


router = APIRouter(
    prefix="/trees",
    tags=["trees"],
)

TreeId = Annotated[str, Path(description="Unique identifier for the tree")]


@router.post(
    "",
    response_model=OkResponse,
    summary="Register a tree",
    description="""
    Register a new tree owned by the caller.

    Coordinates are micro-degrees (40712776 = 40.712776 degrees); height and
    diameter are centimeters. The planting date may not lie in the future.
    A registration history record is written as sequence 0.
    """,
    responses=MUTATION_RESPONSES,
)
def register_tree(
    body: RegisterTreeRequest,
    caller: CallerDep,
    tree_service: TreeServiceDep,
) -> JSONResponse:
    return to_response(tree_service.register_tree(
        caller,
        body.tree_id,
        body.species,
        body.location,
        body.height,
        body.diameter,
        body.condition,
        body.planting_date,
    ))


@router.get(
    "/{tree_id}",
    response_model=OkResponse,
    summary="Get a tree",
    responses=COMMON_RESPONSES,
)
def get_tree(tree_id: TreeId, tree_service: TreeServiceDep) -> JSONResponse:
    return to_response(tree_service.get_tree(tree_id))


@router.put(
    "/{tree_id}",
    response_model=OkResponse,
    summary="Update tree measurements and condition",
    description="Owner only. Appends an 'update' history record.",
    responses=MUTATION_RESPONSES,
)
def update_tree(
    tree_id: TreeId,
    body: UpdateTreeRequest,
    caller: CallerDep,
    tree_service: TreeServiceDep,
) -> JSONResponse:
    return to_response(tree_service.update_tree(
        caller, tree_id, body.height, body.diameter, body.condition, body.notes,
    ))


@router.put(
    "/{tree_id}/status",
    response_model=OkResponse,
    summary="Change tree status",
    description="Owner only. Setting the current status again is rejected.",
    responses=MUTATION_RESPONSES,
)
def update_tree_status(
    tree_id: TreeId,
    body: UpdateTreeStatusRequest,
    caller: CallerDep,
    tree_service: TreeServiceDep,
) -> JSONResponse:
    return to_response(tree_service.update_tree_status(caller, tree_id, body.status, body.notes))


@router.post(
    "/{tree_id}/transfer",
    response_model=OkResponse,
    summary="Transfer tree ownership",
    responses=MUTATION_RESPONSES,
)
def transfer_ownership(
    tree_id: TreeId,
    body: TransferOwnershipRequest,
    caller: CallerDep,
    tree_service: TreeServiceDep,
) -> JSONResponse:
    return to_response(tree_service.transfer_ownership(caller, tree_id, body.new_owner))


@router.get(
    "/{tree_id}/history",
    response_model=OkResponse,
    summary="Get the full tree history",
    responses=COMMON_RESPONSES,
)
def get_tree_history(tree_id: TreeId, tree_service: TreeServiceDep) -> JSONResponse:
    return to_response(tree_service.get_tree_history(tree_id))


@router.get(
    "/{tree_id}/history/count",
    response_model=OkResponse,
    summary="Count tree history records",
    responses=COMMON_RESPONSES,
)
def get_tree_history_count(tree_id: TreeId, tree_service: TreeServiceDep) -> JSONResponse:
    return to_response(tree_service.get_tree_history_count(tree_id))


@router.get(
    "/{tree_id}/history/{sequence}",
    response_model=OkResponse,
    summary="Get one tree history record",
    responses=COMMON_RESPONSES,
)
def get_tree_history_record(
    tree_id: TreeId,
    sequence: Annotated[int, Path(description="0-based history sequence number")],
    tree_service: TreeServiceDep,
) -> JSONResponse:
    return to_response(tree_service.get_tree_history_record(tree_id, sequence))
