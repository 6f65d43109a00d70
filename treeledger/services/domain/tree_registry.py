"""
Domain service: tree registration, condition tracking and audit history.

Each mutating operation appends exactly one history record. History is an
indexed log keyed by (tree_id, sequence) with a per-tree counter; sequences
start at 0 with the registration record.
"""
import logging
from typing import List

from treeledger.domain.errors import (
    AlreadyExistsError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    parse_enum,
)
from treeledger.domain.models import (
    HistoryUpdateType,
    Location,
    Tree,
    TreeCondition,
    TreeHistoryRecord,
    TreeStatus,
)
from treeledger.infrastructure.ledger import CallContext

logger = logging.getLogger(__name__)

TREES = "trees"
TREE_HISTORY = "tree-history"
TREE_HISTORY_COUNT = "tree-history-count"

REGISTRATION_NOTES = "Initial tree registration"


class TreeRegistry:
    """
    Registry of trees and their append-only history.

    Only the current owner may mutate a tree; ownership moves only
    through transfer_ownership.
    """

    def register_tree(
        self,
        ctx: CallContext,
        tree_id: str,
        species: str,
        location: Location,
        height: int,
        diameter: int,
        condition: TreeCondition,
        planting_date: int,
    ) -> bool:
        """
        Register a new tree owned by the caller.

        Raises:
            AlreadyExistsError: If the id is taken
            InvalidInputError: If measurements are non-positive or the
                planting date lies in the future
        """
        condition = parse_enum(TreeCondition, condition)
        if ctx.exists(TREES, tree_id):
            raise AlreadyExistsError(f"Tree '{tree_id}' already registered")
        _check_measurements(height, diameter)
        if planting_date > ctx.time:
            raise InvalidInputError(
                f"Planting date {planting_date} is after current time {ctx.time}"
            )

        tree = Tree(
            owner=ctx.sender,
            species=species,
            location=location,
            height=height,
            diameter=diameter,
            condition=condition,
            planting_date=planting_date,
            last_updated=ctx.time,
            status=TreeStatus.ACTIVE,
        )
        ctx.put(TREES, tree_id, tree)
        self._append_history(
            ctx,
            tree_id,
            HistoryUpdateType.REGISTRATION,
            previous_condition="",
            new_condition=condition,
            notes=REGISTRATION_NOTES,
        )
        logger.info(f"Registered tree {tree_id} ({species}) for {ctx.sender}")
        return True

    def update_tree(
        self,
        ctx: CallContext,
        tree_id: str,
        height: int,
        diameter: int,
        condition: TreeCondition,
        notes: str,
    ) -> bool:
        """Record new measurements and condition for an owned tree."""
        tree = self._get_owned(ctx, tree_id)
        _check_measurements(height, diameter)
        condition = parse_enum(TreeCondition, condition)

        ctx.put(TREES, tree_id, tree.model_copy(update={
            "height": height,
            "diameter": diameter,
            "condition": condition,
            "last_updated": ctx.time,
        }))
        self._append_history(
            ctx,
            tree_id,
            HistoryUpdateType.UPDATE,
            previous_condition=tree.condition,
            new_condition=condition,
            notes=notes,
        )
        logger.info(f"Updated tree {tree_id}: {tree.condition.value} -> {condition.value}")
        return True

    def update_tree_status(
        self,
        ctx: CallContext,
        tree_id: str,
        status: TreeStatus,
        notes: str,
    ) -> bool:
        """Change the lifecycle status of an owned tree."""
        tree = self._get_owned(ctx, tree_id)
        status = parse_enum(TreeStatus, status)
        if tree.status == status:
            raise InvalidTransitionError(f"Tree '{tree_id}' is already {status.value}")

        ctx.put(TREES, tree_id, tree.model_copy(update={
            "status": status,
            "last_updated": ctx.time,
        }))
        self._append_history(
            ctx,
            tree_id,
            HistoryUpdateType.STATUS_CHANGE,
            previous_condition=tree.condition,
            new_condition=tree.condition,
            notes=notes,
        )
        logger.info(f"Tree {tree_id} status {tree.status.value} -> {status.value}")
        return True

    def transfer_ownership(self, ctx: CallContext, tree_id: str, new_owner: str) -> bool:
        """Hand an owned tree over to another identity."""
        tree = self._get_owned(ctx, tree_id)
        if not new_owner:
            raise InvalidInputError("New owner must not be empty")
        if new_owner == tree.owner:
            raise InvalidInputError(f"Tree '{tree_id}' is already owned by {new_owner}")

        ctx.put(TREES, tree_id, tree.model_copy(update={
            "owner": new_owner,
            "last_updated": ctx.time,
        }))
        self._append_history(
            ctx,
            tree_id,
            HistoryUpdateType.TRANSFER,
            previous_condition=tree.condition,
            new_condition=tree.condition,
            notes=f"Ownership transferred from {tree.owner} to {new_owner}",
        )
        logger.info(f"Transferred tree {tree_id} from {tree.owner} to {new_owner}")
        return True

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get_tree(self, ctx: CallContext, tree_id: str) -> Tree:
        tree = ctx.get(TREES, tree_id)
        if tree is None:
            raise NotFoundError(f"Tree '{tree_id}' not found")
        return tree

    def get_tree_history_count(self, ctx: CallContext, tree_id: str) -> int:
        self.get_tree(ctx, tree_id)
        return ctx.get(TREE_HISTORY_COUNT, tree_id) or 0

    def get_tree_history_record(
        self,
        ctx: CallContext,
        tree_id: str,
        sequence: int,
    ) -> TreeHistoryRecord:
        count = self.get_tree_history_count(ctx, tree_id)
        if not 0 <= sequence < count:
            raise NotFoundError(
                f"No history record {sequence} for tree '{tree_id}' ({count} records)"
            )
        return ctx.get(TREE_HISTORY, (tree_id, sequence))

    def get_tree_history(self, ctx: CallContext, tree_id: str) -> List[TreeHistoryRecord]:
        count = self.get_tree_history_count(ctx, tree_id)
        return [ctx.get(TREE_HISTORY, (tree_id, seq)) for seq in range(count)]

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _get_owned(self, ctx: CallContext, tree_id: str) -> Tree:
        tree = self.get_tree(ctx, tree_id)
        if tree.owner != ctx.sender:
            raise UnauthorizedError(f"Only the owner of tree '{tree_id}' may modify it")
        return tree

    def _append_history(
        self,
        ctx: CallContext,
        tree_id: str,
        update_type: HistoryUpdateType,
        previous_condition,
        new_condition: TreeCondition,
        notes: str,
    ) -> int:
        sequence = ctx.get(TREE_HISTORY_COUNT, tree_id) or 0
        ctx.put(TREE_HISTORY, (tree_id, sequence), TreeHistoryRecord(
            update_type=update_type,
            updated_by=ctx.sender,
            update_time=ctx.time,
            previous_condition=previous_condition,
            new_condition=new_condition,
            notes=notes,
        ))
        ctx.put(TREE_HISTORY_COUNT, tree_id, sequence + 1)
        return sequence


def _check_measurements(height: int, diameter: int) -> None:
    if height <= 0:
        raise InvalidInputError(f"Height must be positive, got {height}")
    if diameter <= 0:
        raise InvalidInputError(f"Diameter must be positive, got {diameter}")
