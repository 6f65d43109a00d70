"""
Application service: Orchestration layer for tree registry operations.
"""
from treeledger.domain.models import Location, TreeCondition, TreeStatus
from treeledger.infrastructure.ledger import Ledger, Result
from treeledger.services.domain.tree_registry import TreeRegistry


class TreeService:
    """
    Application service for tree-related operations.

    Runs every registry operation as one ledger call on behalf of the
    caller. No business logic here, only coordination between the
    ledger and the domain layer.
    """

    def __init__(self, ledger: Ledger, registry: TreeRegistry):
        """
        Initialize the service with dependencies.

        Args:
            ledger: Ledger executing calls atomically
            registry: Tree registry holding the domain rules
        """
        self.ledger = ledger
        self.registry = registry

    def register_tree(
        self,
        caller: str,
        tree_id: str,
        species: str,
        location: Location,
        height: int,
        diameter: int,
        condition: TreeCondition,
        planting_date: int,
    ) -> Result:
        return self.ledger.call(
            caller, self.registry.register_tree,
            tree_id, species, location, height, diameter, condition, planting_date,
        )

    def update_tree(
        self,
        caller: str,
        tree_id: str,
        height: int,
        diameter: int,
        condition: TreeCondition,
        notes: str,
    ) -> Result:
        return self.ledger.call(
            caller, self.registry.update_tree, tree_id, height, diameter, condition, notes,
        )

    def update_tree_status(self, caller: str, tree_id: str, status: TreeStatus, notes: str) -> Result:
        return self.ledger.call(caller, self.registry.update_tree_status, tree_id, status, notes)

    def transfer_ownership(self, caller: str, tree_id: str, new_owner: str) -> Result:
        return self.ledger.call(caller, self.registry.transfer_ownership, tree_id, new_owner)

    def get_tree(self, tree_id: str) -> Result:
        return self.ledger.query(self.registry.get_tree, tree_id)

    def get_tree_history(self, tree_id: str) -> Result:
        return self.ledger.query(self.registry.get_tree_history, tree_id)

    def get_tree_history_record(self, tree_id: str, sequence: int) -> Result:
        return self.ledger.query(self.registry.get_tree_history_record, tree_id, sequence)

    def get_tree_history_count(self, tree_id: str) -> Result:
        return self.ledger.query(self.registry.get_tree_history_count, tree_id)
