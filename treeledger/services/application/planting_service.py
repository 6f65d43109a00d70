"""
Application service: Orchestration layer for planting coordination.
"""
from typing import List, Mapping, Optional

from treeledger.domain.models import (
    EventStatus,
    Location,
    SiteStatus,
    SiteType,
    SoilType,
    SunExposure,
)
from treeledger.infrastructure.ledger import Ledger, Result
from treeledger.services.domain.planting_coordinator import PlantingCoordinator


class PlantingService:
    """
    Application service for planting sites, initiatives, events and
    species diversity goals.

    Each method is a single ledger call; the coordinator holds the rules.
    """

    def __init__(self, ledger: Ledger, coordinator: PlantingCoordinator):
        """
        Initialize the service with dependencies.

        Args:
            ledger: Ledger executing calls atomically
            coordinator: Planting coordinator holding the domain rules
        """
        self.ledger = ledger
        self.coordinator = coordinator

    # Sites

    def register_planting_site(
        self,
        caller: str,
        site_id: str,
        location: Location,
        site_type: SiteType,
        soil_type: SoilType,
        sun_exposure: SunExposure,
        available_space: int,
    ) -> Result:
        return self.ledger.call(
            caller, self.coordinator.register_planting_site,
            site_id, location, site_type, soil_type, sun_exposure, available_space,
        )

    def update_site_priority(self, caller: str, site_id: str, new_score: int) -> Result:
        return self.ledger.call(caller, self.coordinator.update_site_priority, site_id, new_score)

    def set_recommended_species(self, caller: str, site_id: str, species: List[str]) -> Result:
        return self.ledger.call(caller, self.coordinator.set_recommended_species, site_id, species)

    def update_site_status(self, caller: str, site_id: str, status: SiteStatus) -> Result:
        return self.ledger.call(caller, self.coordinator.update_site_status, site_id, status)

    def get_planting_site(self, site_id: str) -> Result:
        return self.ledger.query(self.coordinator.get_planting_site, site_id)

    def find_sites_near(
        self,
        latitude: int,
        longitude: int,
        radius_m: float,
        status: Optional[SiteStatus] = None,
    ) -> Result:
        return self.ledger.query(
            self.coordinator.find_sites_near, latitude, longitude, radius_m, status,
        )

    # Initiatives

    def create_initiative(
        self,
        caller: str,
        initiative_id: str,
        name: str,
        description: str,
        target_area: str,
        start_date: int,
        end_date: int,
        target_count: int,
    ) -> Result:
        return self.ledger.call(
            caller, self.coordinator.create_initiative,
            initiative_id, name, description, target_area, start_date, end_date, target_count,
        )

    def update_initiative_progress(self, caller: str, initiative_id: str, trees_planted: int) -> Result:
        return self.ledger.call(
            caller, self.coordinator.update_initiative_progress, initiative_id, trees_planted,
        )

    def cancel_initiative(self, caller: str, initiative_id: str) -> Result:
        return self.ledger.call(caller, self.coordinator.cancel_initiative, initiative_id)

    def get_planting_initiative(self, initiative_id: str) -> Result:
        return self.ledger.query(self.coordinator.get_planting_initiative, initiative_id)

    # Events

    def create_planting_event(
        self,
        caller: str,
        initiative_id: str,
        event_id: str,
        name: str,
        date: int,
        location: str,
        target_sites: List[str],
        volunteers_needed: int,
    ) -> Result:
        return self.ledger.call(
            caller, self.coordinator.create_planting_event,
            initiative_id, event_id, name, date, location, target_sites, volunteers_needed,
        )

    def register_volunteers(self, caller: str, initiative_id: str, event_id: str, count: int) -> Result:
        return self.ledger.call(
            caller, self.coordinator.register_volunteers, initiative_id, event_id, count,
        )

    def update_event_status(
        self,
        caller: str,
        initiative_id: str,
        event_id: str,
        status: EventStatus,
    ) -> Result:
        return self.ledger.call(
            caller, self.coordinator.update_event_status, initiative_id, event_id, status,
        )

    def get_planting_event(self, initiative_id: str, event_id: str) -> Result:
        return self.ledger.query(self.coordinator.get_planting_event, initiative_id, event_id)

    # Species diversity

    def set_species_diversity_goals(self, caller: str, target_percentages: Mapping[str, int]) -> Result:
        return self.ledger.call(
            caller, self.coordinator.set_species_diversity_goals, target_percentages,
        )

    def record_species_observation(self, caller: str, current_percentages: Mapping[str, int]) -> Result:
        return self.ledger.call(
            caller, self.coordinator.record_species_observation, current_percentages,
        )

    def get_species_diversity_goals(self) -> Result:
        return self.ledger.query(self.coordinator.get_species_diversity_goals)
