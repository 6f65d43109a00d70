"""
Domain service: planting site registry, initiatives, events and species
diversity goals.

Lifecycles:
- site: available -> reserved -> planted (reserved may be released)
- initiative: active -> completed | cancelled
- event: scheduled -> completed | cancelled

Events reference sites by identifier only; the sites must exist when the
event is created.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from treeledger.config import settings
from treeledger.domain.errors import (
    AlreadyExistsError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    parse_enum,
)
from treeledger.domain.models import (
    EventStatus,
    InitiativeStatus,
    Location,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    NearbySite,
    PlantingEvent,
    PlantingInitiative,
    PlantingSite,
    SiteStatus,
    SiteType,
    SoilType,
    SpeciesDiversityGoals,
    SunExposure,
)
from treeledger.infrastructure.ledger import CallContext
from treeledger.utils.geo_projection import microdegrees_to_degrees, project_to_meters
from treeledger.utils.spatial_helpers import points_within_radius

logger = logging.getLogger(__name__)

SITES = "planting-sites"
INITIATIVES = "planting-initiatives"
EVENTS = "planting-events"
DIVERSITY_GOALS = "species-diversity-goals"
DIVERSITY_GOALS_KEY = "global"

SITE_TYPE_WEIGHTS = {
    SiteType.SIDEWALK: 40,
    SiteType.MEDIAN: 35,
    SiteType.SCHOOL: 35,
    SiteType.PARK: 30,
    SiteType.YARD: 20,
    SiteType.OTHER: 15,
}

SUN_EXPOSURE_WEIGHTS = {
    SunExposure.FULL: 30,
    SunExposure.PARTIAL: 20,
    SunExposure.SHADE: 10,
}

SITE_TRANSITIONS = {
    SiteStatus.AVAILABLE: {SiteStatus.RESERVED},
    SiteStatus.RESERVED: {SiteStatus.PLANTED, SiteStatus.AVAILABLE},
    SiteStatus.PLANTED: set(),
}


@dataclass
class CoordinatorConfig:
    """Policy settings for the planting coordinator."""

    min_priority_score: int = 0
    max_priority_score: int = 100

    coordinator_identities: List[str] = field(default_factory=list)
    """Identities allowed to manage any site and the diversity goals"""

    max_search_radius_m: float = 50_000.0

    @classmethod
    def from_settings(cls) -> "CoordinatorConfig":
        return cls(
            min_priority_score=settings.min_priority_score,
            max_priority_score=settings.max_priority_score,
            coordinator_identities=list(settings.coordinator_identities),
            max_search_radius_m=settings.nearby_sites_max_radius_m,
        )


class PlantingCoordinator:
    """
    Registry coordinating where, when and what gets planted.

    Site mutations are limited to the site's creator and configured
    coordinators. Diversity goals are open to any caller until at least
    one coordinator is configured.
    """

    def __init__(self, config: Optional[CoordinatorConfig] = None):
        self.config = config or CoordinatorConfig.from_settings()

    # ============================================================
    # Planting sites
    # ============================================================

    def register_planting_site(
        self,
        ctx: CallContext,
        site_id: str,
        location: Location,
        site_type: SiteType,
        soil_type: SoilType,
        sun_exposure: SunExposure,
        available_space: int,
    ) -> bool:
        """
        Register a planting site created by the caller.

        The initial priority score is derived from the site type and sun
        exposure; see default_priority_score.

        Raises:
            AlreadyExistsError: If the id is taken
            InvalidInputError: If available space is not positive
        """
        site_type = parse_enum(SiteType, site_type)
        soil_type = parse_enum(SoilType, soil_type)
        sun_exposure = parse_enum(SunExposure, sun_exposure)
        if ctx.exists(SITES, site_id):
            raise AlreadyExistsError(f"Planting site '{site_id}' already registered")
        if available_space <= 0:
            raise InvalidInputError(f"Available space must be positive, got {available_space}")

        ctx.put(SITES, site_id, PlantingSite(
            location=location,
            site_type=site_type,
            soil_type=soil_type,
            sun_exposure=sun_exposure,
            available_space=available_space,
            priority_score=self.default_priority_score(site_type, sun_exposure),
            recommended_species=[],
            status=SiteStatus.AVAILABLE,
            created_by=ctx.sender,
            creation_time=ctx.time,
        ))
        logger.info(f"Registered planting site {site_id} ({site_type.value}) for {ctx.sender}")
        return True

    def default_priority_score(self, site_type: SiteType, sun_exposure: SunExposure) -> int:
        score = SITE_TYPE_WEIGHTS[site_type] + SUN_EXPOSURE_WEIGHTS[sun_exposure]
        return max(self.config.min_priority_score, min(score, self.config.max_priority_score))

    def update_site_priority(self, ctx: CallContext, site_id: str, new_score: int) -> bool:
        site = self._get_manageable_site(ctx, site_id)
        if not self.config.min_priority_score <= new_score <= self.config.max_priority_score:
            raise InvalidInputError(
                f"Priority score {new_score} outside "
                f"[{self.config.min_priority_score}, {self.config.max_priority_score}]"
            )

        ctx.put(SITES, site_id, site.model_copy(update={"priority_score": new_score}))
        logger.info(f"Site {site_id} priority {site.priority_score} -> {new_score}")
        return True

    def set_recommended_species(
        self,
        ctx: CallContext,
        site_id: str,
        species: List[str],
    ) -> bool:
        site = self._get_manageable_site(ctx, site_id)
        if not species:
            raise InvalidInputError("Recommended species list must not be empty")
        if any(not name.strip() for name in species):
            raise InvalidInputError("Species names must not be blank")
        if len(set(species)) != len(species):
            raise InvalidInputError("Recommended species must not contain duplicates")

        ctx.put(SITES, site_id, site.model_copy(update={"recommended_species": list(species)}))
        logger.info(f"Site {site_id} recommends {len(species)} species")
        return True

    def update_site_status(self, ctx: CallContext, site_id: str, status: SiteStatus) -> bool:
        site = self._get_manageable_site(ctx, site_id)
        status = parse_enum(SiteStatus, status)
        if status not in SITE_TRANSITIONS[site.status]:
            raise InvalidTransitionError(
                f"Site '{site_id}' cannot move from {site.status.value} to {status.value}"
            )

        ctx.put(SITES, site_id, site.model_copy(update={"status": status}))
        logger.info(f"Site {site_id} status {site.status.value} -> {status.value}")
        return True

    def get_planting_site(self, ctx: CallContext, site_id: str) -> PlantingSite:
        site = ctx.get(SITES, site_id)
        if site is None:
            raise NotFoundError(f"Planting site '{site_id}' not found")
        return site

    def find_sites_near(
        self,
        ctx: CallContext,
        latitude: int,
        longitude: int,
        radius_m: float,
        status: Optional[SiteStatus] = None,
    ) -> List[NearbySite]:
        """
        Find registered sites within a radius of a point.

        Args:
            ctx: Call context
            latitude: Query latitude in micro-degrees
            longitude: Query longitude in micro-degrees
            radius_m: Search radius in meters
            status: Only return sites in this status

        Returns:
            Matching sites ordered by distance, nearest first
        """
        if abs(latitude) > MAX_LATITUDE or abs(longitude) > MAX_LONGITUDE:
            raise InvalidInputError(
                f"Query point ({latitude}, {longitude}) is outside the valid coordinate range"
            )
        if not 0 < radius_m <= self.config.max_search_radius_m:
            raise InvalidInputError(
                f"Search radius must be in (0, {self.config.max_search_radius_m}] meters"
            )
        if status is not None:
            status = parse_enum(SiteStatus, status)

        candidates = []
        for site_id in sorted(ctx.keys(SITES)):
            site = ctx.get(SITES, site_id)
            if status is None or site.status == status:
                candidates.append((site_id, site))
        if not candidates:
            return []

        origin, projected = project_to_meters(
            (microdegrees_to_degrees(latitude), microdegrees_to_degrees(longitude)),
            [
                (microdegrees_to_degrees(site.location.latitude),
                 microdegrees_to_degrees(site.location.longitude))
                for _, site in candidates
            ],
        )
        return [
            NearbySite(site_id=candidates[i][0], distance_m=distance, site=candidates[i][1])
            for i, distance in points_within_radius(projected, origin, radius_m)
        ]

    # ============================================================
    # Initiatives
    # ============================================================

    def create_initiative(
        self,
        ctx: CallContext,
        initiative_id: str,
        name: str,
        description: str,
        target_area: str,
        start_date: int,
        end_date: int,
        target_count: int,
    ) -> bool:
        if ctx.exists(INITIATIVES, initiative_id):
            raise AlreadyExistsError(f"Initiative '{initiative_id}' already exists")
        if end_date <= start_date:
            raise InvalidInputError(f"End date {end_date} must be after start date {start_date}")
        if target_count <= 0:
            raise InvalidInputError(f"Target count must be positive, got {target_count}")

        ctx.put(INITIATIVES, initiative_id, PlantingInitiative(
            name=name,
            description=description,
            target_area=target_area,
            start_date=start_date,
            end_date=end_date,
            target_count=target_count,
            current_count=0,
            status=InitiativeStatus.ACTIVE,
            coordinator=ctx.sender,
        ))
        logger.info(f"Created initiative {initiative_id} '{name}' targeting {target_count} trees")
        return True

    def update_initiative_progress(
        self,
        ctx: CallContext,
        initiative_id: str,
        trees_planted: int,
    ) -> bool:
        """
        Add planted trees to an initiative's count.

        The initiative completes once the count reaches its target; a
        completed or cancelled initiative accepts no further progress.
        """
        initiative = self.get_planting_initiative(ctx, initiative_id)
        if trees_planted <= 0:
            raise InvalidInputError(f"Trees planted must be positive, got {trees_planted}")
        if initiative.status != InitiativeStatus.ACTIVE:
            raise InvalidTransitionError(
                f"Initiative '{initiative_id}' is {initiative.status.value}"
            )

        current_count = initiative.current_count + trees_planted
        status = initiative.status
        if current_count >= initiative.target_count:
            status = InitiativeStatus.COMPLETED
            logger.info(f"Initiative {initiative_id} reached its target of "
                        f"{initiative.target_count} trees")

        ctx.put(INITIATIVES, initiative_id, initiative.model_copy(update={
            "current_count": current_count,
            "status": status,
        }))
        logger.info(f"Initiative {initiative_id} progress {current_count}/{initiative.target_count}")
        return True

    def cancel_initiative(self, ctx: CallContext, initiative_id: str) -> bool:
        initiative = self.get_planting_initiative(ctx, initiative_id)
        if initiative.coordinator != ctx.sender:
            raise UnauthorizedError(
                f"Only the coordinator of initiative '{initiative_id}' may cancel it"
            )
        if initiative.status != InitiativeStatus.ACTIVE:
            raise InvalidTransitionError(
                f"Initiative '{initiative_id}' is {initiative.status.value}"
            )

        ctx.put(INITIATIVES, initiative_id, initiative.model_copy(update={
            "status": InitiativeStatus.CANCELLED,
        }))
        logger.info(f"Cancelled initiative {initiative_id}")
        return True

    def get_planting_initiative(self, ctx: CallContext, initiative_id: str) -> PlantingInitiative:
        initiative = ctx.get(INITIATIVES, initiative_id)
        if initiative is None:
            raise NotFoundError(f"Initiative '{initiative_id}' not found")
        return initiative

    # ============================================================
    # Events
    # ============================================================

    def create_planting_event(
        self,
        ctx: CallContext,
        initiative_id: str,
        event_id: str,
        name: str,
        date: int,
        location: str,
        target_sites: List[str],
        volunteers_needed: int,
    ) -> bool:
        """
        Schedule a planting event under an initiative.

        Raises:
            NotFoundError: If the initiative or any target site is missing
            AlreadyExistsError: If the event id is taken in this initiative
            InvalidInputError: If the date falls outside the initiative,
                no sites are given or no volunteers are needed
        """
        initiative = self.get_planting_initiative(ctx, initiative_id)
        if ctx.exists(EVENTS, (initiative_id, event_id)):
            raise AlreadyExistsError(
                f"Event '{event_id}' already exists in initiative '{initiative_id}'"
            )
        if not initiative.start_date <= date <= initiative.end_date:
            raise InvalidInputError(
                f"Event date {date} outside initiative window "
                f"[{initiative.start_date}, {initiative.end_date}]"
            )
        if volunteers_needed <= 0:
            raise InvalidInputError(f"Volunteers needed must be positive, got {volunteers_needed}")
        if not target_sites:
            raise InvalidInputError("An event must target at least one site")
        missing = [site_id for site_id in target_sites if not ctx.exists(SITES, site_id)]
        if missing:
            raise NotFoundError(f"Planting sites not found: {', '.join(missing)}")

        ctx.put(EVENTS, (initiative_id, event_id), PlantingEvent(
            name=name,
            date=date,
            location=location,
            target_sites=list(target_sites),
            volunteers_needed=volunteers_needed,
            volunteers_registered=0,
            status=EventStatus.SCHEDULED,
            organizer=ctx.sender,
        ))
        logger.info(f"Scheduled event {event_id} under {initiative_id} "
                    f"for {len(target_sites)} sites")
        return True

    def register_volunteers(
        self,
        ctx: CallContext,
        initiative_id: str,
        event_id: str,
        count: int,
    ) -> bool:
        event = self.get_planting_event(ctx, initiative_id, event_id)
        if count <= 0:
            raise InvalidInputError(f"Volunteer count must be positive, got {count}")
        if event.status != EventStatus.SCHEDULED:
            raise InvalidTransitionError(f"Event '{event_id}' is {event.status.value}")
        registered = event.volunteers_registered + count
        if registered > event.volunteers_needed:
            raise InvalidInputError(
                f"Event '{event_id}' needs {event.volunteers_needed} volunteers, "
                f"{event.volunteers_registered} already registered"
            )

        ctx.put(EVENTS, (initiative_id, event_id), event.model_copy(update={
            "volunteers_registered": registered,
        }))
        logger.info(f"Event {event_id} volunteers {registered}/{event.volunteers_needed}")
        return True

    def update_event_status(
        self,
        ctx: CallContext,
        initiative_id: str,
        event_id: str,
        status: EventStatus,
    ) -> bool:
        event = self.get_planting_event(ctx, initiative_id, event_id)
        status = parse_enum(EventStatus, status)
        if event.organizer != ctx.sender:
            raise UnauthorizedError(f"Only the organizer of event '{event_id}' may update it")
        if event.status != EventStatus.SCHEDULED or status == EventStatus.SCHEDULED:
            raise InvalidTransitionError(
                f"Event '{event_id}' cannot move from {event.status.value} to {status.value}"
            )

        ctx.put(EVENTS, (initiative_id, event_id), event.model_copy(update={"status": status}))
        logger.info(f"Event {event_id} status {event.status.value} -> {status.value}")
        return True

    def get_planting_event(
        self,
        ctx: CallContext,
        initiative_id: str,
        event_id: str,
    ) -> PlantingEvent:
        event = ctx.get(EVENTS, (initiative_id, event_id))
        if event is None:
            raise NotFoundError(
                f"Event '{event_id}' not found in initiative '{initiative_id}'"
            )
        return event

    # ============================================================
    # Species diversity
    # ============================================================

    def set_species_diversity_goals(
        self,
        ctx: CallContext,
        target_percentages: Mapping[str, int],
    ) -> bool:
        """Replace the target species mix. Observed shares are kept."""
        self._check_goal_access(ctx)
        targets = _validate_percentages(target_percentages)
        goals = ctx.get(DIVERSITY_GOALS, DIVERSITY_GOALS_KEY)
        current = goals.current_percentages if goals else {}

        ctx.put(DIVERSITY_GOALS, DIVERSITY_GOALS_KEY, SpeciesDiversityGoals(
            target_percentages=targets,
            current_percentages=dict(current),
            last_updated=ctx.time,
        ))
        logger.info(f"Set diversity targets for {len(targets)} species")
        return True

    def record_species_observation(
        self,
        ctx: CallContext,
        current_percentages: Mapping[str, int],
    ) -> bool:
        """Replace the observed species mix reported by field surveys."""
        self._check_goal_access(ctx)
        observed = _validate_percentages(current_percentages)
        goals = ctx.get(DIVERSITY_GOALS, DIVERSITY_GOALS_KEY)
        targets = goals.target_percentages if goals else {}

        ctx.put(DIVERSITY_GOALS, DIVERSITY_GOALS_KEY, SpeciesDiversityGoals(
            target_percentages=dict(targets),
            current_percentages=observed,
            last_updated=ctx.time,
        ))
        logger.info(f"Recorded observed shares for {len(observed)} species")
        return True

    def get_species_diversity_goals(self, ctx: CallContext) -> SpeciesDiversityGoals:
        goals = ctx.get(DIVERSITY_GOALS, DIVERSITY_GOALS_KEY)
        if goals is None:
            raise NotFoundError("Species diversity goals have not been set")
        return goals

    # ============================================================
    # Authorization helpers
    # ============================================================

    def _is_coordinator(self, identity: str) -> bool:
        return identity in self.config.coordinator_identities

    def _get_manageable_site(self, ctx: CallContext, site_id: str) -> PlantingSite:
        site = self.get_planting_site(ctx, site_id)
        if site.created_by != ctx.sender and not self._is_coordinator(ctx.sender):
            raise UnauthorizedError(
                f"Only the creator of site '{site_id}' or a coordinator may modify it"
            )
        return site

    def _check_goal_access(self, ctx: CallContext) -> None:
        if self.config.coordinator_identities and not self._is_coordinator(ctx.sender):
            raise UnauthorizedError("Only coordinators may manage species diversity goals")


def _validate_percentages(percentages: Mapping[str, int]) -> Dict[str, int]:
    validated = {}
    for species, percentage in percentages.items():
        if not species.strip():
            raise InvalidInputError("Species names must not be blank")
        if not 0 <= percentage <= 100:
            raise InvalidInputError(
                f"Percentage for '{species}' must be within [0, 100], got {percentage}"
            )
        validated[species] = percentage
    return validated
