"""
Unit tests for the planting coordinator.

Tests cover:
- Site registration, priority, recommended species and status lifecycle
- Spatial site search
- Initiatives and progress tracking
- Planting events and volunteers
- Species diversity goals
"""
import pytest

from treeledger.domain.errors import ErrorKind
from treeledger.domain.models import (
    EventStatus,
    InitiativeStatus,
    Location,
    PlantingEvent,
    PlantingInitiative,
    SiteStatus,
    SiteType,
    SunExposure,
)
from treeledger.services.domain.planting_coordinator import (
    CoordinatorConfig,
    PlantingCoordinator,
)
from treeledger.services.application.planting_service import PlantingService

from conftest import BLOCK_TIME, COORDINATOR, ONE_YEAR, OTHER_SENDER, SENDER, TWO_WEEKS


# ============================================================
# Site Tests
# ============================================================

class TestRegisterPlantingSite:
    """Tests for planting site registration."""

    def test_registered_site_defaults(self, planting_service, registered_site, sample_location):
        site = planting_service.get_planting_site(registered_site).value

        assert site.location == sample_location
        assert site.site_type == SiteType.SIDEWALK
        assert site.available_space == 200
        assert site.priority_score == 60  # sidewalk 40 + partial sun 20
        assert site.recommended_species == []
        assert site.status == SiteStatus.AVAILABLE
        assert site.created_by == SENDER
        assert site.creation_time == BLOCK_TIME

    def test_duplicate_site_rejected(self, planting_service, registered_site, sample_location):
        result = planting_service.register_planting_site(
            OTHER_SENDER, registered_site, sample_location, "park", "clay", "full", 300,
        )

        assert result.kind == ErrorKind.ALREADY_EXISTS
        assert planting_service.get_planting_site(registered_site).value.created_by == SENDER

    @pytest.mark.parametrize("space", [0, -200])
    def test_non_positive_space_rejected(self, planting_service, sample_location, space):
        result = planting_service.register_planting_site(
            SENDER, "site-002", sample_location, "park", "loam", "full", space,
        )

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_unknown_site_type_rejected(self, planting_service, sample_location):
        result = planting_service.register_planting_site(
            SENDER, "site-002", sample_location, "rooftop", "loam", "full", 200,
        )

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_missing_site(self, planting_service):
        assert planting_service.get_planting_site("site-404").kind == ErrorKind.NOT_FOUND


class TestDefaultPriority:
    """Tests for the derived default priority score."""

    def test_weights(self, coordinator):
        assert coordinator.default_priority_score(SiteType.SIDEWALK, SunExposure.FULL) == 70
        assert coordinator.default_priority_score(SiteType.YARD, SunExposure.SHADE) == 30

    def test_clamped_to_bounds(self):
        coordinator = PlantingCoordinator(CoordinatorConfig(max_priority_score=50))

        assert coordinator.default_priority_score(SiteType.SIDEWALK, SunExposure.FULL) == 50


class TestSiteManagement:
    """Tests for priority, species and status updates."""

    def test_creator_updates_priority(self, planting_service, registered_site):
        assert planting_service.update_site_priority(SENDER, registered_site, 85).is_ok
        assert planting_service.get_planting_site(registered_site).value.priority_score == 85

    def test_coordinator_updates_priority(self, planting_service, registered_site):
        assert planting_service.update_site_priority(COORDINATOR, registered_site, 10).is_ok

    def test_stranger_cannot_update_priority(self, planting_service, registered_site):
        result = planting_service.update_site_priority(OTHER_SENDER, registered_site, 85)

        assert result.kind == ErrorKind.UNAUTHORIZED

    @pytest.mark.parametrize("score", [-1, 101])
    def test_priority_out_of_bounds(self, planting_service, registered_site, score):
        result = planting_service.update_site_priority(SENDER, registered_site, score)

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_priority_on_missing_site(self, planting_service):
        assert planting_service.update_site_priority(SENDER, "site-404", 50).kind == ErrorKind.NOT_FOUND

    def test_recommended_species_keep_order(self, planting_service, registered_site):
        species = ["Quercus rubra", "Acer rubrum", "Tilia americana"]

        assert planting_service.set_recommended_species(SENDER, registered_site, species).is_ok
        assert planting_service.get_planting_site(registered_site).value.recommended_species == species

    def test_read_site_does_not_alias_ledger_state(self, planting_service, registered_site):
        planting_service.get_planting_site(registered_site).value.recommended_species.append("Injected")

        assert planting_service.get_planting_site(registered_site).value.recommended_species == []

    @pytest.mark.parametrize("species", [[], ["Acer rubrum", "Acer rubrum"], ["  "]])
    def test_invalid_recommended_species(self, planting_service, registered_site, species):
        result = planting_service.set_recommended_species(SENDER, registered_site, species)

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_status_lifecycle(self, planting_service, registered_site):
        assert planting_service.update_site_status(SENDER, registered_site, "reserved").is_ok
        assert planting_service.update_site_status(SENDER, registered_site, "planted").is_ok
        assert planting_service.get_planting_site(registered_site).value.status == SiteStatus.PLANTED

    def test_reserved_site_can_be_released(self, planting_service, registered_site):
        planting_service.update_site_status(SENDER, registered_site, SiteStatus.RESERVED)

        assert planting_service.update_site_status(SENDER, registered_site, SiteStatus.AVAILABLE).is_ok

    def test_cannot_skip_reservation(self, planting_service, registered_site):
        result = planting_service.update_site_status(SENDER, registered_site, SiteStatus.PLANTED)

        assert result.kind == ErrorKind.INVALID_TRANSITION

    def test_planted_is_terminal(self, planting_service, registered_site):
        planting_service.update_site_status(SENDER, registered_site, SiteStatus.RESERVED)
        planting_service.update_site_status(SENDER, registered_site, SiteStatus.PLANTED)

        result = planting_service.update_site_status(SENDER, registered_site, SiteStatus.AVAILABLE)

        assert result.kind == ErrorKind.INVALID_TRANSITION


# ============================================================
# Spatial Search Tests
# ============================================================

class TestFindSitesNear:
    """Tests for the nearby site query."""

    @pytest.fixture
    def spread_sites(self, planting_service, registered_site):
        # ~100 m north of site-001
        planting_service.register_planting_site(
            SENDER, "site-002",
            Location(latitude=40713676, longitude=-74005974, address="Park Row"),
            "park", "loam", "full", 400,
        )
        # Brooklyn, several kilometers away
        planting_service.register_planting_site(
            SENDER, "site-003",
            Location(latitude=40678178, longitude=-73944158, address="Prospect Park"),
            "park", "loam", "full", 400,
        )
        return ["site-001", "site-002", "site-003"]

    def test_returns_sites_within_radius_nearest_first(self, planting_service, spread_sites):
        result = planting_service.find_sites_near(40712776, -74005974, 500)

        assert result.is_ok
        assert [match.site_id for match in result.value] == ["site-001", "site-002"]
        assert result.value[0].distance_m == pytest.approx(0.0, abs=0.01)
        assert result.value[1].distance_m == pytest.approx(100.0, abs=5.0)

    def test_large_radius_includes_distant_site(self, planting_service, spread_sites):
        result = planting_service.find_sites_near(40712776, -74005974, 10_000)

        assert [match.site_id for match in result.value] == ["site-001", "site-002", "site-003"]

    def test_status_filter(self, planting_service, spread_sites):
        planting_service.update_site_status(SENDER, "site-001", SiteStatus.RESERVED)

        result = planting_service.find_sites_near(40712776, -74005974, 500, SiteStatus.AVAILABLE)

        assert [match.site_id for match in result.value] == ["site-002"]

    def test_no_sites_registered(self, planting_service):
        assert planting_service.find_sites_near(40712776, -74005974, 500).value == []

    @pytest.mark.parametrize("radius", [0, -10, 1_000_000])
    def test_invalid_radius(self, planting_service, radius):
        result = planting_service.find_sites_near(40712776, -74005974, radius)

        assert result.kind == ErrorKind.INVALID_INPUT

    @pytest.mark.parametrize("latitude,longitude", [
        (999_000_000, -74005974),
        (-90_000_001, -74005974),
        (40712776, 180_000_001),
    ])
    def test_out_of_range_query_point(self, planting_service, spread_sites, latitude, longitude):
        result = planting_service.find_sites_near(latitude, longitude, 500)

        assert result.type == "err"
        assert result.kind == ErrorKind.INVALID_INPUT


# ============================================================
# Initiative Tests
# ============================================================

class TestInitiatives:
    """Tests for initiative creation and progress."""

    def test_created_initiative(self, planting_service, active_initiative):
        initiative = planting_service.get_planting_initiative(active_initiative).value

        assert initiative == PlantingInitiative(
            name="Green Streets Initiative",
            description="Planting trees along main streets to improve air quality and aesthetics",
            target_area="Downtown",
            start_date=BLOCK_TIME,
            end_date=BLOCK_TIME + ONE_YEAR,
            target_count=100,
            current_count=0,
            status=InitiativeStatus.ACTIVE,
            coordinator=SENDER,
        )

    def test_duplicate_initiative_rejected(self, planting_service, active_initiative):
        result = planting_service.create_initiative(
            SENDER, active_initiative, "Other", "", "Uptown", BLOCK_TIME, BLOCK_TIME + 10, 5,
        )

        assert result.kind == ErrorKind.ALREADY_EXISTS

    @pytest.mark.parametrize("start,end,target", [
        (BLOCK_TIME, BLOCK_TIME, 100),
        (BLOCK_TIME, BLOCK_TIME - 1, 100),
        (BLOCK_TIME, BLOCK_TIME + ONE_YEAR, 0),
    ])
    def test_invalid_initiative(self, planting_service, start, end, target):
        result = planting_service.create_initiative(
            SENDER, "initiative-002", "Bad", "", "Nowhere", start, end, target,
        )

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_progress_is_additive(self, planting_service, active_initiative):
        planting_service.update_initiative_progress(SENDER, active_initiative, 10)
        planting_service.update_initiative_progress(OTHER_SENDER, active_initiative, 20)

        initiative = planting_service.get_planting_initiative(active_initiative).value
        assert initiative.current_count == 30
        assert initiative.status == InitiativeStatus.ACTIVE

    def test_reaching_target_completes(self, planting_service, active_initiative):
        planting_service.update_initiative_progress(SENDER, active_initiative, 90)
        planting_service.update_initiative_progress(SENDER, active_initiative, 15)

        initiative = planting_service.get_planting_initiative(active_initiative).value
        assert initiative.current_count == 105
        assert initiative.status == InitiativeStatus.COMPLETED

        result = planting_service.update_initiative_progress(SENDER, active_initiative, 1)
        assert result.kind == ErrorKind.INVALID_TRANSITION
        assert planting_service.get_planting_initiative(active_initiative).value.current_count == 105

    @pytest.mark.parametrize("planted", [0, -5])
    def test_non_positive_progress_rejected(self, planting_service, active_initiative, planted):
        result = planting_service.update_initiative_progress(SENDER, active_initiative, planted)

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_progress_on_missing_initiative(self, planting_service):
        result = planting_service.update_initiative_progress(SENDER, "initiative-404", 5)

        assert result.kind == ErrorKind.NOT_FOUND

    def test_cancel_by_coordinator(self, planting_service, active_initiative):
        assert planting_service.cancel_initiative(SENDER, active_initiative).is_ok

        initiative = planting_service.get_planting_initiative(active_initiative).value
        assert initiative.status == InitiativeStatus.CANCELLED
        assert planting_service.update_initiative_progress(SENDER, active_initiative, 5).kind == \
            ErrorKind.INVALID_TRANSITION

    def test_cancel_by_stranger_rejected(self, planting_service, active_initiative):
        result = planting_service.cancel_initiative(OTHER_SENDER, active_initiative)

        assert result.kind == ErrorKind.UNAUTHORIZED


# ============================================================
# Event Tests
# ============================================================

class TestPlantingEvents:
    """Tests for planting events."""

    def create_event(self, planting_service, initiative_id, sites, **overrides):
        args = {
            "event_id": "event-001",
            "name": "Community Planting Day",
            "date": BLOCK_TIME + TWO_WEEKS,
            "location": "City Park",
            "volunteers_needed": 20,
        }
        args.update(overrides)
        return planting_service.create_planting_event(
            SENDER, initiative_id, args["event_id"], args["name"], args["date"],
            args["location"], sites, args["volunteers_needed"],
        )

    def test_create_event(self, planting_service, active_initiative, registered_site):
        assert self.create_event(planting_service, active_initiative, [registered_site]).is_ok

        event = planting_service.get_planting_event(active_initiative, "event-001").value
        assert event == PlantingEvent(
            name="Community Planting Day",
            date=BLOCK_TIME + TWO_WEEKS,
            location="City Park",
            target_sites=["site-001"],
            volunteers_needed=20,
            volunteers_registered=0,
            status=EventStatus.SCHEDULED,
            organizer=SENDER,
        )

    def test_missing_site_creates_nothing(self, planting_service, active_initiative, registered_site):
        result = self.create_event(planting_service, active_initiative, [registered_site, "site-404"])

        assert result.kind == ErrorKind.NOT_FOUND
        assert "site-404" in result.message
        assert planting_service.get_planting_event(active_initiative, "event-001").kind == \
            ErrorKind.NOT_FOUND

    def test_missing_initiative(self, planting_service, registered_site):
        result = self.create_event(planting_service, "initiative-404", [registered_site])

        assert result.kind == ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("overrides", [
        {"date": BLOCK_TIME - 1},
        {"date": BLOCK_TIME + ONE_YEAR + 1},
        {"volunteers_needed": 0},
    ])
    def test_invalid_event(self, planting_service, active_initiative, registered_site, overrides):
        result = self.create_event(planting_service, active_initiative, [registered_site], **overrides)

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_event_on_window_edges(self, planting_service, active_initiative, registered_site):
        assert self.create_event(
            planting_service, active_initiative, [registered_site], event_id="e-start", date=BLOCK_TIME,
        ).is_ok
        assert self.create_event(
            planting_service, active_initiative, [registered_site],
            event_id="e-end", date=BLOCK_TIME + ONE_YEAR,
        ).is_ok

    def test_empty_target_sites(self, planting_service, active_initiative):
        assert self.create_event(planting_service, active_initiative, []).kind == ErrorKind.INVALID_INPUT

    def test_duplicate_event_in_same_initiative(self, planting_service, active_initiative, registered_site):
        self.create_event(planting_service, active_initiative, [registered_site])

        result = self.create_event(planting_service, active_initiative, [registered_site])

        assert result.kind == ErrorKind.ALREADY_EXISTS

    def test_event_ids_scoped_per_initiative(self, planting_service, active_initiative, registered_site):
        planting_service.create_initiative(
            SENDER, "initiative-002", "Schoolyards", "", "Uptown",
            BLOCK_TIME, BLOCK_TIME + ONE_YEAR, 10,
        )
        self.create_event(planting_service, active_initiative, [registered_site])

        assert self.create_event(planting_service, "initiative-002", [registered_site]).is_ok

    def test_register_volunteers(self, planting_service, active_initiative, registered_site):
        self.create_event(planting_service, active_initiative, [registered_site])

        assert planting_service.register_volunteers(OTHER_SENDER, active_initiative, "event-001", 15).is_ok
        event = planting_service.get_planting_event(active_initiative, "event-001").value
        assert event.volunteers_registered == 15

        result = planting_service.register_volunteers(OTHER_SENDER, active_initiative, "event-001", 6)
        assert result.kind == ErrorKind.INVALID_INPUT

    def test_complete_event(self, planting_service, active_initiative, registered_site):
        self.create_event(planting_service, active_initiative, [registered_site])

        assert planting_service.update_event_status(
            SENDER, active_initiative, "event-001", EventStatus.COMPLETED,
        ).is_ok
        assert planting_service.update_event_status(
            SENDER, active_initiative, "event-001", EventStatus.CANCELLED,
        ).kind == ErrorKind.INVALID_TRANSITION
        assert planting_service.register_volunteers(
            SENDER, active_initiative, "event-001", 1,
        ).kind == ErrorKind.INVALID_TRANSITION

    def test_only_organizer_updates_event(self, planting_service, active_initiative, registered_site):
        self.create_event(planting_service, active_initiative, [registered_site])

        result = planting_service.update_event_status(
            OTHER_SENDER, active_initiative, "event-001", "cancelled",
        )

        assert result.kind == ErrorKind.UNAUTHORIZED


# ============================================================
# Species Diversity Tests
# ============================================================

class TestSpeciesDiversityGoals:
    """Tests for diversity targets and observations."""

    TARGETS = {"Quercus rubra": 20, "Acer rubrum": 15, "Tilia americana": 10}
    OBSERVED = {"Quercus rubra": 25, "Acer rubrum": 10, "Tilia americana": 5}

    def test_unset_goals_not_found(self, planting_service):
        assert planting_service.get_species_diversity_goals().kind == ErrorKind.NOT_FOUND

    def test_read_goals_do_not_alias_ledger_state(self, planting_service):
        planting_service.set_species_diversity_goals(COORDINATOR, self.TARGETS)

        planting_service.get_species_diversity_goals().value.target_percentages["Injected"] = 50

        assert planting_service.get_species_diversity_goals().value.target_percentages == self.TARGETS

    def test_set_goals(self, planting_service, clock):
        assert planting_service.set_species_diversity_goals(COORDINATOR, self.TARGETS).is_ok

        goals = planting_service.get_species_diversity_goals().value
        assert goals.target_percentages == self.TARGETS
        assert goals.current_percentages == {}
        assert goals.last_updated == BLOCK_TIME

    def test_targets_replaced_and_observations_kept(self, planting_service, clock):
        planting_service.set_species_diversity_goals(COORDINATOR, self.TARGETS)
        planting_service.record_species_observation(COORDINATOR, self.OBSERVED)
        clock.advance(100)

        planting_service.set_species_diversity_goals(COORDINATOR, {"Ginkgo biloba": 5})

        goals = planting_service.get_species_diversity_goals().value
        assert goals.target_percentages == {"Ginkgo biloba": 5}
        assert goals.current_percentages == self.OBSERVED
        assert goals.last_updated == BLOCK_TIME + 100

    def test_percentages_need_not_sum_to_100(self, planting_service):
        assert planting_service.set_species_diversity_goals(
            COORDINATOR, {"Quercus rubra": 80, "Acer rubrum": 70},
        ).is_ok

    @pytest.mark.parametrize("targets", [{"Quercus rubra": -1}, {"Quercus rubra": 101}, {" ": 10}])
    def test_invalid_percentages(self, planting_service, targets):
        result = planting_service.set_species_diversity_goals(COORDINATOR, targets)

        assert result.kind == ErrorKind.INVALID_INPUT

    def test_non_coordinator_rejected(self, planting_service):
        result = planting_service.set_species_diversity_goals(SENDER, self.TARGETS)

        assert result.kind == ErrorKind.UNAUTHORIZED

    def test_open_when_no_coordinators(self, ledger):
        service = PlantingService(ledger, PlantingCoordinator(CoordinatorConfig()))

        assert service.set_species_diversity_goals(SENDER, self.TARGETS).is_ok
