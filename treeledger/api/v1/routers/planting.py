"""
API router for planting coordination endpoints.
"""
from fastapi import APIRouter, Path, Query
from fastapi.responses import JSONResponse
from typing import Annotated, Optional

from treeledger.api.dependencies import CallerDep, PlantingServiceDep
from treeledger.api.v1.models.requests import (
    CreateInitiativeRequest,
    CreatePlantingEventRequest,
    InitiativeProgressRequest,
    RecommendedSpeciesRequest,
    RegisterPlantingSiteRequest,
    RegisterVolunteersRequest,
    SpeciesPercentagesRequest,
    UpdateEventStatusRequest,
    UpdateSitePriorityRequest,
    UpdateSiteStatusRequest,
)
from treeledger.api.v1.models.responses import (
    COMMON_RESPONSES,
    MUTATION_RESPONSES,
    OkResponse,
    to_response,
)
from treeledger.domain.models import MAX_LATITUDE, MAX_LONGITUDE, SiteStatus


router = APIRouter(
    prefix="/planting",
    tags=["planting"],
)

SiteId = Annotated[str, Path(description="Unique identifier for the planting site")]
InitiativeId = Annotated[str, Path(description="Unique identifier for the initiative")]
EventId = Annotated[str, Path(description="Event identifier within its initiative")]


# ============================================================
# Sites
# ============================================================

@router.post(
    "/sites",
    response_model=OkResponse,
    summary="Register a planting site",
    description="""
    Register a planting site created by the caller.

    The site starts as 'available' with no recommended species and a
    default priority derived from its site type and sun exposure.
    """,
    responses=MUTATION_RESPONSES,
)
def register_planting_site(
    body: RegisterPlantingSiteRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.register_planting_site(
        caller,
        body.site_id,
        body.location,
        body.site_type,
        body.soil_type,
        body.sun_exposure,
        body.available_space,
    ))


@router.get(
    "/sites/nearby",
    response_model=OkResponse,
    summary="Find planting sites near a point",
    description="Sites within the radius, nearest first. Coordinates are micro-degrees.",
    responses=COMMON_RESPONSES,
)
def find_sites_near(
    latitude: Annotated[int, Query(ge=-MAX_LATITUDE, le=MAX_LATITUDE, description="Latitude in micro-degrees")],
    longitude: Annotated[int, Query(ge=-MAX_LONGITUDE, le=MAX_LONGITUDE, description="Longitude in micro-degrees")],
    radius_m: Annotated[float, Query(alias="radiusM", description="Search radius in meters")],
    planting_service: PlantingServiceDep,
    site_status: Annotated[Optional[SiteStatus], Query(alias="status")] = None,
) -> JSONResponse:
    return to_response(planting_service.find_sites_near(latitude, longitude, radius_m, site_status))


@router.get(
    "/sites/{site_id}",
    response_model=OkResponse,
    summary="Get a planting site",
    responses=COMMON_RESPONSES,
)
def get_planting_site(site_id: SiteId, planting_service: PlantingServiceDep) -> JSONResponse:
    return to_response(planting_service.get_planting_site(site_id))


@router.put(
    "/sites/{site_id}/priority",
    response_model=OkResponse,
    summary="Update site priority",
    description="Site creator or coordinator only.",
    responses=MUTATION_RESPONSES,
)
def update_site_priority(
    site_id: SiteId,
    body: UpdateSitePriorityRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.update_site_priority(caller, site_id, body.priority_score))


@router.put(
    "/sites/{site_id}/recommended-species",
    response_model=OkResponse,
    summary="Set recommended species for a site",
    responses=MUTATION_RESPONSES,
)
def set_recommended_species(
    site_id: SiteId,
    body: RecommendedSpeciesRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.set_recommended_species(caller, site_id, body.species))


@router.put(
    "/sites/{site_id}/status",
    response_model=OkResponse,
    summary="Move a site along available -> reserved -> planted",
    responses=MUTATION_RESPONSES,
)
def update_site_status(
    site_id: SiteId,
    body: UpdateSiteStatusRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.update_site_status(caller, site_id, body.status))


# ============================================================
# Initiatives
# ============================================================

@router.post(
    "/initiatives",
    response_model=OkResponse,
    summary="Create a planting initiative",
    responses=MUTATION_RESPONSES,
)
def create_initiative(
    body: CreateInitiativeRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.create_initiative(
        caller,
        body.initiative_id,
        body.name,
        body.description,
        body.target_area,
        body.start_date,
        body.end_date,
        body.target_count,
    ))


@router.get(
    "/initiatives/{initiative_id}",
    response_model=OkResponse,
    summary="Get a planting initiative",
    responses=COMMON_RESPONSES,
)
def get_planting_initiative(
    initiative_id: InitiativeId,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.get_planting_initiative(initiative_id))


@router.post(
    "/initiatives/{initiative_id}/progress",
    response_model=OkResponse,
    summary="Report trees planted",
    description="""
    Add planted trees to the initiative count. The initiative completes when
    the count reaches its target and accepts no further progress afterwards.
    """,
    responses=MUTATION_RESPONSES,
)
def update_initiative_progress(
    initiative_id: InitiativeId,
    body: InitiativeProgressRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.update_initiative_progress(
        caller, initiative_id, body.trees_planted,
    ))


@router.post(
    "/initiatives/{initiative_id}/cancel",
    response_model=OkResponse,
    summary="Cancel an active initiative",
    responses=MUTATION_RESPONSES,
)
def cancel_initiative(
    initiative_id: InitiativeId,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.cancel_initiative(caller, initiative_id))


# ============================================================
# Events
# ============================================================

@router.post(
    "/initiatives/{initiative_id}/events",
    response_model=OkResponse,
    summary="Schedule a planting event",
    description="The event date must fall inside the initiative window and every target site must exist.",
    responses=MUTATION_RESPONSES,
)
def create_planting_event(
    initiative_id: InitiativeId,
    body: CreatePlantingEventRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.create_planting_event(
        caller,
        initiative_id,
        body.event_id,
        body.name,
        body.date,
        body.location,
        body.target_sites,
        body.volunteers_needed,
    ))


@router.get(
    "/initiatives/{initiative_id}/events/{event_id}",
    response_model=OkResponse,
    summary="Get a planting event",
    responses=COMMON_RESPONSES,
)
def get_planting_event(
    initiative_id: InitiativeId,
    event_id: EventId,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.get_planting_event(initiative_id, event_id))


@router.post(
    "/initiatives/{initiative_id}/events/{event_id}/volunteers",
    response_model=OkResponse,
    summary="Register volunteers for an event",
    responses=MUTATION_RESPONSES,
)
def register_volunteers(
    initiative_id: InitiativeId,
    event_id: EventId,
    body: RegisterVolunteersRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.register_volunteers(
        caller, initiative_id, event_id, body.count,
    ))


@router.put(
    "/initiatives/{initiative_id}/events/{event_id}/status",
    response_model=OkResponse,
    summary="Complete or cancel an event",
    responses=MUTATION_RESPONSES,
)
def update_event_status(
    initiative_id: InitiativeId,
    event_id: EventId,
    body: UpdateEventStatusRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.update_event_status(
        caller, initiative_id, event_id, body.status,
    ))


# ============================================================
# Species diversity
# ============================================================

@router.put(
    "/diversity-goals",
    response_model=OkResponse,
    summary="Replace species diversity targets",
    responses=MUTATION_RESPONSES,
)
def set_species_diversity_goals(
    body: SpeciesPercentagesRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.set_species_diversity_goals(caller, body.percentages))


@router.put(
    "/diversity-goals/observed",
    response_model=OkResponse,
    summary="Record observed species shares",
    responses=MUTATION_RESPONSES,
)
def record_species_observation(
    body: SpeciesPercentagesRequest,
    caller: CallerDep,
    planting_service: PlantingServiceDep,
) -> JSONResponse:
    return to_response(planting_service.record_species_observation(caller, body.percentages))


@router.get(
    "/diversity-goals",
    response_model=OkResponse,
    summary="Get species diversity goals",
    responses=COMMON_RESPONSES,
)
def get_species_diversity_goals(planting_service: PlantingServiceDep) -> JSONResponse:
    return to_response(planting_service.get_species_diversity_goals())
