"""
API request models using Pydantic.

Field names are camelCase on the wire.
"""
from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from treeledger.domain.models import (
    EventStatus,
    Location,
    SiteStatus,
    SiteType,
    SoilType,
    SunExposure,
    TreeCondition,
    TreeStatus,
)


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# Trees
# ============================================================

class RegisterTreeRequest(RequestModel):
    """Body for tree registration."""
    tree_id: str = Field(min_length=1, examples=["tree-001"])
    species: str = Field(examples=["Quercus rubra"])
    location: Location
    height: int = Field(description="Height in centimeters (500 = 5.00 m)", examples=[500])
    diameter: int = Field(description="Trunk diameter in centimeters", examples=[30])
    condition: TreeCondition
    planting_date: int = Field(description="Planting time in ledger seconds", examples=[1593561600])


class UpdateTreeRequest(RequestModel):
    height: int = Field(examples=[550])
    diameter: int = Field(examples=[35])
    condition: TreeCondition
    notes: str = Field(default="", examples=["Annual growth assessment"])


class UpdateTreeStatusRequest(RequestModel):
    status: TreeStatus
    notes: str = Field(default="", examples=["Tree removed due to disease"])


class TransferOwnershipRequest(RequestModel):
    new_owner: str = Field(min_length=1)


# ============================================================
# Planting sites
# ============================================================

class RegisterPlantingSiteRequest(RequestModel):
    """Body for planting site registration."""
    site_id: str = Field(min_length=1, examples=["site-001"])
    location: Location
    site_type: SiteType
    soil_type: SoilType
    sun_exposure: SunExposure
    available_space: int = Field(description="Available space scaled by 100 (200 = 2.00 m)", examples=[200])


class UpdateSitePriorityRequest(RequestModel):
    priority_score: int = Field(examples=[85])


class RecommendedSpeciesRequest(RequestModel):
    species: List[str] = Field(examples=[["Quercus rubra", "Acer rubrum", "Tilia americana"]])


class UpdateSiteStatusRequest(RequestModel):
    status: SiteStatus


# ============================================================
# Initiatives and events
# ============================================================

class CreateInitiativeRequest(RequestModel):
    """Body for initiative creation."""
    initiative_id: str = Field(min_length=1, examples=["initiative-001"])
    name: str = Field(examples=["Green Streets Initiative"])
    description: str = ""
    target_area: str = Field(examples=["Downtown"])
    start_date: int
    end_date: int
    target_count: int = Field(examples=[100])


class InitiativeProgressRequest(RequestModel):
    trees_planted: int = Field(examples=[10])


class CreatePlantingEventRequest(RequestModel):
    """Body for scheduling an event under an initiative."""
    event_id: str = Field(min_length=1, examples=["event-001"])
    name: str = Field(examples=["Community Planting Day"])
    date: int
    location: str = Field(examples=["City Park"])
    target_sites: List[str] = Field(examples=[["site-001", "site-002", "site-003"]])
    volunteers_needed: int = Field(examples=[20])


class RegisterVolunteersRequest(RequestModel):
    count: int = Field(default=1, examples=[5])


class UpdateEventStatusRequest(RequestModel):
    status: EventStatus


# ============================================================
# Species diversity
# ============================================================

class SpeciesPercentagesRequest(RequestModel):
    percentages: Dict[str, int] = Field(
        description="Percentage per species; shares are independent and need not sum to 100",
        examples=[{"Quercus rubra": 20, "Acer rubrum": 15, "Tilia americana": 10}],
    )
