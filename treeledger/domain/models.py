"""
Domain models for tree and planting coordination records.

These models represent the core domain entities and should be independent
of any infrastructure concerns (ledger storage, HTTP, etc.).

Fixed-point conventions:
- latitude/longitude are micro-degrees (degrees x 1,000,000)
- height, diameter and available space are scaled by 100
"""
from enum import Enum
from typing import Dict, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MAX_LATITUDE = 90_000_000
MAX_LONGITUDE = 180_000_000


class RecordModel(BaseModel):
    """Base for ledger records: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TreeCondition(str, Enum):
    HEALTHY = "healthy"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"
    DEAD = "dead"


class TreeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    REMOVED = "removed"


class HistoryUpdateType(str, Enum):
    REGISTRATION = "registration"
    UPDATE = "update"
    STATUS_CHANGE = "status-change"
    TRANSFER = "transfer"


class SiteType(str, Enum):
    SIDEWALK = "sidewalk"
    PARK = "park"
    YARD = "yard"
    MEDIAN = "median"
    SCHOOL = "school"
    OTHER = "other"


class SoilType(str, Enum):
    LOAM = "loam"
    CLAY = "clay"
    SAND = "sand"
    SILT = "silt"
    PEAT = "peat"
    CHALK = "chalk"
    ROCKY = "rocky"


class SunExposure(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    SHADE = "shade"


class SiteStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    PLANTED = "planted"


class InitiativeStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Location(RecordModel):
    """Point location in micro-degrees with a street address."""
    latitude: int = Field(
        ge=-MAX_LATITUDE,
        le=MAX_LATITUDE,
        description="Latitude in micro-degrees",
        examples=[40712776],
    )
    longitude: int = Field(
        ge=-MAX_LONGITUDE,
        le=MAX_LONGITUDE,
        description="Longitude in micro-degrees",
        examples=[-74005974],
    )
    address: str = Field(description="Street address", examples=["123 Main St, New York, NY"])


class Tree(RecordModel):
    """Registered tree."""
    owner: str
    species: str
    location: Location
    height: int = Field(description="Height in centimeters (500 = 5.00 m)")
    diameter: int = Field(description="Trunk diameter in centimeters")
    condition: TreeCondition
    planting_date: int
    last_updated: int
    status: TreeStatus


class TreeHistoryRecord(RecordModel):
    """Append-only audit entry for a tree mutation."""
    update_type: HistoryUpdateType
    updated_by: str
    update_time: int
    previous_condition: Union[TreeCondition, Literal[""]]
    new_condition: TreeCondition
    notes: str


class PlantingSite(RecordModel):
    """Candidate location for planting."""
    location: Location
    site_type: SiteType
    soil_type: SoilType
    sun_exposure: SunExposure
    available_space: int = Field(description="Available space scaled by 100 (200 = 2.00 m)")
    priority_score: int
    recommended_species: List[str] = Field(default_factory=list)
    status: SiteStatus
    created_by: str
    creation_time: int


class PlantingInitiative(RecordModel):
    """Planting campaign with a target tree count."""
    name: str
    description: str
    target_area: str
    start_date: int
    end_date: int
    target_count: int
    current_count: int
    status: InitiativeStatus
    coordinator: str


class PlantingEvent(RecordModel):
    """Volunteer planting event scoped under an initiative."""
    name: str
    date: int
    location: str
    target_sites: List[str]
    volunteers_needed: int
    volunteers_registered: int
    status: EventStatus
    organizer: str


class SpeciesDiversityGoals(RecordModel):
    """
    Target and observed species shares in percent.

    Percentages are tracked independently per species and are not
    required to sum to 100.
    """
    target_percentages: Dict[str, int] = Field(default_factory=dict)
    current_percentages: Dict[str, int] = Field(default_factory=dict)
    last_updated: int


class NearbySite(RecordModel):
    """Planting site matched by a spatial query."""
    site_id: str
    distance_m: float = Field(description="Planar distance from the query point in meters")
    site: PlantingSite
