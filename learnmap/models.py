"""
Pydantic models for the Learning Map Engine.

Input: modules, courses.
Output: placements, connections, tier groups, resolved map nodes and the
map summary handed to the path renderer.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


# =========================================================================
# Literals
# =========================================================================

ModuleType = Literal["lesson", "quiz", "project", "achievement"]
ModuleStatus = Literal["completed", "available", "locked"]
NodeState = Literal["completed", "current", "locked", "available"]

COMPLETED_STROKE = "#10b981"
PENDING_STROKE = "#d1d5db"
COMPLETED_DASH = "0"
PENDING_DASH = "6,3"


# =========================================================================
# Input models
# =========================================================================


class Position(BaseModel):
    """Percentage coordinates (0-100) on the map canvas."""

    x: float
    y: float


class Module(BaseModel):
    """A single unit of course content and its prerequisite links."""

    id: str
    title: str
    type: ModuleType = "lesson"
    completed: bool = False
    # Derived by the progression rules; any supplied value is ignored.
    locked: bool = False
    prerequisites: List[str] = Field(default_factory=list)
    tier: Optional[int] = Field(default=None, ge=0)
    position: Optional[Position] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("prerequisites", mode="before")
    @classmethod
    def _normalise_prerequisites(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple, set, frozenset)):
            seen: Dict[str, None] = {}
            for item in value:
                key = (
                    str(item)
                    if isinstance(item, int) and not isinstance(item, bool)
                    else item
                )
                seen.setdefault(key, None)
            return list(seen)
        return value

    @property
    def effective_tier(self) -> int:
        """Declared tier, with an absent tier treated as tier 0."""
        return self.tier or 0


class Course(BaseModel):
    """An ordered collection of modules plus display-only metadata."""

    id: str
    title: str
    modules: List[Module] = Field(default_factory=list)
    last_accessed: Optional[str] = None
    progress: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "Course":
        seen = set()
        for module in self.modules:
            if module.id in seen:
                raise ValueError(
                    f"duplicate module id {module.id!r} in course {self.id!r}"
                )
            seen.add(module.id)
        return self

    def module_index(self) -> Dict[str, Module]:
        """Return ``{module_id: module}`` in course order."""
        return {m.id: m for m in self.modules}


# =========================================================================
# Output models
# =========================================================================


class Placement(BaseModel):
    """Resolved layout for one module.

    ``base_x``/``base_y`` are the grid positions before the id-derived
    jitter is applied; ``x``/``y`` are the final clamped coordinates.
    """

    x: float
    y: float
    base_x: float
    base_y: float
    tier: int
    tier_index: int
    index_in_tier: int

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)


class Connection(BaseModel):
    """Directed edge from a prerequisite to the module that needs it."""

    from_id: str
    to_id: str
    completed_style: bool

    @computed_field
    @property
    def stroke(self) -> str:
        return COMPLETED_STROKE if self.completed_style else PENDING_STROKE

    @computed_field
    @property
    def dash(self) -> str:
        return COMPLETED_DASH if self.completed_style else PENDING_DASH


class TierGroup(BaseModel):
    tier: int
    module_ids: List[str] = Field(default_factory=list)


class MapNode(BaseModel):
    """A module with its derived position, status and display state."""

    id: str
    title: str
    type: ModuleType
    completed: bool
    locked: bool
    current: bool = False
    status: ModuleStatus
    state: NodeState
    tier: int
    prerequisites: List[str] = Field(default_factory=list)
    position: Position


class MapSummary(BaseModel):
    """Progress and graph-shape figures for the map header."""

    total_modules: int = 0
    completed: int = 0
    available: int = 0
    locked: int = 0
    percent_complete: float = 0.0
    current_module_id: Optional[str] = None
    tier_count: int = 0
    connection_count: int = 0
    dangling_prerequisites: int = 0
    max_depth: int = 0


class LearningMap(BaseModel):
    """Everything the path renderer needs to draw one course."""

    course_id: str
    course_title: str
    tiers: List[TierGroup] = Field(default_factory=list)
    nodes: List[MapNode] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)
    summary: MapSummary = Field(default_factory=MapSummary)

    def node(self, module_id: str) -> Optional[MapNode]:
        """Return the node for *module_id*, or ``None``."""
        for n in self.nodes:
            if n.id == module_id:
                return n
        return None

    def statuses(self) -> Dict[str, ModuleStatus]:
        return {n.id: n.status for n in self.nodes}
