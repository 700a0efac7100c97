"""Core data models for the single-zone comfort engine."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

from core.numeric import clamp, clamp_latitude, finite_or, normalize_longitude


class Face(StrEnum):
    """External facade of the box room, named by its outward compass direction."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def azimuth(self) -> float:
        return _FACE_AZIMUTHS[self]

    @property
    def opposite(self) -> "Face":
        return _OPPOSITE_FACES[self]

    @property
    def spans_depth(self) -> bool:
        """East and west facades run along the room depth."""
        return self in (Face.EAST, Face.WEST)


_FACE_AZIMUTHS: dict[Face, float] = {Face.NORTH: 0.0, Face.EAST: 90.0, Face.SOUTH: 180.0, Face.WEST: 270.0}
_OPPOSITE_FACES: dict[Face, Face] = {
    Face.NORTH: Face.SOUTH,
    Face.SOUTH: Face.NORTH,
    Face.EAST: Face.WEST,
    Face.WEST: Face.EAST,
}

FACES: tuple[Face, ...] = (Face.NORTH, Face.EAST, Face.SOUTH, Face.WEST)


class ComfortState(StrEnum):
    HEATING = "heating"
    COMFORTABLE = "comfortable"
    COOLING = "cooling"


class WindowSegmentState(IntEnum):
    """Opening state of one operable window leaf.

    Leaves are created closed and cycle CLOSED -> TOP_HUNG -> TURN -> CLOSED.
    """

    CLOSED = 0
    TOP_HUNG = 1
    TURN = 2

    def next(self) -> "WindowSegmentState":
        match self:
            case WindowSegmentState.CLOSED:
                return WindowSegmentState.TOP_HUNG
            case WindowSegmentState.TOP_HUNG:
                return WindowSegmentState.TURN
            case WindowSegmentState.TURN:
                return WindowSegmentState.CLOSED

    @classmethod
    def coerce(cls, value: "WindowSegmentState | bool | float | None") -> "WindowSegmentState":
        """Interpret loose UI input (bools, numbers, None) as a leaf state."""
        if isinstance(value, bool):
            return cls.TOP_HUNG if value else cls.CLOSED
        rounded = round(finite_or(value, 0.0))  # type: ignore[arg-type]
        if rounded <= cls.CLOSED:
            return cls.CLOSED
        if rounded >= cls.TURN:
            return cls.TURN
        return cls(rounded)


# ---------------------------------------------------------------------------
# Site and room
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Location:
    """Site coordinates. Latitude is clamped and longitude wrapped on creation."""

    latitude: float
    longitude: float
    timezone_hours: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "latitude", clamp_latitude(self.latitude))
        object.__setattr__(self, "longitude", normalize_longitude(finite_or(self.longitude, 0.0)))
        object.__setattr__(self, "timezone_hours", finite_or(self.timezone_hours, 0.0))


@dataclass(frozen=True)
class Geometry:
    """Internal room dimensions in metres."""

    width: float = 2.4
    depth: float = 4.8
    height: float = 2.6

    def __post_init__(self) -> None:
        for name in ("width", "depth", "height"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"Geometry.{name} must be positive, got {value}")

    @property
    def floor_area(self) -> float:
        return self.width * self.depth

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height

    def face_span(self, face: Face) -> float:
        return self.depth if face.spans_depth else self.width

    def face_area(self, face: Face) -> float:
        return self.face_span(face) * self.height


@dataclass(frozen=True)
class Envelope:
    """Fabric U-values (W/m²K) and glazing solar transmittance."""

    u_wall: float = 0.15
    u_roof: float = 0.15
    u_floor: float = 0.15
    u_window: float = 0.7
    g_glass: float = 0.4


@dataclass(frozen=True)
class Rooflight:
    """Horizontal glazing in the roof. U and g default to the window values."""

    area_m2: float
    u_value: float | None = None
    g_value: float | None = None


@dataclass(frozen=True)
class FaceConfig:
    """Per-facade glazing and shading inputs as set in the UI.

    ``overhang``, ``cill_lift`` and ``head_drop`` are metres; ``fin`` and
    ``h_fin`` are 0-1 ratios of room height.
    """

    glazing: float = 0.0
    overhang: float = 0.0
    fin: float = 0.0
    h_fin: float = 0.0
    cill_lift: float = 0.0
    head_drop: float = 0.0
    window_center_ratio: float = 0.0


@dataclass(frozen=True)
class WindowSpec:
    """A resolved window: size, facing and shading depths in metres."""

    width: float
    height: float
    azimuth: float
    overhang_depth: float = 0.0
    fin_depth: float = 0.0
    h_fin_depth: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Blinds:
    enabled: bool = False
    threshold_w_m2: float = 400.0
    reduction: float = 0.5


@dataclass(frozen=True)
class ComfortBand:
    min_c: float = 18.0
    max_c: float = 23.0

    def classify(self, temperature_c: float) -> ComfortState:
        if temperature_c < self.min_c:
            return ComfortState.HEATING
        if temperature_c > self.max_c:
            return ComfortState.COOLING
        return ComfortState.COMFORTABLE

    def clamp(self, temperature_c: float) -> float:
        return clamp(temperature_c, self.min_c, self.max_c)


@dataclass(frozen=True)
class BuildingParams:
    """Everything the snapshot evaluator needs apart from time and weather."""

    location: Location
    geometry: Geometry = field(default_factory=Geometry)
    envelope: Envelope = field(default_factory=Envelope)
    windows: tuple[WindowSpec, ...] = ()
    rooflight: Rooflight | None = None
    blinds: Blinds = field(default_factory=Blinds)
    internal_gain_w: float = 180.0
    ground_albedo: float = 0.25
