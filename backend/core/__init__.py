"""Core domain models for the single-zone room."""

from core.models import (
    FACES,
    Blinds,
    BuildingParams,
    ComfortBand,
    ComfortState,
    Envelope,
    Face,
    FaceConfig,
    Geometry,
    Location,
    Rooflight,
    WindowSegmentState,
    WindowSpec,
)

__all__ = [
    "FACES",
    "Blinds",
    "BuildingParams",
    "ComfortBand",
    "ComfortState",
    "Envelope",
    "Face",
    "FaceConfig",
    "Geometry",
    "Location",
    "Rooflight",
    "WindowSegmentState",
    "WindowSpec",
]
