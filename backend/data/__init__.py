"""Weather forcing and climate defaults."""

from data.climate import infer_climatology, location_from_coordinates, manual_profile
from data.weather import (
    HourlyWeather,
    SyntheticProfile,
    WeatherDataset,
    WeatherSource,
    make_weather_source,
    validate_dataset,
)

__all__ = [
    "HourlyWeather",
    "SyntheticProfile",
    "WeatherDataset",
    "WeatherSource",
    "infer_climatology",
    "location_from_coordinates",
    "make_weather_source",
    "manual_profile",
    "validate_dataset",
]
