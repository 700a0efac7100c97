"""FastAPI entry point - thin layer over the comfort engine."""

import dataclasses
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Literal

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from analysis.cost_carbon import DEFAULT_LETI_TARGET, LETI_TARGETS
from core.models import (
    Blinds,
    BuildingParams,
    ComfortBand,
    Face,
    FaceConfig,
    Geometry,
    Location,
    Rooflight,
)
from data.climate import infer_climatology, location_from_coordinates, manual_profile
from data.weather import (
    HourlyWeather,
    SyntheticProfile,
    WeatherDataset,
    WeatherSource,
    make_weather_source,
    validate_dataset,
)
from services.study import PvArray, run_annual_study, run_day_study
from simulation.config import DEFAULT, SimConfig
from simulation.integrator import PvPlane
from simulation.natural_ventilation import assess_draught, natural_ventilation, required_opening_area
from simulation.presets import (
    DEFAULT_U_VALUE_PRESET,
    DEFAULT_VENTILATION_PRESET,
    U_VALUE_PRESETS,
    VENTILATION_PRESETS,
    u_value_preset,
    ventilation_preset,
)
from simulation.snapshot import classify_illuminance, compute_snapshot
from simulation.solar import day_sun_times
from simulation.ventilation import ManualOpenings, VentilationStrategy, decide_ventilation
from simulation.windows import (
    FaceState,
    RooflightLayout,
    build_preview_face_configs,
    build_windows,
    calculate_opened_window_area,
    resolve_rooflight,
)

logging.basicConfig(level=logging.WARNING, format="%(name)s | %(message)s")
logging.getLogger("simulation.integrator").setLevel(logging.INFO)
logging.getLogger("services.study").setLevel(logging.INFO)

app = FastAPI(title="Room Comfort API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _jsonable(value: Any) -> Any:
    """Like ``dataclasses.asdict`` but also maps NamedTuples and enum-keyed dicts to objects."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, tuple) and hasattr(value, "_asdict"):
        return {k: _jsonable(v) for k, v in value._asdict().items()}
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LocationModel(BaseModel):
    latitude: float = Field(51.45, ge=-90, le=90)
    longitude: float = Field(-2.59, ge=-180, le=180)
    timezone_hours: float | None = Field(0.0, ge=-12, le=14)

    def to_location(self) -> Location:
        return location_from_coordinates(self.latitude, self.longitude, self.timezone_hours)


class FaceModel(BaseModel):
    glazing: float = Field(0.0, ge=0, le=1)
    overhang: float = Field(0.0, ge=0)
    fin: float = Field(0.0, ge=0, le=1)
    h_fin: float = Field(0.0, ge=0, le=1)
    cill_lift: float = Field(0.0, ge=0)
    head_drop: float = Field(0.0, ge=0)
    window_center_ratio: float = Field(0.0, ge=-1, le=1)


class RooflightModel(BaseModel):
    width: float | None = Field(None, gt=0)
    depth: float | None = Field(None, gt=0)
    u_value: float | None = Field(None, ge=0)
    g_value: float | None = Field(None, ge=0, le=1)


class BlindsModel(BaseModel):
    enabled: bool = False
    threshold_w_m2: float = Field(400.0, ge=0)
    reduction: float = Field(0.5, ge=0, le=1)


def _default_faces() -> dict[Face, FaceModel]:
    return {Face.SOUTH: FaceModel(glazing=0.4)}


class BuildingModel(BaseModel):
    location: LocationModel = Field(default_factory=LocationModel)
    width: float = Field(2.4, gt=0)
    depth: float = Field(4.8, gt=0)
    height: float = Field(2.6, gt=0)
    orientation_deg: float = 0.0
    u_value_preset: str = DEFAULT_U_VALUE_PRESET
    g_glass: float = Field(0.4, ge=0, le=1)
    faces: dict[Face, FaceModel] = Field(default_factory=_default_faces)
    rooflight: RooflightModel | None = None
    blinds: BlindsModel = Field(default_factory=BlindsModel)
    internal_gain_w: float = Field(180.0, ge=0)
    ground_albedo: float = Field(0.25, ge=0, le=1)
    comfort_min_c: float = 18.0
    comfort_max_c: float = 23.0

    def geometry(self) -> Geometry:
        return Geometry(width=self.width, depth=self.depth, height=self.height)

    def face_state(self) -> FaceState:
        return {face: FaceConfig(**model.model_dump()) for face, model in self.faces.items()}

    def rooflight_layout(self, cfg: SimConfig, open_height: float | None = None) -> RooflightLayout | None:
        if self.rooflight is None:
            return None
        return resolve_rooflight(self.geometry(), self.rooflight.width, self.rooflight.depth, open_height, cfg)

    def sim_config(self) -> SimConfig:
        low, high = sorted((self.comfort_min_c, self.comfort_max_c))
        band = ComfortBand(min_c=low, max_c=high)
        return dataclasses.replace(DEFAULT, comfort_band=band)

    def to_params(self, cfg: SimConfig) -> BuildingParams:
        geometry = self.geometry()
        layout = self.rooflight_layout(cfg)
        rooflight = None
        if layout is not None and self.rooflight is not None:
            rooflight = Rooflight(area_m2=layout.area_m2, u_value=self.rooflight.u_value, g_value=self.rooflight.g_value)
        return BuildingParams(
            location=self.location.to_location(),
            geometry=geometry,
            envelope=u_value_preset(self.u_value_preset).envelope(self.g_glass),
            windows=build_windows(self.face_state(), geometry, self.orientation_deg, cfg),
            rooflight=rooflight,
            blinds=Blinds(**self.blinds.model_dump()),
            internal_gain_w=self.internal_gain_w,
            ground_albedo=self.ground_albedo,
        )


class ManualOpeningsModel(BaseModel):
    segments: dict[str, int | bool] = Field(default_factory=dict)  # "<face>:<leaf>" -> 0 closed, 1 top-hung, 2 turn
    rooflight_open_height_m: float = Field(0.0, ge=0)
    stack_height_m: float | None = Field(None, gt=0)
    fixed_wind_ms: float | None = Field(None, ge=0)

    def to_openings(self, building: BuildingModel, cfg: SimConfig) -> ManualOpenings:
        opened = calculate_opened_window_area(building.face_state(), building.geometry(), self.segments, cfg)
        layout = building.rooflight_layout(cfg, self.rooflight_open_height_m)
        return ManualOpenings(
            area_by_face=opened.area_by_face(),
            roof_opening_area_m2=layout.opening_area_m2 if layout is not None else 0.0,
            stack_height_m=self.stack_height_m,
            fixed_wind_ms=self.fixed_wind_ms,
        )


class VentilationModel(BaseModel):
    preset: str = DEFAULT_VENTILATION_PRESET
    ach_total: float | None = Field(None, ge=0)
    night_purge: bool = False
    mvhr_control: bool | None = None
    manual_open_ach: float = Field(0.0, ge=0)
    manual: ManualOpeningsModel | None = None

    def to_strategy(self, building: BuildingModel, cfg: SimConfig) -> VentilationStrategy:
        overrides: dict[str, object] = {"night_purge": self.night_purge, "manual_open_ach": self.manual_open_ach}
        if self.ach_total is not None:
            overrides["ach_total"] = self.ach_total
        if self.mvhr_control is not None:
            overrides["mvhr_control"] = self.mvhr_control
        if self.manual is not None:
            overrides["manual"] = self.manual.to_openings(building, cfg)
        return VentilationStrategy.from_preset(ventilation_preset(self.preset), **overrides)


class HourlyWeatherModel(BaseModel):
    dry_bulb_c: float
    dni_wh_m2: float = 0.0
    dhi_wh_m2: float = 0.0
    ghi_wh_m2: float = 0.0
    wind_ms: float | None = None
    sky_cover_tenths: float | None = None


class WeatherModel(BaseModel):
    mode: Literal["manual", "inferred"] = "manual"
    summer_peak_c: float | None = None
    winter_peak_c: float | None = None
    diurnal_range_c: float = Field(8.0, ge=0, le=30)
    mean_wind_ms: float | None = Field(None, ge=0)
    cloud_cover_tenths: float | None = Field(None, ge=0, le=10)
    elevation_m: float = Field(0.0, ge=0)
    dataset_name: str = ""
    dataset: list[HourlyWeatherModel] | None = None

    def profile(self, location: Location) -> SyntheticProfile:
        if self.mode == "inferred":
            climate = infer_climatology(location.latitude, location.longitude, self.elevation_m, location.timezone_hours)
            return manual_profile(
                climate,
                self.summer_peak_c,
                self.winter_peak_c,
                self.diurnal_range_c,
                self.mean_wind_ms if self.mean_wind_ms is not None else climate.mean_wind_ms,
                self.cloud_cover_tenths if self.cloud_cover_tenths is not None else climate.cloud_cover_tenths,
            )
        return SyntheticProfile(
            location=location,
            summer_peak_c=self.summer_peak_c if self.summer_peak_c is not None else 23.0,
            winter_peak_c=self.winter_peak_c if self.winter_peak_c is not None else 6.0,
            diurnal_range_c=self.diurnal_range_c,
            mean_wind_ms=self.mean_wind_ms,
            cloud_cover_tenths=self.cloud_cover_tenths,
        )

    def weather_dataset(self, location: Location) -> WeatherDataset | None:
        if self.dataset is None:
            return None
        return WeatherDataset(
            hours=tuple(HourlyWeather(**h.model_dump()) for h in self.dataset),
            timezone_hours=location.timezone_hours,
            name=self.dataset_name,
        )

    def source(self, location: Location, cfg: SimConfig) -> WeatherSource:
        return make_weather_source(self.profile(location), self.weather_dataset(location), cfg)


class ScenarioModel(BaseModel):
    building: BuildingModel = Field(default_factory=BuildingModel)
    ventilation: VentilationModel = Field(default_factory=VentilationModel)
    weather: WeatherModel = Field(default_factory=WeatherModel)


class SnapshotRequest(ScenarioModel):
    time: datetime
    outdoor_c: float | None = None
    indoor_c: float | None = None


class DayRequest(ScenarioModel):
    day: date
    step_minutes: int = Field(DEFAULT.step_minutes, gt=0, le=60)


class PvModel(BaseModel):
    tilt_deg: float = Field(0.0, ge=0, le=90)
    azimuth_deg: float = 180.0
    ground_albedo: float = Field(0.2, ge=0, le=1)
    area_m2: float = Field(0.0, ge=0)
    module_efficiency: float = Field(0.2, ge=0, le=1)

    def to_array(self) -> PvArray:
        return PvArray(
            plane=PvPlane(self.tilt_deg, self.azimuth_deg, self.ground_albedo),
            area_m2=self.area_m2,
            module_efficiency=self.module_efficiency,
        )


class AnnualRequest(ScenarioModel):
    pv: PvModel = Field(default_factory=PvModel)
    include_series: bool = True


class ManualVentilationRequest(BaseModel):
    building: BuildingModel = Field(default_factory=BuildingModel)
    openings: ManualOpeningsModel = Field(default_factory=ManualOpeningsModel)
    wind_ms: float | None = Field(None, ge=0)
    indoor_c: float = 21.0
    outdoor_c: float | None = None
    target_ach: float | None = Field(None, ge=0)


class OpenedAreaRequest(BaseModel):
    building: BuildingModel = Field(default_factory=BuildingModel)
    segments: dict[str, int | bool] = Field(default_factory=dict)


def _local_naive(when: datetime, location: Location) -> datetime:
    """Aware datetimes are shifted to the site's standard time; naive ones are taken as local."""
    if when.tzinfo is None:
        return when
    return when.astimezone(timezone(timedelta(hours=location.timezone_hours))).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/presets")
def get_presets() -> dict[str, Any]:
    return {
        "u_values": {key: dataclasses.asdict(p) for key, p in U_VALUE_PRESETS.items()},
        "ventilation": {key: dataclasses.asdict(p) for key, p in VENTILATION_PRESETS.items()},
        "leti_targets": {key: dataclasses.asdict(t) for key, t in LETI_TARGETS.items()},
        "defaults": {
            "u_value": DEFAULT_U_VALUE_PRESET,
            "ventilation": DEFAULT_VENTILATION_PRESET,
            "leti_target": DEFAULT_LETI_TARGET,
        },
    }


@app.post("/snapshot")
def post_snapshot(req: SnapshotRequest) -> dict[str, Any]:
    cfg = req.building.sim_config()
    params = req.building.to_params(cfg)
    when = _local_naive(req.time, params.location)
    forcing = req.weather.source(params.location, cfg).forcing_at(when)
    outdoor = req.outdoor_c if req.outdoor_c is not None else forcing.outdoor_c
    strategy = req.ventilation.to_strategy(req.building, cfg)

    # Policy needs an indoor temperature; without one assume the middle of the comfort band.
    indoor_guess = req.indoor_c if req.indoor_c is not None else (cfg.comfort_band.min_c + cfg.comfort_band.max_c) / 2
    decision = decide_ventilation(
        strategy, indoor_guess, outdoor, when.hour, params.geometry, wind_ms=forcing.wind_ms, cfg=cfg
    )
    snapshot = compute_snapshot(
        params,
        when,
        outdoor,
        ach_total=decision.ach_total,
        heat_recovery_efficiency=decision.effective_heat_recovery,
        radiation=forcing.radiation,
        indoor_c=req.indoor_c,
        cfg=cfg,
    )
    day_start = datetime(when.year, when.month, when.day)
    return {
        "snapshot": _jsonable(snapshot),
        "total_ua": snapshot.total_ua,
        "fabric_loss_w": snapshot.fabric_loss_w,
        "ventilation_loss_w": snapshot.ventilation_loss_w,
        "element_losses_w": snapshot.element_losses(),
        "comfort": cfg.comfort_band.classify(snapshot.indoor_c),
        "illuminance_level": classify_illuminance(snapshot.illuminance_lux, cfg.daylight),
        "ventilation": _jsonable(decision),
        "weather_source": forcing.source,
        "sun_times": _jsonable(day_sun_times(day_start, params.location)),
        "faces": _jsonable(build_preview_face_configs(req.building.face_state(), params.geometry, cfg)),
    }


@app.post("/simulate/day")
def post_simulate_day(req: DayRequest) -> dict[str, Any]:
    cfg = req.building.sim_config()
    params = req.building.to_params(cfg)
    study = run_day_study(
        params,
        req.day,
        req.weather.source(params.location, cfg),
        req.ventilation.to_strategy(req.building, cfg),
        step_minutes=req.step_minutes,
        cfg=cfg,
    )
    return {
        "step_minutes": study.simulation.step_minutes,
        "records": [dataclasses.asdict(r) for r in study.simulation.records],
        "summary": dataclasses.asdict(study.summary) if study.summary is not None else None,
        "cost": dataclasses.asdict(study.cost) if study.cost is not None else None,
    }


@app.post("/simulate/annual")
def post_simulate_annual(req: AnnualRequest) -> dict[str, Any]:
    cfg = req.building.sim_config()
    params = req.building.to_params(cfg)
    dataset = req.weather.weather_dataset(params.location)
    study = run_annual_study(
        params,
        req.weather.source(params.location, cfg),
        req.ventilation.to_strategy(req.building, cfg),
        pv=req.pv.to_array(),
        cfg=cfg,
    )
    response: dict[str, Any] = {
        "statistics": dataclasses.asdict(study.statistics),
        "solar_kwh": study.solar_kwh,
        "cost": dataclasses.asdict(study.cost),
        "meets_leti_target": {key: study.cost.meets_target(t) for key, t in LETI_TARGETS.items()},
        "dataset_validation": dataclasses.asdict(validate_dataset(dataset, cfg)) if dataset is not None else None,
    }
    if req.include_series:
        response["records"] = [dataclasses.asdict(r) for r in study.simulation.records]
    return response


@app.post("/ventilation/manual")
def post_manual_ventilation(req: ManualVentilationRequest) -> dict[str, Any]:
    cfg = req.building.sim_config()
    geometry = req.building.geometry()
    openings = req.openings.to_openings(req.building, cfg)
    result = natural_ventilation(
        openings.area_by_face,
        geometry.volume,
        roof_opening_area_m2=openings.roof_opening_area_m2,
        room_height_m=geometry.height,
        stack_height_m=openings.stack_height_m,
        wind_ms=openings.fixed_wind_ms if openings.fixed_wind_ms is not None else req.wind_ms,
        indoor_c=req.indoor_c,
        outdoor_c=req.outdoor_c,
        cfg=cfg,
    )
    ach_total = cfg.ach_infiltration + result.ach
    return {
        "natural_ventilation": _jsonable(result),
        "ach_total": ach_total,
        "draught": _jsonable(assess_draught(ach_total, req.indoor_c, req.outdoor_c, cfg)),
        "required_opening": (
            _jsonable(required_opening_area(req.target_ach, geometry.volume, cfg)) if req.target_ach is not None else None
        ),
    }


@app.post("/windows/opened-area")
def post_opened_area(req: OpenedAreaRequest) -> dict[str, Any]:
    cfg = req.building.sim_config()
    opened = calculate_opened_window_area(req.building.face_state(), req.building.geometry(), req.segments, cfg)
    return {
        "by_face": _jsonable(opened.by_face),
        "total_open_area_m2": opened.total_open_area_m2,
        "open_leaf_count": opened.open_leaf_count,
        "total_leaf_count": opened.total_leaf_count,
    }
