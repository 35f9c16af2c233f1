"""Weather data models: parsed samples, aggregates and the display view."""

from dataclasses import dataclass, field

from weatherdash.config.schema import DisplaySettings


@dataclass(frozen=True)
class Condition:
    code: str  # provider icon id, e.g. "10d"
    main: str
    description: str


@dataclass(frozen=True)
class WeatherSample:
    timestamp: int  # epoch seconds
    temperature_c: float
    temp_min_c: float
    temp_max_c: float
    humidity_pct: int
    pressure_hpa: int
    wind_speed_ms: float
    condition: Condition
    feels_like_c: float | None = None
    wind_degrees: int | None = None
    wind_gust_ms: float | None = None
    cloudiness_pct: int | None = None


@dataclass(frozen=True)
class CurrentConditions:
    sample: WeatherSample
    name: str
    country: str
    sunrise: int  # epoch seconds
    sunset: int
    visibility_m: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    uv_index: float | None = None


@dataclass(frozen=True)
class AirQualityReading:
    aqi: int  # US AQI scale
    pm2_5: float | None = None
    pm10: float | None = None


@dataclass(frozen=True)
class ExtendedConditions:
    uv_index: float | None = None
    air_quality: AirQualityReading | None = None

    @classmethod
    def unavailable(cls) -> "ExtendedConditions":
        """Fallback used when no extended source answered."""
        return cls()


@dataclass(frozen=True)
class DailyForecast:
    date_key: str  # YYYY-MM-DD in the viewer's zone
    representative_timestamp: int
    temp_max_c: float
    temp_min_c: float
    condition: Condition
    sample_count: int = 1  # forecast entries folded into this day


@dataclass(frozen=True)
class AirQuality:
    aqi: int
    label: str
    severity_rank: int  # 0 (Good) .. 3 (Unhealthy)
    color: str
    progress_pct: float
    pm2_5: float | None = None
    pm10: float | None = None


@dataclass(frozen=True)
class Snapshot:
    """Display-ready current conditions."""

    name: str
    country: str
    icon_code: str
    icon_url: str
    condition_main: str
    condition_description: str
    temperature: int
    feels_like: int
    temp_symbol: str
    humidity: str
    pressure: str
    cloudiness: str
    visibility: str
    wind_speed: str
    wind_direction: str
    wind_degrees: int | None
    wind_gust: str
    sunrise: str
    sunset: str
    uv_index: int | None
    moon_phase: str
    observed_at: str
    air_quality: AirQuality | None = None


@dataclass
class WeatherView:
    """Everything the presentation adapter needs for one render."""

    snapshot: Snapshot
    settings: DisplaySettings
    generation: int
    fetched_at: str
    daily: list[DailyForecast] = field(default_factory=list)
    hourly: list[WeatherSample] = field(default_factory=list)
    forecast_available: bool = True
