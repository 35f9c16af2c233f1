"""Current-conditions snapshot builder and derived display fields."""

from datetime import UTC, date, datetime, tzinfo

from weatherdash.config.schema import DisplaySettings, TimeFormat
from weatherdash.forecast.units import (
    convert_temperature,
    format_wind_speed,
    round_half_up,
    temperature_symbol,
    wind_direction_label,
)
from weatherdash.models.weather import (
    AirQuality,
    AirQualityReading,
    CurrentConditions,
    ExtendedConditions,
    Snapshot,
)

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{code}@2x.png"
DIRECTION_PLACEHOLDER = "--"
GUST_PLACEHOLDER = "N/A"
VISIBILITY_PLACEHOLDER = "N/A"

# ---- Moon phase ----

SYNODIC_MONTH_DAYS = 29.530588853
REFERENCE_NEW_MOON = datetime(2000, 1, 6, tzinfo=UTC)
MOON_PHASES = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)

# ---- Air quality bands (US AQI), upper bound inclusive ----

AQI_BANDS = (
    (50, "Good", "#00b894"),
    (100, "Moderate", "#fdcb6e"),
    (150, "Unhealthy for Sensitive Groups", "#e17055"),
)
AQI_TOP_BAND = ("Unhealthy", "#d63031")
AQI_PROGRESS_CEILING = 200


def approximate_moon_phase(when: date | datetime) -> str:
    """Name of the lunar phase on a given date.

    Counts synodic months since the 2000-01-06 new moon. Ignores orbital
    variation, so it can be off by a phase near boundaries. Plain dates are
    taken as UTC midnight, naive datetimes as UTC.
    """
    if isinstance(when, datetime):
        moment = when if when.tzinfo is not None else when.replace(tzinfo=UTC)
    else:
        moment = datetime(when.year, when.month, when.day, tzinfo=UTC)

    elapsed_days = (moment - REFERENCE_NEW_MOON).total_seconds() / 86400
    fraction = (elapsed_days / SYNODIC_MONTH_DAYS) % 1.0
    index = round_half_up(fraction * len(MOON_PHASES)) % len(MOON_PHASES)
    return MOON_PHASES[index]


def classify_air_quality(
    aqi: int, pm2_5: float | None = None, pm10: float | None = None
) -> AirQuality:
    """Place a US AQI value in its labelled band."""
    for rank, (upper, label, color) in enumerate(AQI_BANDS):
        if aqi <= upper:
            break
    else:
        rank = len(AQI_BANDS)
        label, color = AQI_TOP_BAND

    return AirQuality(
        aqi=aqi,
        label=label,
        severity_rank=rank,
        color=color,
        progress_pct=min(aqi, AQI_PROGRESS_CEILING) / 2,
        pm2_5=pm2_5,
        pm10=pm10,
    )


def format_time(moment: datetime, time_format: TimeFormat | str) -> str:
    """Clock time as "3:05 PM" (12h) or "15:05" (24h)."""
    if TimeFormat(time_format) == TimeFormat.H24:
        return f"{moment.hour:02d}:{moment.minute:02d}"
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_datetime(moment: datetime, time_format: TimeFormat | str) -> str:
    """Header date line, e.g. "Monday, January 5, 2026 3:05 PM"."""
    return (
        f"{moment.strftime('%A')}, {moment.strftime('%B')} {moment.day}, "
        f"{moment.year} {format_time(moment, time_format)}"
    )


def _air_quality(reading: AirQualityReading | None) -> AirQuality | None:
    if reading is None:
        return None
    return classify_air_quality(reading.aqi, reading.pm2_5, reading.pm10)


def build_snapshot(
    current: CurrentConditions,
    settings: DisplaySettings,
    now: datetime,
    extended: ExtendedConditions | None = None,
    tz: tzinfo | None = None,
) -> Snapshot:
    """Normalize current conditions into display values for the given settings."""
    sample = current.sample
    extended = extended or ExtendedConditions.unavailable()

    feels_like_c = (
        sample.feels_like_c if sample.feels_like_c is not None else sample.temperature_c
    )

    if sample.wind_degrees is not None:
        direction = wind_direction_label(sample.wind_degrees)
    else:
        direction = DIRECTION_PLACEHOLDER

    if sample.wind_gust_ms is not None:
        gust = format_wind_speed(sample.wind_gust_ms, settings.wind_unit)
    else:
        gust = GUST_PLACEHOLDER

    if current.visibility_m is not None:
        visibility = f"{current.visibility_m / 1000:.1f} km"
    else:
        visibility = VISIBILITY_PLACEHOLDER

    uv = extended.uv_index if extended.uv_index is not None else current.uv_index

    cloudiness = (
        f"{sample.cloudiness_pct}%" if sample.cloudiness_pct is not None else "N/A"
    )

    return Snapshot(
        name=current.name,
        country=current.country,
        icon_code=sample.condition.code,
        icon_url=ICON_URL_TEMPLATE.format(code=sample.condition.code),
        condition_main=sample.condition.main,
        condition_description=sample.condition.description,
        temperature=round_half_up(
            convert_temperature(sample.temperature_c, settings.temp_unit)
        ),
        feels_like=round_half_up(convert_temperature(feels_like_c, settings.temp_unit)),
        temp_symbol=temperature_symbol(settings.temp_unit),
        humidity=f"{sample.humidity_pct}%",
        pressure=f"{sample.pressure_hpa} hPa",
        cloudiness=cloudiness,
        visibility=visibility,
        wind_speed=format_wind_speed(sample.wind_speed_ms, settings.wind_unit),
        wind_direction=direction,
        wind_degrees=sample.wind_degrees,
        wind_gust=gust,
        sunrise=format_time(
            datetime.fromtimestamp(current.sunrise, tz=tz), settings.time_format
        ),
        sunset=format_time(
            datetime.fromtimestamp(current.sunset, tz=tz), settings.time_format
        ),
        uv_index=round_half_up(uv) if uv is not None else None,
        moon_phase=approximate_moon_phase(now),
        observed_at=format_datetime(now.astimezone(tz), settings.time_format),
        air_quality=_air_quality(extended.air_quality),
    )
