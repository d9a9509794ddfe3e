"""Report conversion - Pure functions.

Converts a decoded JMA report into its normalized event variant. The
variant is chosen from the EventID (see classify.py); each converter
either returns a complete event or raises ConversionError. Required
fields are never filled with defaults.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from quake.core.classify import ReportKind, classify_event
from quake.core.codes import (
    DOMESTIC_TSUNAMI_CODES,
    FOREIGN_HEAD_TITLE,
    FOREIGN_TSUNAMI_CODES,
    INFO_TYPE_CANCEL,
    INFO_TYPE_CORRECTION,
    INTENSITY_SCALES,
    QUAKE_ISSUE_TYPES,
    QUAKE_TYPES_WITH_HYPOCENTER,
    SCALE_OVER,
    SCALE_UNKNOWN,
    SCALE_UNRECEIVED_5_LOWER,
    STATUS_NORMAL,
    TSUNAMI_GRADES,
    TSUNAMI_IMMEDIATE_CONDITION,
    TSUNAMI_INACTIVE_CODES,
)
from quake.core.errors import ConversionError
from quake.core.events import (
    JMA_SOURCE,
    EarlyWarning,
    EEWArea,
    EEWEarthquake,
    EEWHypocenter,
    EEWIssue,
    NormalizedEvent,
    Quake,
    QuakeEarthquake,
    QuakeHypocenter,
    QuakeIssue,
    QuakePoint,
    Tsunami,
    TsunamiArea,
    TsunamiIssue,
)
from quake.core.report import EarthquakeElement, Magnitude, Report

JST = timezone(timedelta(hours=9), name="JST")

EPSP_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

# Latitude/longitude used by EPSP for an unknown hypocenter
COORDINATE_UNKNOWN = -200.0
DEPTH_UNKNOWN = -1
MAGNITUDE_UNKNOWN = -1.0

# ISO 6709 as used by JMA: "+37.5+137.2-10000/" (degrees, depth in meters)
_COORDINATE_RE = re.compile(
    r"^(?P<lat>[+-]\d+(?:\.\d+)?)(?P<lon>[+-]\d+(?:\.\d+)?)(?P<depth>[+-]\d+)?/$"
)


def _require(value: str | None, field: str, event_id: str) -> str:
    if value is None or value == "":
        raise ConversionError(
            f"{event_id}: required field {field} is missing",
            event_id=event_id,
            field=field,
        )
    return value


def format_time(value: str | None, field: str, event_id: str) -> str:
    """Convert an ISO 8601 JMA timestamp into EPSP's "YYYY/MM/DD hh:mm:ss" JST.

    Pure function.

    Raises:
        ConversionError: If the value is missing or not ISO 8601
    """
    value = _require(value, field, event_id)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ConversionError(
            f"{event_id}: {field} is not an ISO 8601 time: {value!r}",
            event_id=event_id,
            field=field,
        ) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=JST)

    return parsed.astimezone(JST).strftime(EPSP_TIME_FORMAT)


def intensity_to_scale(value: str | None, field: str, event_id: str) -> int:
    """Map a JMA intensity string ("5-", "6+", ...) onto an EPSP scale."""
    value = _require(value, field, event_id)
    try:
        return INTENSITY_SCALES[value]
    except KeyError:
        raise ConversionError(
            f"{event_id}: {field} has unknown intensity {value!r}",
            event_id=event_id,
            field=field,
        ) from None


def parse_coordinate(value: str, field: str, event_id: str) -> tuple[float, float, int]:
    """Parse a JMA ISO 6709 coordinate.

    Pure function.

    Args:
        value: Coordinate text, "" when JMA could not determine it
        field: Field path for error messages
        event_id: EventID for error messages

    Returns:
        (latitude, longitude, depth_km); unknown parts are -200/-200/-1

    Raises:
        ConversionError: If the text is present but not ISO 6709
    """
    if value == "":
        return COORDINATE_UNKNOWN, COORDINATE_UNKNOWN, DEPTH_UNKNOWN

    match = _COORDINATE_RE.match(value)
    if match is None:
        raise ConversionError(
            f"{event_id}: {field} is not an ISO 6709 coordinate: {value!r}",
            event_id=event_id,
            field=field,
        )

    depth = DEPTH_UNKNOWN
    if match.group("depth") is not None:
        # Negative meters below sea level; "+0"/"-0" is very shallow
        depth = abs(int(match.group("depth"))) // 1000

    return float(match.group("lat")), float(match.group("lon")), depth


def parse_magnitude(magnitude: Magnitude | None, field: str, event_id: str) -> float:
    """Parse a <jmx_eb:Magnitude> value.

    "NaN" is accepted only together with a condition attribute
    (e.g. "Ｍ不明"), which is JMA's explicit "unknown".

    Raises:
        ConversionError: If the element is missing or the value invalid
    """
    if magnitude is None:
        raise ConversionError(
            f"{event_id}: required field {field} is missing",
            event_id=event_id,
            field=field,
        )

    try:
        value = float(magnitude.value)
    except ValueError:
        raise ConversionError(
            f"{event_id}: {field} is not a number: {magnitude.value!r}",
            event_id=event_id,
            field=field,
        ) from None

    if math.isnan(value):
        if not magnitude.condition:
            raise ConversionError(
                f"{event_id}: {field} is NaN without a condition",
                event_id=event_id,
                field=field,
            )
        return MAGNITUDE_UNKNOWN

    return value


def _first_earthquake(report: Report) -> EarthquakeElement | None:
    return report.body.earthquakes[0] if report.body.earthquakes else None


def _quake_issue_type(report: Report, event_id: str) -> str:
    if report.head.title == FOREIGN_HEAD_TITLE:
        return "Foreign"

    title = _require(report.control.title, "Control/Title", event_id)
    try:
        return QUAKE_ISSUE_TYPES[title]
    except KeyError:
        raise ConversionError(
            f"{event_id}: unsupported quake report title {title!r}",
            event_id=event_id,
            field="Control/Title",
        ) from None


def _quake_hypocenter(earthquake: EarthquakeElement | None, event_id: str) -> QuakeHypocenter:
    if earthquake is None:
        raise ConversionError(
            f"{event_id}: required field Body/Earthquake is missing",
            event_id=event_id,
            field="Body/Earthquake",
        )
    if earthquake.hypocenter is None:
        raise ConversionError(
            f"{event_id}: required field Body/Earthquake/Hypocenter is missing",
            event_id=event_id,
            field="Body/Earthquake/Hypocenter",
        )

    hypocenter = earthquake.hypocenter
    magnitude = parse_magnitude(earthquake.magnitude, "Body/Earthquake/Magnitude", event_id)

    coordinate = hypocenter.coordinate.value if hypocenter.coordinate is not None else ""
    latitude, longitude, depth = parse_coordinate(
        coordinate, "Body/Earthquake/Hypocenter/Area/Coordinate", event_id,
    )

    return QuakeHypocenter(
        name=hypocenter.name or "",
        latitude=latitude,
        longitude=longitude,
        depth=depth,
        magnitude=magnitude,
    )


def _quake_points(report: Report, issue_type: str, event_id: str) -> tuple[QuakePoint, ...]:
    observation = report.body.observation
    if observation is None:
        return ()

    points = []
    for pref in observation.prefs:
        for area in pref.areas:
            if issue_type == "ScalePrompt":
                points.append(QuakePoint(
                    pref=pref.name,
                    addr=area.name,
                    is_area=True,
                    scale=intensity_to_scale(
                        area.max_int, "Intensity/Observation/Pref/Area/MaxInt", event_id,
                    ),
                ))
                continue

            for city in area.cities:
                if city.condition and "未入電" in city.condition:
                    points.append(QuakePoint(
                        pref=pref.name,
                        addr=city.name,
                        is_area=False,
                        scale=SCALE_UNRECEIVED_5_LOWER,
                    ))
                for station in city.stations:
                    points.append(QuakePoint(
                        pref=pref.name,
                        addr=station.name,
                        is_area=False,
                        scale=intensity_to_scale(
                            station.intensity, "IntensityStation/Int", event_id,
                        ),
                    ))

    return tuple(points)


def _tsunami_comment(codes: tuple[str, ...], table: dict[str, str]) -> str:
    for code in codes:
        if code in table:
            return table[code]
    return "Unknown"


def convert_quake(event_id: str, report: Report) -> Quake:
    """Convert a seismic intensity / hypocenter report (VXSE51/52/53).

    Pure function.

    Raises:
        ConversionError: If a field required by the report's type is
            missing or invalid
    """
    if report.head.info_type == INFO_TYPE_CANCEL:
        raise ConversionError(
            f"{event_id}: cancelled quake reports have no event record",
            event_id=event_id,
            field="Head/InfoType",
        )

    issue_type = _quake_issue_type(report, event_id)
    issue_time = format_time(report.head.report_date_time, "Head/ReportDateTime", event_id)
    earthquake = _first_earthquake(report)

    if issue_type in QUAKE_TYPES_WITH_HYPOCENTER:
        hypocenter = _quake_hypocenter(earthquake, event_id)
        origin_time = format_time(
            earthquake.origin_time if earthquake else None,
            "Body/Earthquake/OriginTime",
            event_id,
        )
    else:
        # Intensity-only report: the hypocenter is not determined yet
        hypocenter = QuakeHypocenter(
            name="",
            latitude=COORDINATE_UNKNOWN,
            longitude=COORDINATE_UNKNOWN,
            depth=DEPTH_UNKNOWN,
            magnitude=MAGNITUDE_UNKNOWN,
        )
        origin_time = format_time(report.head.target_date_time, "Head/TargetDateTime", event_id)

    observation = report.body.observation
    max_scale = SCALE_UNKNOWN
    if observation is not None and observation.max_int is not None:
        max_scale = intensity_to_scale(
            observation.max_int, "Intensity/Observation/MaxInt", event_id,
        )

    comments = report.body.comments
    forecast_codes = comments.forecast_codes if comments else ()

    return Quake(
        time=issue_time,
        issue=QuakeIssue(
            source=JMA_SOURCE,
            time=issue_time,
            type=issue_type,
            correct="Unknown" if report.head.info_type == INFO_TYPE_CORRECTION else "None",
        ),
        earthquake=QuakeEarthquake(
            time=origin_time,
            hypocenter=hypocenter,
            max_scale=max_scale,
            domestic_tsunami=_tsunami_comment(forecast_codes, DOMESTIC_TSUNAMI_CODES),
            foreign_tsunami=_tsunami_comment(forecast_codes, FOREIGN_TSUNAMI_CODES),
        ),
        points=_quake_points(report, issue_type, event_id),
        free_form_comment=(comments.free_form or "") if comments else "",
    )


def _height_value(value: str | None, field: str, event_id: str) -> float | None:
    if value is None:
        return None
    try:
        height = float(value)
    except ValueError:
        raise ConversionError(
            f"{event_id}: {field} is not a number: {value!r}",
            event_id=event_id,
            field=field,
        ) from None
    return None if math.isnan(height) else height


def convert_tsunami(event_id: str, report: Report) -> Tsunami:
    """Convert a tsunami warning/advisory report (VTSE41).

    Pure function. Areas whose kind is "no tsunami" or "lifted" are left
    out; a report with no remaining area is a cancellation.

    Raises:
        ConversionError: If the forecast or an area's kind is missing or
            has an unknown code
    """
    issue_time = format_time(report.head.report_date_time, "Head/ReportDateTime", event_id)
    issue = TsunamiIssue(source=JMA_SOURCE, time=issue_time, type="Focus")

    if report.head.info_type == INFO_TYPE_CANCEL:
        return Tsunami(time=issue_time, cancelled=True, issue=issue)

    if report.body.tsunami_items is None:
        raise ConversionError(
            f"{event_id}: required field Body/Tsunami is missing",
            event_id=event_id,
            field="Body/Tsunami",
        )

    areas = []
    for item in report.body.tsunami_items:
        kind_code = _require(item.kind_code, "Tsunami/Forecast/Item/Category/Kind/Code", event_id)
        if kind_code in TSUNAMI_INACTIVE_CODES:
            continue
        if kind_code not in TSUNAMI_GRADES:
            raise ConversionError(
                f"{event_id}: unknown tsunami kind code {kind_code!r} for {item.area_name}",
                event_id=event_id,
                field="Tsunami/Forecast/Item/Category/Kind/Code",
            )

        arrival_time = None
        if item.first_height_arrival_time is not None:
            arrival_time = format_time(
                item.first_height_arrival_time,
                "Tsunami/Forecast/Item/FirstHeight/ArrivalTime",
                event_id,
            )

        description = None
        value = None
        if item.max_height is not None:
            description = item.max_height.description or item.max_height.condition
            value = _height_value(
                item.max_height.value,
                "Tsunami/Forecast/Item/MaxHeight/TsunamiHeight",
                event_id,
            )

        areas.append(TsunamiArea(
            grade=TSUNAMI_GRADES[kind_code],
            immediate=item.first_height_condition == TSUNAMI_IMMEDIATE_CONDITION,
            name=_require(item.area_name, "Tsunami/Forecast/Item/Area/Name", event_id),
            first_height_arrival_time=arrival_time,
            first_height_condition=item.first_height_condition,
            max_height_description=description,
            max_height_value=value,
        ))

    return Tsunami(
        time=issue_time,
        cancelled=not areas,
        issue=issue,
        areas=tuple(areas),
    )


def _forecast_scale(value: str | None, field: str, event_id: str) -> int:
    if value == "over":
        return SCALE_OVER
    if value == "不明":
        return SCALE_UNKNOWN
    return intensity_to_scale(value, field, event_id)


def convert_early_warning(event_id: str, report: Report) -> EarlyWarning:
    """Convert an earthquake early warning (VXSE43).

    Pure function.

    Raises:
        ConversionError: If the header, hypocenter or a forecast area is
            incomplete
    """
    issue_time = format_time(report.head.report_date_time, "Head/ReportDateTime", event_id)
    status = _require(report.control.status, "Control/Status", event_id)
    issue = EEWIssue(
        time=issue_time,
        event_id=_require(report.head.event_id, "Head/EventID", event_id),
        serial=_require(report.head.serial, "Head/Serial", event_id),
    )

    if report.head.info_type == INFO_TYPE_CANCEL:
        return EarlyWarning(
            time=issue_time,
            test=status != STATUS_NORMAL,
            cancelled=True,
            issue=issue,
        )

    earthquake = _first_earthquake(report)
    if earthquake is None or earthquake.hypocenter is None:
        raise ConversionError(
            f"{event_id}: required field Body/Earthquake/Hypocenter is missing",
            event_id=event_id,
            field="Body/Earthquake/Hypocenter",
        )

    hypocenter = earthquake.hypocenter
    coordinate = hypocenter.coordinate.value if hypocenter.coordinate is not None else ""
    latitude, longitude, depth = parse_coordinate(
        coordinate, "Body/Earthquake/Hypocenter/Area/Coordinate", event_id,
    )

    areas = []
    if report.body.forecast is not None:
        for pref in report.body.forecast.prefs:
            for area in pref.areas:
                arrival_time = None
                if area.arrival_time is not None:
                    arrival_time = format_time(
                        area.arrival_time, "Intensity/Forecast/Pref/Area/ArrivalTime", event_id,
                    )
                areas.append(EEWArea(
                    pref=pref.name,
                    name=area.name,
                    scale_from=_forecast_scale(
                        area.int_from, "Intensity/Forecast/Pref/Area/ForecastInt/From", event_id,
                    ),
                    scale_to=_forecast_scale(
                        area.int_to, "Intensity/Forecast/Pref/Area/ForecastInt/To", event_id,
                    ),
                    kind_code=_require(
                        area.kind_code, "Intensity/Forecast/Pref/Area/Category/Kind/Code", event_id,
                    ),
                    arrival_time=arrival_time,
                ))

    return EarlyWarning(
        time=issue_time,
        test=status != STATUS_NORMAL,
        cancelled=False,
        issue=issue,
        earthquake=EEWEarthquake(
            origin_time=format_time(earthquake.origin_time, "Body/Earthquake/OriginTime", event_id),
            arrival_time=format_time(earthquake.arrival_time, "Body/Earthquake/ArrivalTime", event_id),
            condition=earthquake.condition or "",
            hypocenter=EEWHypocenter(
                name=_require(hypocenter.name, "Body/Earthquake/Hypocenter/Area/Name", event_id),
                reduce_name=hypocenter.reduce_name or "",
                latitude=latitude,
                longitude=longitude,
                depth=depth,
                magnitude=parse_magnitude(earthquake.magnitude, "Body/Earthquake/Magnitude", event_id),
            ),
        ),
        areas=tuple(areas),
    )


CONVERTERS: dict[ReportKind, Callable[[str, Report], NormalizedEvent]] = {
    ReportKind.TSUNAMI: convert_tsunami,
    ReportKind.EARLY_WARNING: convert_early_warning,
    ReportKind.QUAKE: convert_quake,
}


def convert(event_id: str, report: Report) -> NormalizedEvent:
    """Classify an event and run the matching converter.

    Pure function: the same report always yields an equal event.

    Args:
        event_id: EventID the report was fetched for
        report: Decoded report

    Returns:
        Quake, Tsunami or EarlyWarning

    Raises:
        ConversionError: If the report lacks a required field
    """
    return CONVERTERS[classify_event(event_id)](event_id, report)
