"""Conversion validation - Pure functions.

Cross-checks a converted event against its raw report. Values are
re-derived from the report through a different route than the converter
takes: the human-readable `description` attributes ("Ｍ７．６",
"北緯３７．５度　東経１３７．２度　深さ　１０ｋｍ"), the Japanese kind
names instead of kind codes, the intensity tree instead of the summary
MaxInt, and plain string slicing for timestamps.

A mismatch that makes the served record factually wrong is an ERROR;
one that only affects formatting or metadata is a WARNING.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum

from quake.core.classify import ReportKind, classify_event
from quake.core.codes import INTENSITY_SCALES
from quake.core.config import ConversionPolicy
from quake.core.errors import ValidationError, ValidationWarning
from quake.core.events import EarlyWarning, NormalizedEvent, Quake, Tsunami
from quake.core.report import Coordinate, EarthquakeElement, Magnitude, Report


class FindingKind(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Finding:
    """A single discrepancy between raw report and converted event.

    Attributes:
        kind: ERROR (blocks serving) or WARNING (non-blocking)
        message: Human-readable description
    """
    kind: FindingKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


def _error(message: str) -> Finding:
    return Finding(FindingKind.ERROR, message)


def _warning(message: str) -> Finding:
    return Finding(FindingKind.WARNING, message)


# Float comparison tolerance for one-decimal JMA values
_TOLERANCE = 0.05

_LATITUDE_RE = re.compile(r"(北緯|南緯)\s*(\d+(?:\.\d+)?)度")
_LONGITUDE_RE = re.compile(r"(東経|西経)\s*(\d+(?:\.\d+)?)度")
_DEPTH_RE = re.compile(r"深さ\s*(\d+)km")
_MAGNITUDE_RE = re.compile(r"^M(\d+(?:\.\d+)?)$")
_HEIGHT_RE = re.compile(r"^(\d+(?:\.\d+)?)m$")


def _normalize(text: str) -> str:
    """Fold full-width digits/letters and ideographic spaces to ASCII."""
    return unicodedata.normalize("NFKC", text).strip()


def magnitude_from_description(magnitude: Magnitude) -> float | None:
    """Read the magnitude from its description ("Ｍ６．１" -> 6.1).

    Returns -1.0 for "Ｍ不明"/"Ｍ８を超える巨大地震", None when the
    description is absent or unreadable.
    """
    if not magnitude.description:
        return None

    description = _normalize(magnitude.description)
    match = _MAGNITUDE_RE.match(description)
    if match:
        return float(match.group(1))
    if "不明" in description or "超える" in description:
        return -1.0
    return None


def coordinate_from_description(
    coordinate: Coordinate,
) -> tuple[float | None, float | None, int | None] | None:
    """Read latitude/longitude/depth from a coordinate description.

    Returns None when there is no description. Parts that the description
    does not mention come back as None; "震源要素不明" yields the unknown
    markers (-200, -200, -1) and "ごく浅い" yields depth 0.
    """
    if not coordinate.description:
        return None

    description = _normalize(coordinate.description)
    if "不明" in description and "度" not in description:
        return -200.0, -200.0, -1

    latitude = longitude = None
    depth: int | None = None

    lat_match = _LATITUDE_RE.search(description)
    if lat_match:
        latitude = float(lat_match.group(2))
        if lat_match.group(1) == "南緯":
            latitude = -latitude

    lon_match = _LONGITUDE_RE.search(description)
    if lon_match:
        longitude = float(lon_match.group(2))
        if lon_match.group(1) == "西経":
            longitude = -longitude

    depth_match = _DEPTH_RE.search(description)
    if depth_match:
        depth = int(depth_match.group(1))
    elif "ごく浅い" in description:
        depth = 0

    return latitude, longitude, depth


def epsp_time_from_iso(value: str | None) -> str | None:
    """Re-derive the EPSP time text from a "+09:00" ISO timestamp by slicing.

    Returns None when the timestamp is not in JST and cannot be sliced.
    """
    if value is None or not value.endswith("+09:00") or len(value) < 19:
        return None
    return value[:19].replace("-", "/").replace("T", " ")


def _check_time(label: str, raw: str | None, converted: str, kind: FindingKind) -> list[Finding]:
    expected = epsp_time_from_iso(raw)
    if expected is not None and expected != converted:
        return [Finding(kind, f"{label} is {converted!r}, report says {expected!r}")]
    return []


def _check_hypocenter(
    earthquake: EarthquakeElement | None,
    name: str,
    latitude: float,
    longitude: float,
    depth: int,
    magnitude: float,
) -> list[Finding]:
    findings: list[Finding] = []
    if earthquake is None:
        return findings

    if earthquake.magnitude is not None:
        expected = magnitude_from_description(earthquake.magnitude)
        if expected is not None and abs(expected - magnitude) > _TOLERANCE:
            findings.append(_error(
                f"magnitude is {magnitude}, report describes {expected}"
            ))

    hypocenter = earthquake.hypocenter
    if hypocenter is None:
        return findings

    if (hypocenter.name or "") != name:
        findings.append(_error(
            f"hypocenter name is {name!r}, report says {hypocenter.name!r}"
        ))

    if hypocenter.coordinate is not None:
        described = coordinate_from_description(hypocenter.coordinate)
        if described is not None:
            exp_lat, exp_lon, exp_depth = described
            if exp_lat is not None and abs(exp_lat - latitude) > _TOLERANCE:
                findings.append(_error(f"latitude is {latitude}, report describes {exp_lat}"))
            if exp_lon is not None and abs(exp_lon - longitude) > _TOLERANCE:
                findings.append(_error(f"longitude is {longitude}, report describes {exp_lon}"))
            if exp_depth is not None and exp_depth != depth:
                findings.append(_error(f"depth is {depth}km, report describes {exp_depth}km"))

    return findings


def validate_quake(event_id: str, report: Report, quake: Quake) -> list[Finding]:
    """Cross-check a Quake event against its report.

    Pure function.
    """
    findings: list[Finding] = []
    earthquake = report.body.earthquakes[0] if report.body.earthquakes else None
    hypocenter = quake.earthquake.hypocenter

    if quake.issue.type != "ScalePrompt":
        findings.extend(_check_hypocenter(
            earthquake,
            hypocenter.name,
            hypocenter.latitude,
            hypocenter.longitude,
            hypocenter.depth,
            hypocenter.magnitude,
        ))
        if earthquake is not None:
            findings.extend(_check_time(
                "earthquake time", earthquake.origin_time, quake.earthquake.time, FindingKind.ERROR,
            ))

    observation = report.body.observation
    if observation is not None:
        # Max scale re-derived from the prefecture level of the tree
        pref_scales = [
            INTENSITY_SCALES[p.max_int] for p in observation.prefs if p.max_int in INTENSITY_SCALES
        ]
        if pref_scales and max(pref_scales) != quake.earthquake.max_scale:
            findings.append(_error(
                f"maxScale is {quake.earthquake.max_scale}, "
                f"prefectures report up to {max(pref_scales)}"
            ))

        pref_names = {p.name for p in observation.prefs}
        if quake.issue.type == "ScalePrompt":
            expected_points = sum(len(p.areas) for p in observation.prefs)
        else:
            expected_points = sum(
                len(city.stations) + (1 if city.condition and "未入電" in city.condition else 0)
                for p in observation.prefs
                for area in p.areas
                for city in area.cities
            )
        if expected_points != len(quake.points):
            findings.append(_error(
                f"{len(quake.points)} points converted, report has {expected_points}"
            ))

        for point in quake.points:
            if point.pref not in pref_names:
                findings.append(_error(f"point {point.addr!r} has unknown prefecture {point.pref!r}"))
            if point.scale > quake.earthquake.max_scale and point.scale in INTENSITY_SCALES.values():
                findings.append(_error(
                    f"point {point.addr!r} scale {point.scale} exceeds maxScale "
                    f"{quake.earthquake.max_scale}"
                ))
    elif quake.points:
        findings.append(_error(f"{len(quake.points)} points converted, report has no observation"))

    findings.extend(_check_time(
        "issue time", report.head.report_date_time, quake.issue.time, FindingKind.WARNING,
    ))

    comments = report.body.comments
    free_form = (comments.free_form or "") if comments else ""
    if free_form != quake.free_form_comment:
        findings.append(_warning("free form comment differs from report"))

    forecast_text = _normalize(comments.forecast_text or "") if comments else ""
    if "津波の心配はありません" in forecast_text and quake.earthquake.domestic_tsunami != "None":
        findings.append(_warning(
            f"domesticTsunami is {quake.earthquake.domestic_tsunami!r}, "
            "report says there is no tsunami concern"
        ))

    return findings


def grade_from_kind_name(name: str | None) -> str | None:
    """Re-derive a tsunami grade from the kind name, None if inactive."""
    if not name or "解除" in name or "なし" in name:
        return None
    if "大津波警報" in name:
        return "MajorWarning"
    if "津波警報" in name:
        return "Warning"
    if "津波注意報" in name:
        return "Watch"
    return "Unknown"


def validate_tsunami(event_id: str, report: Report, tsunami: Tsunami) -> list[Finding]:
    """Cross-check a Tsunami event against its report.

    Pure function.
    """
    findings: list[Finding] = []
    items = report.body.tsunami_items or ()

    expected_grades = {}
    for item in items:
        grade = grade_from_kind_name(item.kind_name)
        if grade is not None:
            expected_grades[item.area_name] = grade

    cancelled = report.head.info_type == "取消" or not expected_grades
    if cancelled != tsunami.cancelled:
        findings.append(_error(f"cancelled is {tsunami.cancelled}, report implies {cancelled}"))

    if not cancelled:
        if len(expected_grades) != len(tsunami.areas):
            findings.append(_error(
                f"{len(tsunami.areas)} areas converted, report has {len(expected_grades)} active"
            ))

        by_name = {item.area_name: item for item in items}
        for area in tsunami.areas:
            expected = expected_grades.get(area.name)
            if expected is None:
                findings.append(_error(f"area {area.name!r} is not active in report"))
                continue
            if expected != area.grade:
                findings.append(_error(
                    f"area {area.name!r} grade is {area.grade}, report says {expected}"
                ))

            item = by_name[area.name]
            immediate = "ただちに" in (item.first_height_condition or "")
            if immediate != area.immediate:
                findings.append(_error(
                    f"area {area.name!r} immediate is {area.immediate}, report implies {immediate}"
                ))

            if item.max_height is not None and item.max_height.description:
                match = _HEIGHT_RE.match(_normalize(item.max_height.description))
                if match and area.max_height_value is not None:
                    if abs(float(match.group(1)) - area.max_height_value) > _TOLERANCE:
                        findings.append(_error(
                            f"area {area.name!r} max height is {area.max_height_value}m, "
                            f"report describes {match.group(1)}m"
                        ))

            if item.first_height_arrival_time is not None and area.first_height_arrival_time is not None:
                findings.extend(_check_time(
                    f"area {area.name!r} arrival time",
                    item.first_height_arrival_time,
                    area.first_height_arrival_time,
                    FindingKind.ERROR,
                ))

    findings.extend(_check_time(
        "issue time", report.head.report_date_time, tsunami.issue.time, FindingKind.WARNING,
    ))

    return findings


def validate_early_warning(event_id: str, report: Report, eew: EarlyWarning) -> list[Finding]:
    """Cross-check an EarlyWarning event against its report.

    Pure function.
    """
    findings: list[Finding] = []

    test = (report.control.status or "") != "通常"
    if test != eew.test:
        findings.append(_error(f"test is {eew.test}, report status is {report.control.status!r}"))

    cancelled = report.head.info_type == "取消"
    if cancelled != eew.cancelled:
        findings.append(_error(f"cancelled is {eew.cancelled}, report info type is {report.head.info_type!r}"))

    if eew.issue.event_id != report.head.event_id:
        findings.append(_warning(
            f"issue eventId is {eew.issue.event_id!r}, report says {report.head.event_id!r}"
        ))
    if eew.issue.serial != report.head.serial:
        findings.append(_warning(
            f"issue serial is {eew.issue.serial!r}, report says {report.head.serial!r}"
        ))

    if not cancelled and eew.earthquake is not None:
        earthquake = report.body.earthquakes[0] if report.body.earthquakes else None
        hypocenter = eew.earthquake.hypocenter
        findings.extend(_check_hypocenter(
            earthquake,
            hypocenter.name,
            hypocenter.latitude,
            hypocenter.longitude,
            hypocenter.depth,
            hypocenter.magnitude,
        ))
        if earthquake is not None:
            findings.extend(_check_time(
                "origin time", earthquake.origin_time, eew.earthquake.origin_time, FindingKind.ERROR,
            ))

        forecast = report.body.forecast
        expected_areas = sum(len(p.areas) for p in forecast.prefs) if forecast else 0
        if expected_areas != len(eew.areas):
            findings.append(_error(
                f"{len(eew.areas)} areas converted, report forecasts {expected_areas}"
            ))

    findings.extend(_check_time(
        "issue time", report.head.report_date_time, eew.issue.time, FindingKind.WARNING,
    ))

    return findings


def validate(event_id: str, report: Report, event: NormalizedEvent) -> list[Finding]:
    """Cross-check a converted event against its raw report.

    Pure function. Never modifies the event; an empty list means the
    conversion checked out.

    Args:
        event_id: EventID the report was fetched for
        report: Decoded report
        event: Output of convert() for the same report

    Returns:
        List of findings, possibly empty
    """
    kind = classify_event(event_id)

    expected_type = {
        ReportKind.TSUNAMI: Tsunami,
        ReportKind.EARLY_WARNING: EarlyWarning,
        ReportKind.QUAKE: Quake,
    }[kind]
    if not isinstance(event, expected_type):
        return [_error(
            f"{event_id} classifies as {kind.value} but was converted to {type(event).__name__}"
        )]

    if isinstance(event, Tsunami):
        return validate_tsunami(event_id, report, event)
    if isinstance(event, EarlyWarning):
        return validate_early_warning(event_id, report, event)
    return validate_quake(event_id, report, event)


def errors_of(findings: list[Finding]) -> list[Finding]:
    return [f for f in findings if f.kind is FindingKind.ERROR]


def warnings_of(findings: list[Finding]) -> list[Finding]:
    return [f for f in findings if f.kind is FindingKind.WARNING]


def apply_policy(event_id: str, findings: list[Finding], policy: ConversionPolicy) -> None:
    """Decide whether a validated event may be served.

    Pure function.

    Raises:
        ValidationError: Error findings exist and policy.force is off
        ValidationWarning: Warning findings exist and neither
            policy.force nor policy.ignore_warning is on
    """
    if errors_of(findings) and not policy.force:
        raise ValidationError(
            f"{event_id} has validation errors: {'; '.join(str(f) for f in findings)}",
            event_id=event_id,
            findings=findings,
        )

    if warnings_of(findings) and not policy.force and not policy.ignore_warning:
        raise ValidationWarning(
            f"{event_id} has validation warnings: {'; '.join(str(f) for f in findings)}",
            event_id=event_id,
            findings=findings,
        )
