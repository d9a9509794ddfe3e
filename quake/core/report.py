"""JMA XML report models and decoding - Pure functions.

Decodes the raw XML of a JMA seismology/tsunami report (VXSE5x, VXSE43,
VTSE41) into immutable dataclasses. Values are kept as the strings found
in the document; typing them is the converter's job, and the validator
reads the same strings through its own route.

JMA spreads the document over several XML namespaces (Control, Head,
Body, jmx_eb). Elements are matched by local name only.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from quake.core.errors import DecodeError


@dataclass(frozen=True)
class Control:
    """Report envelope (<Control>)."""
    title: str | None = None
    date_time: str | None = None
    status: str | None = None
    editorial_office: str | None = None
    publishing_office: str | None = None


@dataclass(frozen=True)
class Head:
    """Report header (<Head>).

    Attributes:
        title: Report title, e.g. "震源・震度に関する情報"
        report_date_time: When the report was issued (ISO 8601, JST)
        target_date_time: The time the report is about
        event_id: JMA's own event ID (not the feed-derived EventID)
        info_type: "発表", "訂正" or "取消"
        serial: Serial number for updates of the same event
        info_kind: e.g. "地震情報", "津波警報・注意報・予報"
        headline: Headline text
    """
    title: str | None = None
    report_date_time: str | None = None
    target_date_time: str | None = None
    event_id: str | None = None
    info_type: str | None = None
    serial: str | None = None
    info_kind: str | None = None
    headline: str | None = None


@dataclass(frozen=True)
class Coordinate:
    """ISO 6709 coordinate string plus its human-readable description."""
    value: str
    description: str | None = None
    datum: str | None = None


@dataclass(frozen=True)
class Magnitude:
    value: str
    type: str | None = None
    condition: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class Hypocenter:
    name: str | None = None
    code: str | None = None
    coordinate: Coordinate | None = None
    reduce_name: str | None = None


@dataclass(frozen=True)
class EarthquakeElement:
    """One <Earthquake> block of the body."""
    origin_time: str | None = None
    arrival_time: str | None = None
    condition: str | None = None
    hypocenter: Hypocenter | None = None
    magnitude: Magnitude | None = None


@dataclass(frozen=True)
class IntensityStation:
    name: str
    code: str | None = None
    intensity: str | None = None


@dataclass(frozen=True)
class IntensityCity:
    name: str
    code: str | None = None
    max_int: str | None = None
    condition: str | None = None
    stations: tuple[IntensityStation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IntensityArea:
    name: str
    code: str | None = None
    max_int: str | None = None
    cities: tuple[IntensityCity, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IntensityPref:
    name: str
    code: str | None = None
    max_int: str | None = None
    areas: tuple[IntensityArea, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IntensityObservation:
    """Observed intensities (<Intensity><Observation>)."""
    max_int: str | None = None
    prefs: tuple[IntensityPref, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ForecastArea:
    """One forecast region of an earthquake early warning."""
    name: str
    code: str | None = None
    kind_name: str | None = None
    kind_code: str | None = None
    int_from: str | None = None
    int_to: str | None = None
    arrival_time: str | None = None
    condition: str | None = None


@dataclass(frozen=True)
class ForecastPref:
    name: str
    code: str | None = None
    areas: tuple[ForecastArea, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IntensityForecast:
    """Forecast intensities (<Intensity><Forecast>), EEW only."""
    int_from: str | None = None
    int_to: str | None = None
    prefs: tuple[ForecastPref, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TsunamiHeight:
    value: str | None = None
    description: str | None = None
    condition: str | None = None


@dataclass(frozen=True)
class TsunamiItem:
    """One coastal region of a tsunami forecast."""
    area_name: str
    area_code: str | None = None
    kind_name: str | None = None
    kind_code: str | None = None
    last_kind_name: str | None = None
    last_kind_code: str | None = None
    first_height_arrival_time: str | None = None
    first_height_condition: str | None = None
    max_height: TsunamiHeight | None = None


@dataclass(frozen=True)
class Comments:
    forecast_codes: tuple[str, ...] = field(default_factory=tuple)
    forecast_text: str | None = None
    var_codes: tuple[str, ...] = field(default_factory=tuple)
    var_text: str | None = None
    free_form: str | None = None


@dataclass(frozen=True)
class Body:
    earthquakes: tuple[EarthquakeElement, ...] = field(default_factory=tuple)
    observation: IntensityObservation | None = None
    forecast: IntensityForecast | None = None
    tsunami_items: tuple[TsunamiItem, ...] | None = None
    comments: Comments | None = None
    text: str | None = None


@dataclass(frozen=True)
class Report:
    """A decoded JMA report."""
    control: Control
    head: Head
    body: Body


def _local(tag: str) -> str:
    """Strip the "{namespace}" prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1]


def _child(el: ET.Element | None, name: str) -> ET.Element | None:
    if el is None:
        return None
    for child in el:
        if _local(child.tag) == name:
            return child
    return None


def _children(el: ET.Element | None, name: str) -> list[ET.Element]:
    if el is None:
        return []
    return [child for child in el if _local(child.tag) == name]


def _path(el: ET.Element | None, *names: str) -> ET.Element | None:
    for name in names:
        el = _child(el, name)
    return el


def _text(el: ET.Element | None, *names: str) -> str | None:
    """Stripped text of the element at the given child path, None if absent."""
    target = _path(el, *names)
    if target is None or target.text is None:
        return None
    text = target.text.strip()
    return text or None


def _decode_control(el: ET.Element | None) -> Control:
    return Control(
        title=_text(el, "Title"),
        date_time=_text(el, "DateTime"),
        status=_text(el, "Status"),
        editorial_office=_text(el, "EditorialOffice"),
        publishing_office=_text(el, "PublishingOffice"),
    )


def _decode_head(el: ET.Element) -> Head:
    return Head(
        title=_text(el, "Title"),
        report_date_time=_text(el, "ReportDateTime"),
        target_date_time=_text(el, "TargetDateTime"),
        event_id=_text(el, "EventID"),
        info_type=_text(el, "InfoType"),
        serial=_text(el, "Serial"),
        info_kind=_text(el, "InfoKind"),
        headline=_text(el, "Headline", "Text"),
    )


def _decode_hypocenter(el: ET.Element | None) -> Hypocenter | None:
    area = _child(el, "Area")
    if area is None:
        return None

    coordinate = None
    coord_el = _child(area, "Coordinate")
    if coord_el is not None:
        coordinate = Coordinate(
            value=(coord_el.text or "").strip(),
            description=coord_el.get("description"),
            datum=coord_el.get("datum"),
        )

    return Hypocenter(
        name=_text(area, "Name"),
        code=_text(area, "Code"),
        coordinate=coordinate,
        reduce_name=_text(area, "ReduceName"),
    )


def _decode_earthquake(el: ET.Element) -> EarthquakeElement:
    magnitude = None
    mag_el = _child(el, "Magnitude")
    if mag_el is not None:
        magnitude = Magnitude(
            value=(mag_el.text or "").strip(),
            type=mag_el.get("type"),
            condition=mag_el.get("condition"),
            description=mag_el.get("description"),
        )

    return EarthquakeElement(
        origin_time=_text(el, "OriginTime"),
        arrival_time=_text(el, "ArrivalTime"),
        condition=_text(el, "Condition"),
        hypocenter=_decode_hypocenter(_child(el, "Hypocenter")),
        magnitude=magnitude,
    )


def _decode_observation(el: ET.Element | None) -> IntensityObservation | None:
    if el is None:
        return None

    prefs = []
    for pref in _children(el, "Pref"):
        areas = []
        for area in _children(pref, "Area"):
            cities = []
            for city in _children(area, "City"):
                stations = tuple(
                    IntensityStation(
                        name=_text(st, "Name") or "",
                        code=_text(st, "Code"),
                        intensity=_text(st, "Int"),
                    )
                    for st in _children(city, "IntensityStation")
                )
                cities.append(IntensityCity(
                    name=_text(city, "Name") or "",
                    code=_text(city, "Code"),
                    max_int=_text(city, "MaxInt"),
                    condition=_text(city, "Condition"),
                    stations=stations,
                ))
            areas.append(IntensityArea(
                name=_text(area, "Name") or "",
                code=_text(area, "Code"),
                max_int=_text(area, "MaxInt"),
                cities=tuple(cities),
            ))
        prefs.append(IntensityPref(
            name=_text(pref, "Name") or "",
            code=_text(pref, "Code"),
            max_int=_text(pref, "MaxInt"),
            areas=tuple(areas),
        ))

    return IntensityObservation(
        max_int=_text(el, "MaxInt"),
        prefs=tuple(prefs),
    )


def _decode_forecast(el: ET.Element | None) -> IntensityForecast | None:
    if el is None:
        return None

    prefs = []
    for pref in _children(el, "Pref"):
        areas = tuple(
            ForecastArea(
                name=_text(area, "Name") or "",
                code=_text(area, "Code"),
                kind_name=_text(area, "Category", "Kind", "Name"),
                kind_code=_text(area, "Category", "Kind", "Code"),
                int_from=_text(area, "ForecastInt", "From"),
                int_to=_text(area, "ForecastInt", "To"),
                arrival_time=_text(area, "ArrivalTime"),
                condition=_text(area, "Condition"),
            )
            for area in _children(pref, "Area")
        )
        prefs.append(ForecastPref(
            name=_text(pref, "Name") or "",
            code=_text(pref, "Code"),
            areas=areas,
        ))

    return IntensityForecast(
        int_from=_text(el, "ForecastInt", "From"),
        int_to=_text(el, "ForecastInt", "To"),
        prefs=tuple(prefs),
    )


def _decode_tsunami(el: ET.Element | None) -> tuple[TsunamiItem, ...] | None:
    if el is None:
        return None

    items = []
    for item in _children(_child(el, "Forecast"), "Item"):
        max_height = None
        max_el = _child(item, "MaxHeight")
        if max_el is not None:
            height_el = _child(max_el, "TsunamiHeight")
            if height_el is not None:
                max_height = TsunamiHeight(
                    value=(height_el.text or "").strip() or None,
                    description=height_el.get("description"),
                    condition=height_el.get("condition"),
                )
            else:
                max_height = TsunamiHeight(condition=_text(max_el, "Condition"))

        items.append(TsunamiItem(
            area_name=_text(item, "Area", "Name") or "",
            area_code=_text(item, "Area", "Code"),
            kind_name=_text(item, "Category", "Kind", "Name"),
            kind_code=_text(item, "Category", "Kind", "Code"),
            last_kind_name=_text(item, "Category", "LastKind", "Name"),
            last_kind_code=_text(item, "Category", "LastKind", "Code"),
            first_height_arrival_time=_text(item, "FirstHeight", "ArrivalTime"),
            first_height_condition=_text(item, "FirstHeight", "Condition"),
            max_height=max_height,
        ))

    return tuple(items)


def _codes(el: ET.Element | None) -> tuple[str, ...]:
    """Split a space separated <Code> list ("0215 0230")."""
    code = _text(el, "Code")
    return tuple(code.split()) if code else ()


def _decode_comments(el: ET.Element | None) -> Comments | None:
    if el is None:
        return None

    forecast = _child(el, "ForecastComment")
    var = _child(el, "VarComment")
    return Comments(
        forecast_codes=_codes(forecast),
        forecast_text=_text(forecast, "Text"),
        var_codes=_codes(var),
        var_text=_text(var, "Text"),
        free_form=_text(el, "FreeFormComment"),
    )


def _decode_body(el: ET.Element | None) -> Body:
    if el is None:
        return Body()

    intensity = _child(el, "Intensity")
    return Body(
        earthquakes=tuple(_decode_earthquake(e) for e in _children(el, "Earthquake")),
        observation=_decode_observation(_child(intensity, "Observation")),
        forecast=_decode_forecast(_child(intensity, "Forecast")),
        tsunami_items=_decode_tsunami(_child(el, "Tsunami")),
        comments=_decode_comments(_child(el, "Comments")),
        text=_text(el, "Text"),
    )


def decode_report(data: bytes | str) -> Report:
    """Decode a JMA report XML document.

    Pure function.

    Args:
        data: Raw XML document

    Returns:
        Decoded Report

    Raises:
        DecodeError: If the document is not well-formed XML or has no
            <Report>/<Head> structure
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DecodeError(f"Malformed report XML: {e}") from e

    if _local(root.tag) != "Report":
        raise DecodeError(f"Unexpected root element <{_local(root.tag)}>, expected <Report>")

    head = _child(root, "Head")
    if head is None:
        raise DecodeError("Report has no <Head> element")

    return Report(
        control=_decode_control(_child(root, "Control")),
        head=_decode_head(head),
        body=_decode_body(_child(root, "Body")),
    )
