"""Normalized event models - Pure data structures.

The three variants a JMA report converts into. Field layout and key names
follow the P2P地震情報 (EPSP) JSON API, so `to_dict()` output can be served
to clients of that API unchanged:

- Quake: code 551, seismic intensity / hypocenter information
- Tsunami: code 552, tsunami warnings and advisories
- EarlyWarning: code 556, earthquake early warning (警報)

Unknown numeric values are -1, as in EPSP.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


# Issuer used in every "issue.source" field
JMA_SOURCE = "気象庁"


@dataclass(frozen=True)
class QuakeHypocenter:
    """Hypocenter of a Quake event.

    Attributes:
        name: Epicenter region name ("" if unknown)
        latitude: Degrees north, -200 if unknown
        longitude: Degrees east, -200 if unknown
        depth: Kilometers, 0 for very shallow, -1 if unknown
        magnitude: Magnitude, -1 if unknown
    """
    name: str
    latitude: float
    longitude: float
    depth: int
    magnitude: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "depth": self.depth,
            "magnitude": self.magnitude,
        }


@dataclass(frozen=True)
class QuakeIssue:
    source: str
    time: str
    type: str
    correct: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "time": self.time,
            "type": self.type,
            "correct": self.correct,
        }


@dataclass(frozen=True)
class QuakeEarthquake:
    time: str
    hypocenter: QuakeHypocenter
    max_scale: int
    domestic_tsunami: str
    foreign_tsunami: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "hypocenter": self.hypocenter.to_dict(),
            "maxScale": self.max_scale,
            "domesticTsunami": self.domestic_tsunami,
            "foreignTsunami": self.foreign_tsunami,
        }


@dataclass(frozen=True)
class QuakePoint:
    """One observation point (station, or region for ScalePrompt)."""
    pref: str
    addr: str
    is_area: bool
    scale: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "pref": self.pref,
            "addr": self.addr,
            "isArea": self.is_area,
            "scale": self.scale,
        }


@dataclass(frozen=True)
class Quake:
    """Seismic intensity / hypocenter information (VXSE51, VXSE52, VXSE53)."""
    code: ClassVar[int] = 551

    time: str
    issue: QuakeIssue
    earthquake: QuakeEarthquake
    points: tuple[QuakePoint, ...] = field(default_factory=tuple)
    free_form_comment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "time": self.time,
            "issue": self.issue.to_dict(),
            "earthquake": self.earthquake.to_dict(),
            "points": [p.to_dict() for p in self.points],
            "comments": {"freeFormComment": self.free_form_comment},
        }


@dataclass(frozen=True)
class TsunamiIssue:
    source: str
    time: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"source": self.source, "time": self.time, "type": self.type}


@dataclass(frozen=True)
class TsunamiArea:
    """One coastal forecast region.

    Attributes:
        grade: "MajorWarning", "Warning", "Watch" or "Unknown"
        immediate: True when arrival is expected immediately
        name: Forecast region name
        first_height_arrival_time: Expected first wave arrival, if given
        first_height_condition: Arrival condition text, if given
        max_height_description: Expected maximum height, as JMA words it
        max_height_value: Expected maximum height in meters, if numeric
    """
    grade: str
    immediate: bool
    name: str
    first_height_arrival_time: str | None = None
    first_height_condition: str | None = None
    max_height_description: str | None = None
    max_height_value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        first_height: dict[str, Any] = {}
        if self.first_height_arrival_time is not None:
            first_height["arrivalTime"] = self.first_height_arrival_time
        if self.first_height_condition is not None:
            first_height["condition"] = self.first_height_condition

        max_height: dict[str, Any] = {}
        if self.max_height_description is not None:
            max_height["description"] = self.max_height_description
        if self.max_height_value is not None:
            max_height["value"] = self.max_height_value

        return {
            "grade": self.grade,
            "immediate": self.immediate,
            "name": self.name,
            "firstHeight": first_height,
            "maxHeight": max_height,
        }


@dataclass(frozen=True)
class Tsunami:
    """Tsunami warnings and advisories (VTSE41)."""
    code: ClassVar[int] = 552

    time: str
    cancelled: bool
    issue: TsunamiIssue
    areas: tuple[TsunamiArea, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "time": self.time,
            "cancelled": self.cancelled,
            "issue": self.issue.to_dict(),
            "areas": [a.to_dict() for a in self.areas],
        }


@dataclass(frozen=True)
class EEWHypocenter:
    name: str
    reduce_name: str
    latitude: float
    longitude: float
    depth: int
    magnitude: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "reduceName": self.reduce_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "depth": self.depth,
            "magnitude": self.magnitude,
        }


@dataclass(frozen=True)
class EEWEarthquake:
    origin_time: str
    arrival_time: str
    condition: str
    hypocenter: EEWHypocenter

    def to_dict(self) -> dict[str, Any]:
        return {
            "originTime": self.origin_time,
            "arrivalTime": self.arrival_time,
            "condition": self.condition,
            "hypocenter": self.hypocenter.to_dict(),
        }


@dataclass(frozen=True)
class EEWIssue:
    time: str
    event_id: str
    serial: str

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "eventId": self.event_id, "serial": self.serial}


@dataclass(frozen=True)
class EEWArea:
    """One forecast region of an early warning.

    Attributes:
        pref: Prefecture name
        name: Forecast region name
        scale_from: Lower bound of forecast intensity (EPSP scale)
        scale_to: Upper bound, 99 for "or more"
        kind_code: JMA kind code ("10", "11", "19")
        arrival_time: Expected arrival of the main motion, None if
            already arrived or not estimated
    """
    pref: str
    name: str
    scale_from: int
    scale_to: int
    kind_code: str
    arrival_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pref": self.pref,
            "name": self.name,
            "scaleFrom": self.scale_from,
            "scaleTo": self.scale_to,
            "kindCode": self.kind_code,
            "arrivalTime": self.arrival_time,
        }


@dataclass(frozen=True)
class EarlyWarning:
    """Earthquake early warning (VXSE43)."""
    code: ClassVar[int] = 556

    time: str
    test: bool
    cancelled: bool
    issue: EEWIssue
    earthquake: EEWEarthquake | None = None
    areas: tuple[EEWArea, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "time": self.time,
            "test": self.test,
            "issue": self.issue.to_dict(),
            "cancelled": self.cancelled,
        }
        if self.earthquake is not None:
            data["earthquake"] = self.earthquake.to_dict()
        data["areas"] = [a.to_dict() for a in self.areas]
        return data


NormalizedEvent = Union[Quake, Tsunami, EarlyWarning]
