"""Tests for JSON serialization."""

import json
from dataclasses import replace

import pytest

from quake.core.converter import convert
from quake.core.errors import SerializationError
from quake.core.report import decode_report
from quake.core.serializer import events_list_to_json, to_json


QUAKE_ID = "20240101071609_0_VXSE53_270000"
TSUNAMI_ID = "20240101072227_0_VTSE41_270000"
EEW_ID = "20240101071020_0_VXSE43_270000"


class TestToJson:
    """Tests for to_json()."""

    def test_quake_layout(self, fixture_xml):
        quake = convert(QUAKE_ID, decode_report(fixture_xml("vxse53.xml")))

        data = json.loads(to_json(quake))

        assert data["code"] == 551
        assert data["issue"] == {
            "source": "気象庁",
            "time": "2024/01/01 16:14:00",
            "type": "DetailScale",
            "correct": "None",
        }
        assert data["earthquake"]["hypocenter"] == {
            "name": "石川県能登地方",
            "latitude": 37.5,
            "longitude": 137.2,
            "depth": 10,
            "magnitude": 7.6,
        }
        assert data["earthquake"]["maxScale"] == 70
        assert data["points"][0] == {"pref": "石川県", "addr": "志賀町香能＊", "isArea": False, "scale": 70}
        assert data["comments"]["freeFormComment"].startswith("［震源要素等の補足］")

    def test_tsunami_layout(self, fixture_xml):
        tsunami = convert(TSUNAMI_ID, decode_report(fixture_xml("vtse41.xml")))

        data = json.loads(to_json(tsunami))

        assert data["code"] == 552
        assert data["cancelled"] is False
        assert data["areas"][0] == {
            "grade": "MajorWarning",
            "immediate": True,
            "name": "石川県能登",
            "firstHeight": {"condition": "ただちに津波来襲と予測"},
            "maxHeight": {"description": "５ｍ", "value": 5.0},
        }
        assert data["areas"][1]["firstHeight"] == {"arrivalTime": "2024/01/01 16:12:00"}

    def test_eew_layout(self, fixture_xml):
        eew = convert(EEW_ID, decode_report(fixture_xml("vxse43.xml")))

        data = json.loads(to_json(eew))

        assert data["code"] == 556
        assert data["issue"] == {"time": "2024/01/01 16:10:20", "eventId": "20240101161006", "serial": "2"}
        assert data["earthquake"]["hypocenter"]["reduceName"] == "石川県"
        assert data["areas"][0]["scaleTo"] == 99

    def test_keeps_japanese_text(self, fixture_xml):
        quake = convert(QUAKE_ID, decode_report(fixture_xml("vxse53.xml")))

        assert "石川県能登地方" in to_json(quake)

    def test_byte_identical_for_same_input(self, fixture_xml):
        first = to_json(convert(QUAKE_ID, decode_report(fixture_xml("vxse53.xml"))))
        second = to_json(convert(QUAKE_ID, decode_report(fixture_xml("vxse53.xml"))))

        assert first == second

    def test_nan_is_a_serialization_error(self, fixture_xml):
        quake = convert(QUAKE_ID, decode_report(fixture_xml("vxse53.xml")))
        hypocenter = replace(quake.earthquake.hypocenter, magnitude=float("nan"))
        broken = replace(quake, earthquake=replace(quake.earthquake, hypocenter=hypocenter))

        with pytest.raises(SerializationError):
            to_json(broken, QUAKE_ID)


def test_events_list_to_json():
    assert json.loads(events_list_to_json(["a", "b"])) == {"events": ["a", "b"]}
