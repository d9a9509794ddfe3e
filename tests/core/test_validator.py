"""Tests for conversion validation and the serving policy."""

from dataclasses import replace

import pytest

from quake.core.config import ConversionPolicy
from quake.core.converter import convert
from quake.core.errors import ValidationError, ValidationWarning
from quake.core.report import Coordinate, Magnitude, decode_report
from quake.core.validator import (
    Finding,
    FindingKind,
    apply_policy,
    coordinate_from_description,
    epsp_time_from_iso,
    grade_from_kind_name,
    magnitude_from_description,
    validate,
)


QUAKE_ID = "20240101071609_0_VXSE53_270000"
PROMPT_ID = "20240101071147_0_VXSE51_270000"
TSUNAMI_ID = "20240101072227_0_VTSE41_270000"
EEW_ID = "20240101071020_0_VXSE43_270000"

ERROR = Finding(FindingKind.ERROR, "magnitude is 1.0, report describes 7.6")
WARNING = Finding(FindingKind.WARNING, "free form comment differs from report")


def _kinds(findings):
    return [f.kind for f in findings]


class TestDescriptionParsing:
    """Tests for the independent re-derivation helpers."""

    def test_magnitude_full_width(self):
        assert magnitude_from_description(Magnitude(value="7.6", description="Ｍ７．６")) == 7.6

    def test_magnitude_unknown(self):
        assert magnitude_from_description(Magnitude(value="NaN", description="Ｍ不明")) == -1.0

    def test_magnitude_without_description(self):
        assert magnitude_from_description(Magnitude(value="7.6")) is None

    def test_coordinate(self):
        coordinate = Coordinate(value="", description="北緯３７．５度　東経１３７．２度　深さ　１０ｋｍ")
        assert coordinate_from_description(coordinate) == (37.5, 137.2, 10)

    def test_coordinate_southern_western_shallow(self):
        coordinate = Coordinate(value="", description="南緯１５．３度　西経１７３．１度　ごく浅い")
        assert coordinate_from_description(coordinate) == (-15.3, -173.1, 0)

    def test_coordinate_unknown(self):
        coordinate = Coordinate(value="", description="震源要素不明")
        assert coordinate_from_description(coordinate) == (-200.0, -200.0, -1)

    def test_time_slicing(self):
        assert epsp_time_from_iso("2024-01-01T16:10:00+09:00") == "2024/01/01 16:10:00"
        assert epsp_time_from_iso("2024-01-01T07:10:00Z") is None

    @pytest.mark.parametrize("name,grade", [
        ("大津波警報", "MajorWarning"),
        ("大津波警報：発表", "MajorWarning"),
        ("津波警報", "Warning"),
        ("津波注意報", "Watch"),
        ("津波予報（若干の海面変動）", "Unknown"),
        ("津波注意報解除", None),
        ("津波なし", None),
    ])
    def test_grade_from_kind_name(self, name, grade):
        assert grade_from_kind_name(name) == grade


class TestValidate:
    """Tests for validate() against fixtures."""

    @pytest.mark.parametrize("event_id,fixture", [
        (QUAKE_ID, "vxse53.xml"),
        (PROMPT_ID, "vxse51.xml"),
        (TSUNAMI_ID, "vtse41.xml"),
        (EEW_ID, "vxse43.xml"),
    ])
    def test_correct_conversion_has_no_findings(self, fixture_xml, event_id, fixture):
        report = decode_report(fixture_xml(fixture))
        event = convert(event_id, report)

        assert validate(event_id, report, event) == []

    def test_wrong_magnitude_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        hypocenter = replace(quake.earthquake.hypocenter, magnitude=6.1)
        wrong = replace(quake, earthquake=replace(quake.earthquake, hypocenter=hypocenter))

        findings = validate(QUAKE_ID, report, wrong)

        assert _kinds(findings) == [FindingKind.ERROR]
        assert "magnitude" in findings[0].message

    def test_wrong_max_scale_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        wrong = replace(quake, earthquake=replace(quake.earthquake, max_scale=50))

        findings = validate(QUAKE_ID, report, wrong)

        assert FindingKind.ERROR in _kinds(findings)
        assert any("maxScale" in f.message for f in findings)

    def test_missing_point_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        wrong = replace(quake, points=quake.points[:-1])

        findings = validate(QUAKE_ID, report, wrong)

        assert _kinds(findings) == [FindingKind.ERROR]

    def test_comment_drift_is_a_warning(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        drifted = replace(quake, free_form_comment="")

        assert _kinds(validate(QUAKE_ID, report, drifted)) == [FindingKind.WARNING]

    def test_issue_time_drift_is_a_warning(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        drifted = replace(quake, issue=replace(quake.issue, time="2024-01-01 16:14:00"))

        assert _kinds(validate(QUAKE_ID, report, drifted)) == [FindingKind.WARNING]

    def test_wrong_tsunami_grade_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vtse41.xml"))
        tsunami = convert(TSUNAMI_ID, report)
        areas = (replace(tsunami.areas[0], grade="Watch"),) + tsunami.areas[1:]

        findings = validate(TSUNAMI_ID, report, replace(tsunami, areas=areas))

        assert _kinds(findings) == [FindingKind.ERROR]
        assert "grade" in findings[0].message

    def test_wrong_cancellation_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vtse41.xml"))
        tsunami = convert(TSUNAMI_ID, report)

        findings = validate(TSUNAMI_ID, report, replace(tsunami, cancelled=True))

        assert FindingKind.ERROR in _kinds(findings)

    def test_eew_serial_drift_is_a_warning(self, fixture_xml):
        report = decode_report(fixture_xml("vxse43.xml"))
        eew = convert(EEW_ID, report)
        drifted = replace(eew, issue=replace(eew.issue, serial="1"))

        assert _kinds(validate(EEW_ID, report, drifted)) == [FindingKind.WARNING]

    def test_eew_wrong_test_flag_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vxse43.xml"))
        eew = convert(EEW_ID, report)

        assert _kinds(validate(EEW_ID, report, replace(eew, test=True))) == [FindingKind.ERROR]

    def test_variant_mismatch_is_an_error(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)

        assert _kinds(validate(TSUNAMI_ID, report, quake)) == [FindingKind.ERROR]

    def test_does_not_mutate_event(self, fixture_xml):
        report = decode_report(fixture_xml("vxse53.xml"))
        quake = convert(QUAKE_ID, report)
        before = quake.to_dict()

        validate(QUAKE_ID, report, quake)

        assert quake.to_dict() == before


class TestApplyPolicy:
    """Tests for apply_policy()."""

    def test_no_findings_pass(self):
        apply_policy("id", [], ConversionPolicy())

    def test_error_halts_by_default(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_policy("id", [ERROR], ConversionPolicy())

        assert exc_info.value.findings == [ERROR]
        assert exc_info.value.event_id == "id"

    def test_warning_halts_by_default(self):
        with pytest.raises(ValidationWarning):
            apply_policy("id", [WARNING], ConversionPolicy())

    def test_error_wins_over_warning(self):
        with pytest.raises(ValidationError) as exc_info:
            apply_policy("id", [WARNING, ERROR], ConversionPolicy())

        assert exc_info.value.findings == [WARNING, ERROR]

    def test_force_suppresses_errors_and_warnings(self):
        apply_policy("id", [ERROR, WARNING], ConversionPolicy(force=True))

    def test_ignore_warning_still_halts_on_errors(self):
        policy = ConversionPolicy(ignore_warning=True)

        apply_policy("id", [WARNING], policy)
        with pytest.raises(ValidationError):
            apply_policy("id", [ERROR, WARNING], policy)
