"""Tests for the deemed-to-comply report."""

from __future__ import annotations

import pytest

from rcodes_yield.zoning_engine.compliance import check_compliance


def _proposal(**overrides):
    """R60 / 800 sqm / 20m × 40m with the optimizer's best mix."""
    params = dict(
        lot_area=800,
        lot_width=20,
        lot_depth=40,
        rcode="R60",
        proposed_dwellings=4,
        proposed_gfa=535,
        proposed_site_coverage=402,
        proposed_open_space=398,
        proposed_height=2,
    )
    params.update(overrides)
    return check_compliance(**params)


class TestCompliantProposal:
    """A proposal inside every R60 limit."""

    def test_valid(self):
        report = _proposal()
        assert report.valid is True
        assert report.errors == []
        assert report.failed_checks() == []

    def test_eight_named_checks(self):
        names = [c.name for c in _proposal().checks]
        assert names == [
            "Plot Ratio",
            "Site Coverage",
            "Open Space",
            "Building Height",
            "Parking Bays",
            "Primary Setback",
            "Side Setbacks",
            "Rear Setback",
        ]

    def test_allowed_values_formatted(self):
        checks = {c.name: c for c in _proposal().checks}
        assert checks["Plot Ratio"].allowed == "70%"
        assert checks["Site Coverage"].allowed == "65%"
        assert checks["Open Space"].allowed == ">= 40%"
        assert checks["Building Height"].allowed == "3 stories"
        assert checks["Building Height"].proposed == "2 stories"

    def test_parking_line(self):
        checks = {c.name: c for c in _proposal().checks}
        # 4 resident + ceil(4 × 0.25) visitor
        assert checks["Parking Bays"].allowed == "5 bays required"
        assert checks["Parking Bays"].compliant is True

    def test_setback_lines(self):
        checks = {c.name: c for c in _proposal().checks}
        assert checks["Primary Setback"].allowed == "4m"
        assert checks["Side Setbacks"].allowed == "1.0m each side"
        assert checks["Rear Setback"].allowed == "1.5m"

    def test_attachments(self):
        report = _proposal()
        assert report.rules.label == "R60"
        assert report.envelope.envelope_area == pytest.approx(621)
        assert report.parking.total_bays == 5


class TestFailingProposal:
    """Each limit failing on its own."""

    def test_too_tall(self):
        report = _proposal(proposed_height=4)
        assert report.valid is False
        assert [c.name for c in report.failed_checks()] == ["Building Height"]

    def test_too_much_gfa(self):
        report = _proposal(proposed_gfa=600)
        assert [c.name for c in report.failed_checks()] == ["Plot Ratio"]

    def test_too_much_coverage(self):
        report = _proposal(proposed_site_coverage=600)
        assert [c.name for c in report.failed_checks()] == ["Site Coverage"]

    def test_too_little_open_space(self):
        report = _proposal(proposed_open_space=300)
        assert [c.name for c in report.failed_checks()] == ["Open Space"]

    def test_limits_are_inclusive(self):
        report = _proposal(proposed_gfa=560, proposed_site_coverage=520, proposed_open_space=320)
        assert report.valid is True


class TestInvalidCode:

    def test_unknown_code(self):
        report = _proposal(rcode="R99")
        assert report.valid is False
        assert report.errors == ["Invalid R-Code"]
        assert report.checks == []
        assert report.to_dict()["rules"] is None

    def test_to_dict(self):
        data = _proposal().to_dict()
        assert data["valid"] is True
        assert len(data["checks"]) == 8
        assert data["parking"]["total_bays"] == 5
