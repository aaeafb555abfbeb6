from __future__ import annotations

from typing import Dict

import pytest

from vulnrisk_cli.models.vulnerability import VECTOR_KEYS, RiskLevel, RiskVector
from vulnrisk_cli.owasp import calculate_owasp_risk_values
from vulnrisk_cli.risk import (
    calculate_risk_level,
    calculate_risk_reduction,
    classify_risk_label,
    has_residual_data,
    legacy_matrix_level,
    round_half_up,
    vector_average_level,
)


def _vector(values: Dict[str, int]) -> RiskVector:
    return RiskVector.from_keys(values)


def _uniform(value: int) -> RiskVector:
    return _vector({key: value for key in VECTOR_KEYS})


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (2.5, 3), (66.666, 67), (33.333, 33), (0.0, 0), (74.9, 75)],
    )
    def test_values(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestClassifyRiskLabel:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Kritis", RiskLevel.CRITICAL),
            ("CRITICAL", RiskLevel.CRITICAL),
            ("Tinggi", RiskLevel.HIGH),
            ("high", RiskLevel.HIGH),
            (" Sedang ", RiskLevel.MEDIUM),
            ("Medium", RiskLevel.MEDIUM),
            ("Rendah", RiskLevel.LOW),
            ("Low", RiskLevel.LOW),
        ],
    )
    def test_known_labels(self, text: str, expected: RiskLevel) -> None:
        assert classify_risk_label(text) is expected

    def test_most_severe_keyword_wins(self) -> None:
        assert classify_risk_label("Tinggi (was Kritis)") is RiskLevel.CRITICAL
        assert classify_risk_label("Low to Medium") is RiskLevel.MEDIUM

    @pytest.mark.parametrize("text", [None, "", "unknown", "7.4"])
    def test_unrecognized_defaults_to_low(self, text: str) -> None:
        assert classify_risk_label(text) is RiskLevel.LOW


class TestVectorAverageLevel:
    def test_thresholds(self) -> None:
        assert vector_average_level(_uniform(6)) is RiskLevel.CRITICAL
        assert vector_average_level(_uniform(5)) is RiskLevel.HIGH
        assert vector_average_level(_uniform(3)) is RiskLevel.MEDIUM
        assert vector_average_level(_uniform(2)) is RiskLevel.LOW

    def test_boundary_four_and_a_half(self) -> None:
        keys = list(VECTOR_KEYS)
        values = {key: (4 if i % 2 else 5) for i, key in enumerate(keys)}
        assert vector_average_level(_vector(values)) is RiskLevel.HIGH

    def test_can_differ_from_matrix(self) -> None:
        keys = list(VECTOR_KEYS)
        values = {key: (9 if i < 8 else 1) for i, key in enumerate(keys)}
        vector = _vector(values)
        assert vector_average_level(vector) is RiskLevel.HIGH
        assert calculate_owasp_risk_values(vector).risk_level is RiskLevel.MEDIUM


class TestLegacyMatrixLevel:
    @pytest.mark.parametrize(
        "ki, di, expected",
        [
            ("Kritis", "Tinggi", RiskLevel.CRITICAL),
            ("Tinggi", "Tinggi", RiskLevel.HIGH),
            ("Sedang", "Sedang", RiskLevel.MEDIUM),
            ("Tinggi", "Rendah", RiskLevel.LOW),
            ("Rendah", "Rendah", RiskLevel.LOW),
        ],
    )
    def test_products(self, ki: str, di: str, expected: RiskLevel) -> None:
        assert legacy_matrix_level(ki, di) is expected


class TestCalculateRiskLevel:
    def test_vector_takes_precedence(self) -> None:
        level = calculate_risk_level(vector=_uniform(7), ki="Rendah", di="Rendah", ri="Rendah")
        assert level is RiskLevel.CRITICAL

    def test_ri_used_without_vector(self) -> None:
        assert calculate_risk_level(ki="Rendah", di="Rendah", ri="Tinggi") is RiskLevel.HIGH

    def test_ki_di_used_without_ri(self) -> None:
        assert calculate_risk_level(ki="Tinggi", di="Tinggi", ri="  ") is RiskLevel.HIGH

    def test_nothing_is_low(self) -> None:
        assert calculate_risk_level() is RiskLevel.LOW
        assert calculate_risk_level(ki="Tinggi") is RiskLevel.LOW


class TestHasResidualData:
    def test_all_filled(self) -> None:
        assert has_residual_data("Rendah", "Rendah", "Rendah") is True

    @pytest.mark.parametrize(
        "kr, dr, rr",
        [
            ("", "Rendah", "Rendah"),
            ("Rendah", None, "Rendah"),
            ("Rendah", "Rendah", "   "),
            ("None", "Rendah", "Rendah"),
            ("Rendah", "Rendah", " none "),
        ],
    )
    def test_incomplete(self, kr: str, dr: str, rr: str) -> None:
        assert has_residual_data(kr, dr, rr) is False


class TestCalculateRiskReduction:
    @pytest.mark.parametrize(
        "inherent, residual, expected",
        [
            (RiskLevel.HIGH, RiskLevel.LOW, 67),
            (RiskLevel.CRITICAL, RiskLevel.LOW, 75),
            (RiskLevel.CRITICAL, RiskLevel.MEDIUM, 50),
            (RiskLevel.MEDIUM, RiskLevel.LOW, 50),
            (RiskLevel.HIGH, RiskLevel.HIGH, 0),
        ],
    )
    def test_reduction(self, inherent: RiskLevel, residual: RiskLevel, expected: int) -> None:
        assert calculate_risk_reduction(inherent, residual) == expected

    def test_increase_clamps_to_zero(self) -> None:
        assert calculate_risk_reduction(RiskLevel.LOW, RiskLevel.HIGH) == 0

    def test_no_residual(self) -> None:
        assert calculate_risk_reduction(RiskLevel.HIGH, None) == 0
