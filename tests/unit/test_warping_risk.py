"""
Unit Tests for the Warping Risk Calculator
==========================================
"""

import pytest

from lasercalc.calculators import warping_risk
from lasercalc.calculators.warping_risk import CALCULATOR, check_plausibility, risk_level
from lasercalc.core import get_material


def inputs(**overrides):
    values = CALCULATOR.get_example_inputs()
    values.update(overrides)
    return CALCULATOR.validate_inputs(values).values


WORST_CASE = dict(
    material_type="aluminum", thickness=0.5, length=3000, width=10, laser_power=20000,
    cutting_speed=100, number_of_passes=10, support_type="none", cooling_method="none"
)


class TestRiskLevel:
    """Test cases for score banding."""

    @pytest.mark.parametrize("score, level", [
        (0.0, "low"), (3.0, "low"), (3.1, "medium"), (6.0, "medium"),
        (8.0, "high"), (8.1, "critical"), (10.0, "critical"),
    ])
    def test_bands(self, score, level):
        assert risk_level(score) == level


class TestCompute:
    """Test cases for compute."""

    def test_example(self):
        """3 mm steel, 500 x 200 mm, 2 kW at 2.5 m/min, moderate support."""
        result = warping_risk.compute(inputs())

        assert result.overall_risk_score == pytest.approx(2.4)
        assert result.risk_level == "low"
        assert result.thermal_analysis.peak_temperature == 24
        assert result.thermal_analysis.thermal_stress == pytest.approx(10.0)
        assert result.thermal_analysis.cooling_rate == pytest.approx(1.5)
        assert result.geometric_factors.aspect_ratio == pytest.approx(2.5)
        assert result.geometric_factors.support_adequacy == pytest.approx(0.7)
        assert result.mechanical_analysis.stress_concentration == pytest.approx(1.15)
        assert result.mechanical_analysis.plastic_deformation == 0.0
        assert result.predictions.warping_direction == "Primarily along the longer dimension"
        assert result.predictions.critical_areas == []
        assert result.warnings == []

        adjustments = result.prevention_strategies.parameter_adjustments
        assert adjustments.recommended_power == 1800
        assert adjustments.recommended_speed == 2750
        assert adjustments.recommended_passes == 1

    def test_worst_case_is_critical(self):
        result = warping_risk.compute(inputs(**WORST_CASE))

        assert result.overall_risk_score == pytest.approx(9.8)
        assert result.risk_level == "critical"
        assert result.mechanical_analysis.plastic_deformation > 0
        assert result.prevention_strategies.parameter_adjustments.recommended_passes == 11
        assert result.warnings[0].startswith("Critical warping risk")
        assert "Aluminum has high thermal expansion - warping likely" in result.warnings
        assert "Unsupported areas" in result.predictions.critical_areas

    def test_peak_temperature_capped_at_melting_point(self):
        result = warping_risk.compute(inputs(**WORST_CASE))
        assert result.thermal_analysis.peak_temperature == round(get_material("aluminum").melting_point)

    def test_support_lowers_risk(self):
        scores = [
            warping_risk.compute(inputs(support_type=support)).overall_risk_score
            for support in ("none", "minimal", "moderate", "extensive")
        ]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] > scores[-1]

    def test_passes_raise_risk(self):
        single = warping_risk.compute(inputs())
        triple = warping_risk.compute(inputs(number_of_passes=3))
        assert triple.overall_risk_score == pytest.approx(single.overall_risk_score + 1.0)

    def test_level_matches_score(self):
        for support in ("none", "minimal", "moderate", "extensive"):
            result = warping_risk.compute(inputs(support_type=support, cooling_method="none"))
            assert result.risk_level == risk_level(result.overall_risk_score)

    def test_ambient_default(self):
        values = inputs()
        values["ambient_temperature"] = None
        assert warping_risk.compute(values).thermal_analysis.peak_temperature == 24


class TestPlausibility:
    """Test cases for advisory warnings."""

    def test_example_is_thin(self):
        codes = [issue.code for issue in check_plausibility(inputs())]
        assert codes == ["THIN_MATERIAL"]

    def test_clean_input(self):
        assert check_plausibility(inputs(thickness=10)) == []

    def test_high_aspect_ratio(self):
        codes = [issue.code for issue in check_plausibility(inputs(length=3000, thickness=50))]
        assert codes == ["HIGH_ASPECT_RATIO"]

    def test_inadequate_support(self):
        codes = [issue.code for issue in check_plausibility(
            inputs(length=1200, thickness=20, support_type="none"))]
        assert codes == ["INADEQUATE_SUPPORT"]

    def test_high_power_density(self):
        codes = [issue.code for issue in check_plausibility(inputs(length=40, width=40))]
        assert codes == ["HIGH_POWER_DENSITY"]

    def test_warnings_do_not_block(self):
        result = CALCULATOR.calculate({**CALCULATOR.get_example_inputs(), "length": 3000, "thickness": 50})
        assert result.success
