"""
Integration test: Shop-floor workflows chaining several calculators
"""

import pytest

from lasercalc.calculators import get_calculator
from lasercalc.core import OUT_OF_RANGE, MISSING_REQUIRED
from lasercalc.i18n import load_localizer


@pytest.fixture(scope="module")
def steel_parameters():
    """Recommended parameters for 5 mm steel on a 3 kW fiber laser."""
    result = get_calculator("laser-parameter-optimizer").calculate({
        "material_type": "steel",
        "thickness": 5,
        "laser_type": "fiber",
        "max_power": 3000,
        "quality_requirement": "standard",
    })
    assert result.success
    return result.data


class TestRecommendedSetup:
    """Recommended parameters fed into the downstream calculators."""

    def test_recommendation(self, steel_parameters):
        assert 0 < steel_parameters.optimal_power <= 3000
        assert steel_parameters.cutting_speed > 0
        assert steel_parameters.gas_type.value == "oxygen"

    def test_burn_check_of_recommendation(self, steel_parameters):
        result = get_calculator("burn-mark-preventer").calculate({
            "material_type": "steel",
            "thickness": 5,
            "laser_power": steel_parameters.optimal_power,
            "cutting_speed": steel_parameters.cutting_speed,
            "assist_gas": steel_parameters.gas_type.value,
            "gas_pressure": steel_parameters.gas_pressure,
            "nozzle_standoff": 1.5,
            "surface_condition": "clean",
        })

        assert result.success
        assert result.data.burn_risk_level in ("low", "medium")

    def test_heat_affected_zone_of_recommendation(self, steel_parameters):
        result = get_calculator("heat-affected-zone-calculator").calculate({
            "material_type": "steel",
            "thickness": 5,
            "laser_power": steel_parameters.optimal_power,
            "cutting_speed": steel_parameters.cutting_speed,
        })

        assert result.success
        assert result.data.haz_depth <= 5

    def test_precision_is_slower_than_standard(self, steel_parameters):
        precision = get_calculator("laser-parameter-optimizer").calculate({
            "material_type": "steel",
            "thickness": 5,
            "laser_type": "fiber",
            "max_power": 3000,
            "quality_requirement": "precision",
        }).data

        assert precision.cutting_speed < steel_parameters.cutting_speed
        assert precision.quality_prediction > steel_parameters.quality_prediction


class TestGasChoice:
    """Nitrogen against oxygen on aluminum."""

    def burn_score(self, gas):
        result = get_calculator("burn-mark-preventer").calculate({
            "material_type": "aluminum",
            "thickness": 3,
            "laser_power": 2000,
            "cutting_speed": 3000,
            "assist_gas": gas,
            "gas_pressure": 12,
            "nozzle_standoff": 1.0,
            "surface_condition": "clean",
        })
        assert result.success
        return result.data.burn_risk_score

    def test_nitrogen_lowers_risk(self):
        assert self.burn_score("nitrogen") < self.burn_score("oxygen")


class TestBatchPlanning:
    """Cutting time for a batch and its tolerance budget."""

    def test_longer_path_takes_longer(self):
        calc = get_calculator("cutting-time-estimator")
        short = calc.calculate(calc.get_example_inputs()).data
        long = calc.calculate({**calc.get_example_inputs(), "cutting_length": 20000}).data

        assert long.total_time > short.total_time
        assert long.production_metrics.parts_per_hour < short.production_metrics.parts_per_hour

    def test_tighter_class_shrinks_allocation(self):
        calc = get_calculator("tolerance-stack-calculator")
        base = calc.get_example_inputs()
        ultra = calc.calculate({**base, "tolerance_class": "ultra_precision"}).data
        rough = calc.calculate({**base, "tolerance_class": "rough"}).data

        assert ultra.tolerance_allocation.feature_tolerance < rough.tolerance_allocation.feature_tolerance
        assert ultra.tolerance_analysis.total_stackup < rough.tolerance_analysis.total_stackup


class TestLocalizedForm:
    """Spanish form submission with bad input."""

    def test_messages_follow_locale(self):
        calc = get_calculator("laser-parameter-optimizer")
        i18n = load_localizer("es")
        raw = {**calc.get_example_inputs(), "thickness": 200}
        del raw["max_power"]

        validation = calc.validate_inputs(raw)
        messages = {
            issue.code: i18n.message(issue, calc.schema.field(issue.field))
            for issue in validation.errors
        }

        assert set(messages) == {OUT_OF_RANGE, MISSING_REQUIRED}
        assert messages[OUT_OF_RANGE] == "Espesor del material debe estar entre 0.1 y 100"
        assert messages[MISSING_REQUIRED].endswith("es obligatorio")

        result = calc.calculate(raw)
        assert not result.success
        assert "Material Thickness must be between 0.1 and 100" in result.error

    def test_titles_follow_locale(self):
        calc = get_calculator("laser-parameter-optimizer")
        assert load_localizer("es").title(calc.info) != calc.info.title
        assert load_localizer("en").title(calc.info) == calc.info.title


def test_optimized_setup_passes_burn_check():
    """The optimizer's best parameters are a valid burn-check input."""
    optimizer = get_calculator("process-optimization-engine")
    result = optimizer.calculate({
        **optimizer.get_example_inputs(),
        "population_size": 20, "generations": 20, "min_quality": None,
    })
    assert result.success
    optimal = result.data.optimal_parameters

    burn = get_calculator("burn-mark-preventer").calculate({
        "material_type": "steel",
        "thickness": 5,
        "laser_power": optimal.power,
        "cutting_speed": optimal.speed,
        "assist_gas": "oxygen",
        "gas_pressure": optimal.gas_pressure,
        "nozzle_standoff": 1.5,
        "surface_condition": "clean",
    })
    assert burn.success
