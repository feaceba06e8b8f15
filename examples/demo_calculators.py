"""
Calculator Catalog Example
==========================

This example demonstrates the calculator contract:
1. Listing the registry
2. Validating raw form input (errors and advisory warnings)
3. Calculating and reading the result envelope
4. Localized labels and messages
"""

from lasercalc.calculators import get_calculator, list_calculators
from lasercalc.config import configure_logging
from lasercalc.i18n import load_localizer


def show_registry():
    print("=" * 60)
    print("Registered calculators")
    print("=" * 60)
    for calc in list_calculators():
        print(f"{calc.id:32s} {calc.info.category:22s} {len(calc.schema)} fields")


def show_laser_parameters():
    calc = get_calculator("laser-parameter-optimizer")

    print("\n" + "=" * 60)
    print("Laser parameters: 5 mm steel, 3 kW fiber")
    print("=" * 60)
    result = calc.calculate(calc.get_example_inputs())
    data = result.data
    print(f"  Power:        {data.optimal_power:.0f} W")
    print(f"  Speed:        {data.cutting_speed:.0f} mm/min")
    print(f"  Gas:          {data.gas_type.value} at {data.gas_pressure} bar")
    print(f"  Focus:        {data.focus_position} mm")
    print(f"  Quality:      {data.quality_prediction:.2f}")
    print(f"  Input hash:   {result.metadata.input_hash}")
    print(f"  Time:         {result.metadata.calculation_time_ms:.2f} ms")


def show_validation():
    calc = get_calculator("burn-mark-preventer")
    raw = calc.get_example_inputs()
    raw.update(thickness="", nozzle_standoff=4.5, surface_condition="oily")

    print("\n" + "=" * 60)
    print("Validation: missing thickness")
    print("=" * 60)
    validation = calc.validate_inputs(raw)
    for issue in validation.errors:
        print(f"  ERROR   [{issue.code}] {issue.field}: {issue.message}")

    raw["thickness"] = 5
    validation = calc.validate_inputs(raw)
    for issue in validation.warnings:
        print(f"  WARNING [{issue.code}] {issue.field}: {issue.message}")

    result = calc.calculate(raw)
    print(f"  Burn risk: {result.data.burn_risk_score}/10 ({result.data.burn_risk_level})")


def show_localization():
    calc = get_calculator("cutting-time-estimator")
    i18n = load_localizer("es")

    print("\n" + "=" * 60)
    print(i18n.title(calc.info))
    print("=" * 60)
    for spec in calc.schema.specs:
        print(f"  {i18n.label(spec)}")

    validation = calc.validate_inputs({**calc.get_example_inputs(), "thickness": 80})
    for issue in validation.errors:
        print(f"  {i18n.message(issue, calc.schema.field(issue.field))}")


if __name__ == "__main__":
    configure_logging()
    show_registry()
    show_laser_parameters()
    show_validation()
    show_localization()
