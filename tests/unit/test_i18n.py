"""
Unit Tests for Localization
===========================
"""

import pytest

from lasercalc.calculators import get_calculator, list_calculators
from lasercalc.core import MISSING_REQUIRED, OUT_OF_RANGE, FieldIssue
from lasercalc.i18n import Localizer, available_locales, load_localizer


@pytest.fixture(scope="module")
def spanish():
    return load_localizer("es")


@pytest.fixture(scope="module")
def laser():
    return get_calculator("laser-parameter-optimizer")


class TestLoadLocalizer:
    """Test cases for catalog loading."""

    def test_available_locales(self):
        assert {"en", "es"} <= set(available_locales())

    def test_unknown_locale(self):
        with pytest.raises(ValueError, match="Unknown locale: xx"):
            load_localizer("xx")

    def test_default_locale_is_english(self):
        assert load_localizer().locale == "en"

    def test_custom_directory(self, tmp_path):
        (tmp_path / "fr.yaml").write_text("titles:\n  laser-parameter-optimizer: Optimiseur\n", encoding="utf-8")

        i18n = load_localizer("fr", locales_dir=tmp_path)
        assert i18n.titles == {"laser-parameter-optimizer": "Optimiseur"}
        assert available_locales(tmp_path) == ["fr"]

    def test_spanish_covers_every_calculator(self, spanish):
        for calc in list_calculators():
            assert calc.id in spanish.titles
            assert calc.id in spanish.summaries


class TestLocalizer:
    """Test cases for text lookups."""

    def test_english_falls_back_to_schema(self, laser):
        i18n = load_localizer("en")
        field = laser.schema.field("thickness")

        assert i18n.title(laser.info) == laser.info.title
        assert i18n.label(field) == field.label
        assert i18n.description(field) == field.description

    def test_spanish_labels(self, spanish, laser):
        assert spanish.label(laser.schema.field("thickness")) == "Espesor del material"
        assert spanish.title(laser.info) != laser.info.title

    def test_option_labels(self, spanish, laser):
        field = laser.schema.field("material_type")
        steel = field.options[0]

        assert steel.value == "steel"
        assert spanish.option_label(field, steel) == "Acero al carbono"

    def test_missing_option_falls_back(self, laser):
        field = laser.schema.field("material_type")
        assert Localizer().option_label(field, field.options[0]) == "Carbon Steel"

    def test_range_message(self, spanish, laser):
        field = laser.schema.field("thickness")
        issue = FieldIssue(field="thickness", message="Material Thickness must be between 0.1 and 100",
                           code=OUT_OF_RANGE)

        assert spanish.message(issue, field) == "Espesor del material debe estar entre 0.1 y 100"

    def test_message_without_field(self, spanish):
        issue = FieldIssue(field="thickness", message="Material Thickness is required", code=MISSING_REQUIRED)
        assert spanish.message(issue) == "thickness es obligatorio"

    def test_unknown_code_keeps_message(self, spanish):
        issue = FieldIssue(field="x", message="Something odd", code="NOT_IN_CATALOG")
        assert spanish.message(issue) == "Something odd"

    def test_unknown_placeholder_untouched(self):
        i18n = Localizer(messages={"OUT_OF_RANGE": "{label} {units}"})
        issue = FieldIssue(field="x", message="", code=OUT_OF_RANGE)

        assert i18n.message(issue) == "x {units}"
