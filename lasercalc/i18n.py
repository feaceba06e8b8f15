"""
Localization of calculator text.

A :class:`Localizer` is an immutable lookup built from one YAML catalog
(``data/locales/<locale>.yaml``). Rendering code receives it explicitly;
anything the catalog does not translate falls back to the English text
declared in the calculator schemas.

    >>> i18n = load_localizer("es")
    >>> i18n.label(calc.schema.field("thickness"))
    'Espesor del material'
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .config import get_settings
from .core.calculator import CalculatorInfo
from .core.schema import FieldSpec, SelectOption
from .core.validation import FieldIssue

logger = logging.getLogger(__name__)


class FieldText(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Optional[str] = None
    description: Optional[str] = None


class _FormatDefaults(dict):
    """Leave unknown placeholders untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class Localizer(BaseModel):
    """
    Translated text for one locale.

    Attributes:
        locale: Locale code (e.g. "es")
        titles: Calculator id -> title
        summaries: Calculator id -> description
        fields: Field id -> label/description
        options: Field id -> option value -> label
        messages: Issue code -> message template; templates may use
            {label}, {min} and {max}
    """
    model_config = ConfigDict(frozen=True)

    locale: str = "en"
    titles: Dict[str, str] = Field(default_factory=dict)
    summaries: Dict[str, str] = Field(default_factory=dict)
    fields: Dict[str, FieldText] = Field(default_factory=dict)
    options: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    messages: Dict[str, str] = Field(default_factory=dict)

    def title(self, info: CalculatorInfo) -> str:
        return self.titles.get(info.id, info.title)

    def summary(self, info: CalculatorInfo) -> str:
        return self.summaries.get(info.id, info.description)

    def label(self, field: FieldSpec) -> str:
        text = self.fields.get(field.id)
        return text.label if text is not None and text.label else field.label

    def description(self, field: FieldSpec) -> str:
        text = self.fields.get(field.id)
        return text.description if text is not None and text.description else field.description

    def option_label(self, field: FieldSpec, option: SelectOption) -> str:
        return self.options.get(field.id, {}).get(option.value, option.label)

    def message(self, issue: FieldIssue, field: Optional[FieldSpec] = None) -> str:
        """
        Translate a validation issue.

        Args:
            issue: Error or warning from validation
            field: The schema field the issue refers to, for {label},
                {min} and {max}

        Returns:
            The catalog template for the issue code, or the original message
        """
        template = self.messages.get(issue.code)
        if template is None:
            return issue.message

        values = _FormatDefaults(label=issue.field)
        if field is not None:
            values["label"] = self.label(field)
            if field.min is not None:
                values["min"] = f"{field.min:g}"
            if field.max is not None:
                values["max"] = f"{field.max:g}"
        return template.format_map(values)


def available_locales(locales_dir: Optional[Path] = None) -> List[str]:
    """Locale codes that have a catalog."""
    locales_dir = Path(locales_dir or get_settings().locales_dir)
    return sorted(path.stem for path in locales_dir.glob("*.yaml"))


def load_localizer(locale: Optional[str] = None, locales_dir: Optional[Path] = None) -> Localizer:
    """
    Build the localizer for a locale.

    Args:
        locale: Locale code (default: configured locale)
        locales_dir: Directory of catalogs (default: configured directory)

    Raises:
        ValueError: If there is no catalog for the locale
    """
    settings = get_settings()
    locale = locale or settings.locale
    locales_dir = Path(locales_dir or settings.locales_dir)
    path = locales_dir / f"{locale}.yaml"

    if not path.is_file():
        available = ", ".join(available_locales(locales_dir))
        raise ValueError(f"Unknown locale: {locale}. Available: {available}")

    with open(path, 'r', encoding='utf-8') as f:
        catalog = yaml.safe_load(f) or {}
    catalog.pop("locale", None)

    localizer = Localizer(locale=locale, **catalog)
    logger.debug("Loaded %s catalog: %d fields, %d messages", locale, len(localizer.fields), len(localizer.messages))
    return localizer
