"""
Declarative input schemas for calculators.

A schema is an ordered collection of field descriptors used both to render
a calculator form and to validate raw input. Order is display order only.

Example:
    >>> schema = InputSchema(specs=(
    ...     number_field("thickness", "Material Thickness", 0.1, 100, step=0.1, unit="mm"),
    ...     select_field("laser_type", "Laser Type", [("fiber", "Fiber Laser"), ("co2", "CO2 Laser")]),
    ... ))
    >>> schema.ids()
    ['thickness', 'laser_type']
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FieldKind(str, Enum):
    """Kind of input control."""
    NUMBER = "number"
    SELECT = "select"
    TEXT = "text"


class SelectOption(BaseModel):
    """One choice of a select field."""
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


def is_real_number(value: Any) -> bool:
    """True for int/float values (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class FieldSpec(BaseModel):
    """
    Descriptor of a single calculator input.

    Attributes:
        id: Unique key of the field within its schema
        label: Human-readable label (English)
        kind: number, select or text
        required: Whether the field must be supplied
        description: Help text
        unit: Display unit for numeric fields
        min, max: Inclusive numeric bounds
        step: UI step hint
        integer: Numeric value must be integral
        value: Default value
        options: Allowed choices for select fields
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    label: str
    kind: FieldKind
    required: bool = True
    description: str = ""
    unit: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    integer: bool = False
    value: Any = None
    options: Tuple[SelectOption, ...] = ()

    @model_validator(mode="after")
    def validate_kind_constraints(self) -> "FieldSpec":
        """Check bounds, options and default against the field kind."""
        if self.kind == FieldKind.NUMBER:
            if self.options:
                raise ValueError(f"Field '{self.id}': number fields take no options")
            if self.min is not None and self.max is not None and self.min > self.max:
                raise ValueError(f"Field '{self.id}': min {self.min} > max {self.max}")
            if self.value is not None:
                if not is_real_number(self.value) or not math.isfinite(self.value):
                    raise ValueError(f"Field '{self.id}': default must be a finite number")
                if self.integer and not float(self.value).is_integer():
                    raise ValueError(f"Field '{self.id}': default must be an integer")
                if self.min is not None and self.value < self.min:
                    raise ValueError(f"Field '{self.id}': default {self.value} below min {self.min}")
                if self.max is not None and self.value > self.max:
                    raise ValueError(f"Field '{self.id}': default {self.value} above max {self.max}")

        elif self.kind == FieldKind.SELECT:
            if not self.options:
                raise ValueError(f"Field '{self.id}': select fields need options")
            values = [option.value for option in self.options]
            if len(set(values)) != len(values):
                raise ValueError(f"Field '{self.id}': duplicate option values")
            if self.value is not None and self.value not in values:
                raise ValueError(f"Field '{self.id}': default '{self.value}' is not an option")

        else:
            if self.min is not None or self.max is not None or self.options:
                raise ValueError(f"Field '{self.id}': text fields take no bounds or options")

        return self

    def option_values(self) -> List[str]:
        """Values of the declared options (select fields)."""
        return [option.value for option in self.options]


class InputSchema(BaseModel):
    """Ordered, id-unique sequence of field descriptors."""
    model_config = ConfigDict(frozen=True)

    specs: Tuple[FieldSpec, ...]

    @field_validator("specs")
    @classmethod
    def validate_unique_ids(cls, v: Tuple[FieldSpec, ...]) -> Tuple[FieldSpec, ...]:
        """Field ids must be unique within a schema."""
        seen = set()
        for spec in v:
            if spec.id in seen:
                raise ValueError(f"Duplicate field id: {spec.id}")
            seen.add(spec.id)
        return v

    def __len__(self) -> int:
        return len(self.specs)

    def ids(self) -> List[str]:
        """Field ids in display order."""
        return [spec.id for spec in self.specs]

    def field(self, field_id: str) -> FieldSpec:
        """
        Look up a field by id.

        Raises:
            KeyError: If the schema has no such field
        """
        for spec in self.specs:
            if spec.id == field_id:
                return spec
        raise KeyError(field_id)

    def defaults(self) -> Dict[str, Any]:
        """Default value of every field that declares one."""
        defaults = {}
        for spec in self.specs:
            if spec.value is not None:
                defaults[spec.id] = int(spec.value) if spec.integer else spec.value
        return defaults


def number_field(
    field_id: str,
    label: str,
    min: Optional[float] = None,
    max: Optional[float] = None,
    *,
    step: Optional[float] = None,
    unit: Optional[str] = None,
    value: Optional[float] = None,
    required: bool = True,
    integer: bool = False,
    description: str = ""
) -> FieldSpec:
    """Shorthand for a numeric field."""
    return FieldSpec(
        id=field_id, label=label, kind=FieldKind.NUMBER, required=required,
        description=description, unit=unit, min=min, max=max, step=step,
        integer=integer, value=value
    )


def select_field(
    field_id: str,
    label: str,
    options: Sequence[Tuple[str, str]],
    *,
    value: Optional[str] = None,
    required: bool = True,
    description: str = ""
) -> FieldSpec:
    """Shorthand for a select field from (value, label) pairs."""
    return FieldSpec(
        id=field_id, label=label, kind=FieldKind.SELECT, required=required,
        description=description, value=value,
        options=tuple(SelectOption(value=v, label=lbl) for v, lbl in options)
    )


def text_field(
    field_id: str,
    label: str,
    *,
    value: Optional[str] = None,
    required: bool = False,
    description: str = ""
) -> FieldSpec:
    """Shorthand for a free-text field."""
    return FieldSpec(
        id=field_id, label=label, kind=FieldKind.TEXT, required=required,
        description=description, value=value
    )
