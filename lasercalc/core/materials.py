"""
Material and assist-gas property tables.

Units: SI-style engineering units as listed in ``data/materials.yaml``
(temperatures in degC, stresses in MPa, power in W, speed in mm/min).
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import get_settings


class Material(str, Enum):
    """Cuttable sheet materials."""
    STEEL = "steel"
    STAINLESS_STEEL = "stainless_steel"
    ALUMINUM = "aluminum"
    COPPER = "copper"
    BRASS = "brass"
    TITANIUM = "titanium"


class LaserType(str, Enum):
    """Laser source technologies."""
    FIBER = "fiber"
    CO2 = "co2"
    ND_YAG = "nd_yag"
    DISK = "disk"


class AssistGas(str, Enum):
    """Assist gases."""
    OXYGEN = "oxygen"
    NITROGEN = "nitrogen"
    AIR = "air"
    ARGON = "argon"


MATERIAL_LABELS = {
    Material.STEEL: "Carbon Steel",
    Material.STAINLESS_STEEL: "Stainless Steel",
    Material.ALUMINUM: "Aluminum",
    Material.COPPER: "Copper",
    Material.BRASS: "Brass",
    Material.TITANIUM: "Titanium",
}

LASER_LABELS = {
    LaserType.FIBER: "Fiber Laser",
    LaserType.CO2: "CO2 Laser",
    LaserType.ND_YAG: "Nd:YAG Laser",
    LaserType.DISK: "Disk Laser",
}

GAS_LABELS = {
    AssistGas.OXYGEN: "Oxygen (O2)",
    AssistGas.NITROGEN: "Nitrogen (N2)",
    AssistGas.AIR: "Compressed Air",
    AssistGas.ARGON: "Argon (Ar)",
}


class ToleranceCharacteristics(BaseModel):
    """Dimensional behaviour of a material under laser cutting."""
    model_config = ConfigDict(frozen=True)

    dimensional_stability: float = Field(..., gt=0, le=1)
    machining_accuracy: float = Field(..., gt=0, le=1)
    achievable_accuracy: float = Field(..., gt=0, description="Best achievable tolerance (mm)")


class ProcessWindow(BaseModel):
    """Admissible process parameter ranges and objective weights."""
    model_config = ConfigDict(frozen=True)

    power_range: Tuple[float, float]
    speed_range: Tuple[float, float]
    gas_pressure_range: Tuple[float, float]
    focus_range: Tuple[float, float]
    quality_weight: float = Field(..., gt=0)
    cost_weight: float = Field(..., gt=0)
    energy_weight: float = Field(..., gt=0)

    @field_validator('power_range', 'speed_range', 'gas_pressure_range', 'focus_range')
    @classmethod
    def validate_range(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        """Ranges must be ordered (low, high)."""
        if v[0] >= v[1]:
            raise ValueError(f"Range {v} is not increasing")
        return v


class MaterialProperties(BaseModel):
    """
    Physical, thermal and process properties of one material.

    Attributes:
        density: kg/m3
        melting_point: degC
        thermal_conductivity: W/(m.K)
        specific_heat: J/(kg.K)
        thermal_diffusivity: m2/s
        thermal_expansion: 1/K
        yield_strength: MPa
        elastic_modulus: MPa
        absorptivity: Beam absorptivity per laser type (0-1)
        cutting_speed_factor: Relative cutting speed (steel = 1.0)
        recommended_gas: Default assist gas
        oxidation_threshold: Surface oxidation onset (degC)
        burn_susceptibility: Tendency to form burn marks (0-1)
        haz_factor: Relative heat affected zone width (steel = 1.0)
        warping_tendency: Tendency to distort under thermal load (0-1)
    """
    model_config = ConfigDict(frozen=True)

    name: str
    density: float = Field(..., gt=0)
    melting_point: float = Field(..., gt=0)
    thermal_conductivity: float = Field(..., gt=0)
    specific_heat: float = Field(..., gt=0)
    thermal_diffusivity: float = Field(..., gt=0)
    thermal_expansion: float = Field(..., gt=0)
    yield_strength: float = Field(..., gt=0)
    elastic_modulus: float = Field(..., gt=0)
    absorptivity: Dict[LaserType, float]
    cutting_speed_factor: float = Field(..., gt=0)
    recommended_gas: AssistGas
    oxidation_threshold: float = Field(..., gt=0)
    burn_susceptibility: float = Field(..., ge=0, le=1)
    surface_emissivity: float = Field(..., ge=0, le=1)
    cooling_efficiency: float = Field(..., ge=0, le=1)
    haz_factor: float = Field(..., gt=0)
    warping_tendency: float = Field(..., ge=0, le=1)
    tolerance: ToleranceCharacteristics
    process: ProcessWindow

    @field_validator('absorptivity')
    @classmethod
    def validate_absorptivity(cls, v: Dict[LaserType, float]) -> Dict[LaserType, float]:
        """Every laser type needs an absorptivity in (0, 1]."""
        missing = [laser.value for laser in LaserType if laser not in v]
        if missing:
            raise ValueError(f"Missing absorptivity for: {missing}")
        for laser, value in v.items():
            if not (0 < value <= 1):
                raise ValueError(f"Absorptivity for {laser.value} must be in (0, 1], got {value}")
        return v


class GasProperties(BaseModel):
    """Cooling and shielding behaviour of an assist gas (0-1 scales)."""
    model_config = ConfigDict(frozen=True)

    cooling_effect: float = Field(..., ge=0, le=1)
    oxidation_prevention: float = Field(..., ge=0, le=1)
    flow_efficiency: float = Field(..., ge=0, le=1)


def _load_tables(path: Path) -> Tuple[Dict[Material, MaterialProperties], Dict[AssistGas, GasProperties]]:
    """Load and validate the material and gas tables from YAML."""
    with open(path, 'r', encoding='utf-8') as f:
        raw: Dict[str, Any] = yaml.safe_load(f)

    materials = {Material(key): MaterialProperties(**props) for key, props in raw['materials'].items()}
    gases = {AssistGas(key): GasProperties(**props) for key, props in raw['gases'].items()}

    missing = [m.value for m in Material if m not in materials]
    missing += [g.value for g in AssistGas if g not in gases]
    if missing:
        raise ValueError(f"{path} has no record for: {', '.join(missing)}")

    return materials, gases


# Load tables from YAML on module import
_MATERIALS, _GASES = _load_tables(get_settings().materials_file)


def get_material(material) -> MaterialProperties:
    """
    Get properties of a material.

    Args:
        material: Material member or its value (e.g. "steel")

    Raises:
        ValueError: If the material is unknown
    """
    return _MATERIALS[Material(material)]


def get_gas(gas) -> GasProperties:
    """Get properties of an assist gas (member or value)."""
    return _GASES[AssistGas(gas)]


def list_materials() -> List[str]:
    """Material values in table order."""
    return [m.value for m in Material]


def material_options(materials=None) -> List[Tuple[str, str]]:
    """(value, label) pairs for a material select field."""
    return [(m.value, MATERIAL_LABELS[m]) for m in (materials or list(Material))]


def laser_options() -> List[Tuple[str, str]]:
    """(value, label) pairs for a laser type select field."""
    return [(laser.value, LASER_LABELS[laser]) for laser in LaserType]


def gas_options() -> List[Tuple[str, str]]:
    """(value, label) pairs for an assist gas select field."""
    return [(gas.value, GAS_LABELS[gas]) for gas in AssistGas]
