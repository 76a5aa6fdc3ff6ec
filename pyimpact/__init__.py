from __future__ import annotations

# Re-export public API for pyimpact

from .constants import get_constant, list_constants
from .errors import (
    CalculationError,
    CalculationException,
    DimensionalAnalysisError,
    InvalidUncertaintyError,
    UnitConversionError,
    UnknownConstantError,
)
from .impact import (
    ImpactEnergyResult,
    ImpactorParameters,
    SafeImpactResult,
    calculate_impact_energy,
    calculate_kinetic_energy,
    create_fallback_parameters,
    energy_to_tnt,
    safe_calculate_impact,
)
from .orbital import (
    ExponentialAtmosphere,
    ObjectProperties,
    OrbitalStateVector,
    PerturbationCalculator,
    PerturbationConfig,
    PerturbationResult,
    PerturbationType,
    create_perturbation_calculator,
    estimate_perturbation_magnitudes,
    get_significant_perturbations,
    specific_orbital_energy,
)
from .quantity import Quantity
from .seismic import (
    GEOLOGICAL_PRESETS,
    GeologicalProperties,
    GroundMotionResult,
    SeismicResult,
    calculate_ground_motion_at_distance,
    calculate_seismic_magnitude,
    geological_preset,
    validate_against_known_impacts,
)
from .units import Dimension, are_compatible, convert, convert_quantity, units_of_type
from .validation import (
    Disclaimer,
    DisclaimerCategory,
    DisclaimerLevel,
    ScientificValidator,
    scientific_validator,
    validate_deflection_parameters,
    validate_impact_parameters,
    validate_orbital_parameters,
)

__all__ = [
    "Quantity",
    "Dimension",
    "convert",
    "convert_quantity",
    "are_compatible",
    "units_of_type",
    "get_constant",
    "list_constants",
    "CalculationError",
    "CalculationException",
    "DimensionalAnalysisError",
    "InvalidUncertaintyError",
    "UnitConversionError",
    "UnknownConstantError",
    "OrbitalStateVector",
    "PerturbationType",
    "PerturbationResult",
    "PerturbationConfig",
    "PerturbationCalculator",
    "ObjectProperties",
    "ExponentialAtmosphere",
    "create_perturbation_calculator",
    "estimate_perturbation_magnitudes",
    "get_significant_perturbations",
    "specific_orbital_energy",
    "GeologicalProperties",
    "GEOLOGICAL_PRESETS",
    "SeismicResult",
    "GroundMotionResult",
    "calculate_seismic_magnitude",
    "geological_preset",
    "calculate_ground_motion_at_distance",
    "validate_against_known_impacts",
    "Disclaimer",
    "DisclaimerLevel",
    "DisclaimerCategory",
    "ScientificValidator",
    "scientific_validator",
    "validate_impact_parameters",
    "validate_orbital_parameters",
    "validate_deflection_parameters",
    "ImpactorParameters",
    "ImpactEnergyResult",
    "SafeImpactResult",
    "calculate_kinetic_energy",
    "calculate_impact_energy",
    "energy_to_tnt",
    "create_fallback_parameters",
    "safe_calculate_impact",
]
