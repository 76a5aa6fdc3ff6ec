# pyimpact/validation.py

"""
Scientific validation and disclaimer generation.

Soft problems (parameters outside a model's calibrated range, uncertain
input data, limited accuracy) are reported as Disclaimer records rather than
exceptions, so a caller can still show a best-effort result with caveats.

Severity order: INFO < WARNING < CAUTION < CRITICAL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Union


class DisclaimerLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CAUTION = "CAUTION"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    DisclaimerLevel.INFO: 1,
    DisclaimerLevel.WARNING: 2,
    DisclaimerLevel.CAUTION: 3,
    DisclaimerLevel.CRITICAL: 4,
}


class DisclaimerCategory(str, Enum):
    ACCURACY = "ACCURACY"
    VALIDITY = "VALIDITY"
    ASSUMPTION = "ASSUMPTION"
    LIMITATION = "LIMITATION"
    DATA_QUALITY = "DATA_QUALITY"


class Impact(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class ModelLimitation:
    aspect: str
    description: str
    impact: Impact
    mitigation: Optional[str] = None


@dataclass(frozen=True)
class Citation:
    authors: str
    title: str
    year: int
    journal: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Disclaimer:
    level: DisclaimerLevel
    category: DisclaimerCategory
    message: str
    scientific_basis: str
    limitations: tuple[ModelLimitation, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    references: tuple[Citation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ParameterRange:
    min_value: float
    max_value: float
    unit: str
    description: str

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    disclaimer: Optional[Disclaimer] = None


def _ranges(table: Mapping[str, tuple]) -> MappingProxyType:
    return MappingProxyType({name: ParameterRange(*row) for name, row in table.items()})


PHYSICS_MODEL_RANGES: MappingProxyType[str, MappingProxyType[str, ParameterRange]] = MappingProxyType(
    {
        "impact": _ranges(
            {
                "energy": (1e12, 1e24, "J", "Impact energy range for crater scaling laws"),
                "velocity": (11_000, 72_000, "m/s", "Impact velocity range for realistic asteroid encounters"),
                "angle": (0, 90, "deg", "Impact angle from horizontal"),
                "diameter": (0.001, 100_000, "m", "Asteroid diameter range for impact calculations"),
            }
        ),
        "orbital": _ranges(
            {
                "semi_major_axis": (0.1, 100, "AU", "Semi-major axis range for near-Earth objects"),
                "eccentricity": (0, 0.99, "", "Eccentricity range for bound orbits"),
                "inclination": (0, 180, "deg", "Orbital inclination range"),
                "time_span": (-100, 100, "year", "Time span for accurate orbital propagation"),
            }
        ),
        "deflection": _ranges(
            {
                "delta_v": (1e-6, 1000, "m/s", "Delta-V range for realistic deflection missions"),
                "lead_time": (1, 50, "year", "Lead time range for deflection effectiveness"),
                "asteroid_mass": (1e6, 1e18, "kg", "Asteroid mass range for deflection calculations"),
            }
        ),
    }
)

SCIENTIFIC_REFERENCES: MappingProxyType[str, Citation] = MappingProxyType(
    {
        "holsapple2007": Citation(
            "Holsapple, K. A., & Housen, K. R.",
            "A crater and its ejecta: An interpretation of Deep Impact",
            2007,
            journal="Icarus",
            doi="10.1016/j.icarus.2006.10.031",
            notes="Crater scaling laws for impact calculations",
        ),
        "collins2005": Citation(
            "Collins, G. S., Melosh, H. J., & Marcus, R. A.",
            "Earth Impact Effects Program: A Web-based computer program for calculating "
            "the regional environmental consequences of a meteoroid impact on Earth",
            2005,
            journal="Meteoritics & Planetary Science",
            doi="10.1111/j.1945-5100.2005.tb00157.x",
            notes="Comprehensive impact effects modeling",
        ),
        "glasstone1977": Citation(
            "Glasstone, S., & Dolan, P. J.",
            "The Effects of Nuclear Weapons",
            1977,
            url="https://www.fourmilab.ch/etexts/www/effects/",
            notes="Nuclear effects scaling for airburst modeling",
        ),
        "benMenahem1975": Citation(
            "Ben-Menahem, A.",
            "Source parameters from spectra of long-period seismic body waves",
            1975,
            journal="Journal of Geophysical Research",
            doi="10.1029/JB080i026p03815",
            notes="Seismic magnitude scaling for impact events",
        ),
        "meeus1998": Citation(
            "Meeus, J.",
            "Astronomical Algorithms",
            1998,
            notes="Standard reference for astronomical calculations",
        ),
        "standish1998": Citation(
            "Standish, E. M.",
            "JPL Planetary and Lunar Ephemerides",
            1998,
            url="https://ssd.jpl.nasa.gov/planets/eph_export.html",
            notes="JPL ephemeris standards and accuracy",
        ),
        "ahrens1992": Citation(
            "Ahrens, T. J., & Harris, A. W.",
            "Deflection and fragmentation of near-Earth asteroids",
            1992,
            journal="Nature",
            doi="10.1038/360429a0",
            notes="Nuclear deflection physics and effectiveness",
        ),
    }
)

_DOMAIN_REFERENCES = {
    "impact": ("holsapple2007", "collins2005", "glasstone1977", "benMenahem1975"),
    "orbital": ("meeus1998", "standish1998"),
    "deflection": ("ahrens1992", "holsapple2007"),
}
_ACCURACY_REFERENCES = ("collins2005", "standish1998")

_MODEL_LEVELS = {
    "impact": DisclaimerLevel.WARNING,
    "orbital": DisclaimerLevel.INFO,
    "deflection": DisclaimerLevel.CAUTION,
}
_MODEL_MESSAGES = {
    "impact": "Impact calculations use simplified models with several assumptions",
    "orbital": "Orbital mechanics calculations include standard approximations",
    "deflection": "Deflection effectiveness estimates are based on idealized scenarios",
}

_DATA_LEVELS = {
    Impact.HIGH: DisclaimerLevel.CRITICAL,
    Impact.MEDIUM: DisclaimerLevel.CAUTION,
    Impact.LOW: DisclaimerLevel.INFO,
}
_DATA_MESSAGES = {
    Impact.HIGH: "Input data has high uncertainty or limited observational basis",
    Impact.MEDIUM: "Input data has moderate uncertainty typical of astronomical observations",
    Impact.LOW: "Input data is well-constrained with low uncertainty",
}

OUT_OF_RANGE_RECOMMENDATIONS = (
    "Verify input parameters are physically reasonable",
    "Consider using alternative calculation methods for extreme cases",
    "Consult scientific literature for specialized scenarios",
)
MODEL_RECOMMENDATIONS = (
    "Results should be interpreted as estimates with inherent uncertainties",
    "For critical applications, consult detailed mission studies",
    "Consider multiple calculation methods for cross-validation",
)
DATA_QUALITY_RECOMMENDATIONS = (
    "Consider uncertainty ranges in all calculations",
    "Cross-reference with multiple data sources when possible",
    "Update data regularly from authoritative sources",
)
ACCURACY_RECOMMENDATIONS = (
    "Use results as estimates rather than precise predictions",
    "Consider accuracy limitations in decision-making",
    "Validate against independent calculations when possible",
)

DATA_CURRENCY_LIMIT = timedelta(days=365)


def _references(keys: Iterable[str]) -> tuple[Citation, ...]:
    return tuple(SCIENTIFIC_REFERENCES[k] for k in keys if k in SCIENTIFIC_REFERENCES)


def _out_of_range_level(value: float, r: ParameterRange) -> DisclaimerLevel:
    # ratio rule for positive bounds; zero/negative bounds use the range width
    width = r.max_value - r.min_value
    if value < r.min_value:
        far = value < 0.1 * r.min_value if r.min_value > 0 else value < r.min_value - width
    else:
        far = value > 10.0 * r.max_value if r.max_value > 0 else value > r.max_value + width
    return DisclaimerLevel.CRITICAL if far else DisclaimerLevel.CAUTION


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def _data_age(updated: datetime, now: datetime) -> timedelta:
    # naive stamps are read in the other side's zone
    if updated.tzinfo is None and now.tzinfo is not None:
        updated = updated.replace(tzinfo=now.tzinfo)
    elif now.tzinfo is None and updated.tzinfo is not None:
        now = now.replace(tzinfo=updated.tzinfo)
    return now - updated


class ScientificValidator:
    """
    Validity-range checks and disclaimer generation for the physics models.

    Stateless: every method builds new Disclaimer records from the static
    range and reference tables.
    """

    def __init__(self, ranges=None, references=None):
        self.ranges = PHYSICS_MODEL_RANGES if ranges is None else ranges
        self.references = SCIENTIFIC_REFERENCES if references is None else references

    def relevant_references(self, domain: str) -> tuple[Citation, ...]:
        return tuple(self.references[k] for k in _DOMAIN_REFERENCES.get(domain, ()) if k in self.references)

    def validate_parameter(
        self, domain: str, name: str, value: float, unit: Optional[str] = None
    ) -> ValidationResult:
        """
        Check ``value`` against the calibrated range for ``domain``/``name``.

        Returns:
            ValidationResult: valid with no disclaimer when in range; otherwise
            a VALIDITY disclaimer (CAUTION near the range, CRITICAL far outside).
            Unknown parameters yield a WARNING and ``is_valid=False``.
        """
        r = self.ranges.get(domain, {}).get(name)
        if r is None:
            return ValidationResult(
                False,
                Disclaimer(
                    level=DisclaimerLevel.WARNING,
                    category=DisclaimerCategory.VALIDITY,
                    message=f'Unknown parameter "{name}" for {domain} calculations',
                    scientific_basis="Parameter not defined in validation ranges",
                    limitations=(
                        ModelLimitation(
                            "Parameter validation",
                            "Parameter not included in standard validation ranges",
                            Impact.MEDIUM,
                        ),
                    ),
                ),
            )

        if r.contains(value):
            return ValidationResult(True)

        shown = f"{value:g} {unit or r.unit}".rstrip()
        bounds = f"[{r.min_value:g}, {r.max_value:g}] {r.unit}".rstrip()
        return ValidationResult(
            False,
            Disclaimer(
                level=_out_of_range_level(value, r),
                category=DisclaimerCategory.VALIDITY,
                message=f"Parameter {name} ({shown}) is outside validated range {bounds}",
                scientific_basis=r.description,
                limitations=(
                    ModelLimitation(
                        "Model validity",
                        "Physics models may not be accurate outside validated parameter ranges",
                        Impact.HIGH,
                        "Use results with extreme caution and consider alternative approaches",
                    ),
                ),
                recommendations=OUT_OF_RANGE_RECOMMENDATIONS,
                references=self.relevant_references(domain),
            ),
        )

    def generate_model_disclaimer(
        self,
        domain: str,
        assumptions: Sequence[str],
        limitations: Sequence[ModelLimitation],
    ) -> Disclaimer:
        level = _MODEL_LEVELS.get(domain, DisclaimerLevel.WARNING)
        basis = f"Standard {domain} physics models with documented limitations"
        if assumptions:
            basis += ". Assumptions: " + "; ".join(assumptions)
        return Disclaimer(
            level=level,
            category=DisclaimerCategory.ASSUMPTION,
            message=_MODEL_MESSAGES.get(domain, f"{domain} calculations use simplified models"),
            scientific_basis=basis,
            limitations=tuple(limitations),
            recommendations=MODEL_RECOMMENDATIONS,
            references=self.relevant_references(domain),
        )

    def generate_data_quality_disclaimer(
        self,
        source: str,
        uncertainty_level: Union[Impact, str],
        last_updated: Optional[Union[date, datetime]] = None,
        now: Optional[datetime] = None,
    ) -> Disclaimer:
        level = Impact(uncertainty_level)
        limitations = [
            ModelLimitation(
                "Data quality",
                f"{source} data has {level.value.lower()} uncertainty",
                level,
                "Obtain additional observations or use conservative estimates" if level is Impact.HIGH else None,
            )
        ]
        if last_updated is not None:
            updated = _as_datetime(last_updated)
            if now is None:
                now = datetime.now(timezone.utc) if updated.tzinfo else datetime.now()
            if _data_age(updated, now) > DATA_CURRENCY_LIMIT:
                limitations.append(
                    ModelLimitation(
                        "Data currency",
                        "Data may be outdated and not reflect recent observations",
                        Impact.MEDIUM,
                        "Check for updated data from original sources",
                    )
                )
        return Disclaimer(
            level=_DATA_LEVELS[level],
            category=DisclaimerCategory.DATA_QUALITY,
            message=_DATA_MESSAGES[level],
            scientific_basis=f"Data quality assessment based on {source} standards",
            limitations=tuple(limitations),
            recommendations=DATA_QUALITY_RECOMMENDATIONS,
            references=_references(["standish1998"]),
        )

    def generate_accuracy_disclaimer(
        self, calculation: str, error_percent: float, uncertainty_propagated: bool = False
    ) -> Disclaimer:
        if error_percent > 50:
            level = DisclaimerLevel.CRITICAL
        elif error_percent >= 10:
            level = DisclaimerLevel.CAUTION
        else:
            level = DisclaimerLevel.INFO
        mitigation = (
            "Uncertainty propagation included in results"
            if uncertainty_propagated
            else "Consider additional uncertainty analysis"
        )
        return Disclaimer(
            level=level,
            category=DisclaimerCategory.ACCURACY,
            message=f"{calculation} results have estimated accuracy of ±{error_percent:g}%",
            scientific_basis="Accuracy estimate based on model validation and uncertainty analysis",
            limitations=(
                ModelLimitation(
                    "Calculation accuracy",
                    f"Results may vary by up to {error_percent:g}% from actual values",
                    Impact.HIGH if error_percent > 20 else Impact.MEDIUM,
                    mitigation,
                ),
            ),
            recommendations=ACCURACY_RECOMMENDATIONS,
            references=_references(_ACCURACY_REFERENCES),
        )

    def combine_disclaimers(self, disclaimers: Sequence[Disclaimer]) -> Disclaimer:
        """
        Merge disclaimers into one summary.

        Empty input gives an INFO baseline and a single disclaimer is returned
        as-is. Otherwise the highest level wins, limitations are deduplicated by
        aspect and references by title, first occurrence kept.
        """
        disclaimers = list(disclaimers)
        if not disclaimers:
            return Disclaimer(
                level=DisclaimerLevel.INFO,
                category=DisclaimerCategory.ACCURACY,
                message="Calculations performed within validated parameter ranges",
                scientific_basis="Standard physics models applied correctly",
            )
        if len(disclaimers) == 1:
            return disclaimers[0]

        level = max((d.level for d in disclaimers), key=lambda lv: lv.severity)

        limitations: dict[str, ModelLimitation] = {}
        references: dict[str, Citation] = {}
        recommendations: dict[str, None] = {}
        for d in disclaimers:
            for lim in d.limitations:
                limitations.setdefault(lim.aspect, lim)
            for ref in d.references:
                references.setdefault(ref.title, ref)
            for rec in d.recommendations:
                recommendations.setdefault(rec, None)

        return Disclaimer(
            level=level,
            category=DisclaimerCategory.LIMITATION,
            message=(
                f"Multiple limitations apply to these calculations ({len(disclaimers)} issues identified)"
            ),
            scientific_basis="Combined assessment of model limitations and data quality",
            limitations=tuple(limitations.values()),
            recommendations=tuple(recommendations),
            references=tuple(references.values()),
        )

    def format_disclaimer(self, d: Disclaimer) -> str:
        """Markdown rendering; empty sections are left out."""
        out = [f"**{d.level.value}**: {d.message}", "", f"**Scientific Basis**: {d.scientific_basis}", ""]

        if d.limitations:
            out.append("**Limitations**:")
            for lim in d.limitations:
                line = f"- **{lim.aspect}** ({lim.impact.value} impact): {lim.description}"
                if lim.mitigation:
                    line += f" *Mitigation: {lim.mitigation}*"
                out.append(line)
            out.append("")

        if d.recommendations:
            out.append("**Recommendations**:")
            out.extend(f"- {rec}" for rec in d.recommendations)
            out.append("")

        if d.references:
            out.append("**References**:")
            for ref in d.references:
                line = f"- {ref.authors} ({ref.year}). {ref.title}"
                if ref.journal:
                    line += f". *{ref.journal}*"
                if ref.doi:
                    line += f". DOI: {ref.doi}"
                if ref.url:
                    line += f". URL: {ref.url}"
                if ref.notes:
                    line += f". {ref.notes}"
                out.append(line)

        return "\n".join(out).rstrip("\n") + "\n"


scientific_validator = ScientificValidator()


def _validate_domain(domain: str, params: Mapping[str, Optional[float]]) -> list[Disclaimer]:
    disclaimers = []
    for name, value in params.items():
        if value is None:
            continue
        res = scientific_validator.validate_parameter(domain, name, value)
        if not res.is_valid and res.disclaimer is not None:
            disclaimers.append(res.disclaimer)
    return disclaimers


def validate_impact_parameters(
    energy: Optional[float] = None,
    velocity: Optional[float] = None,
    angle: Optional[float] = None,
    diameter: Optional[float] = None,
) -> list[Disclaimer]:
    """Energy (J), velocity (m/s), angle (deg), diameter (m)."""
    return _validate_domain(
        "impact", {"energy": energy, "velocity": velocity, "angle": angle, "diameter": diameter}
    )


def validate_orbital_parameters(
    semi_major_axis: Optional[float] = None,
    eccentricity: Optional[float] = None,
    inclination: Optional[float] = None,
    time_span: Optional[float] = None,
) -> list[Disclaimer]:
    """Semi-major axis (AU), eccentricity, inclination (deg), time span (years)."""
    return _validate_domain(
        "orbital",
        {
            "semi_major_axis": semi_major_axis,
            "eccentricity": eccentricity,
            "inclination": inclination,
            "time_span": time_span,
        },
    )


def validate_deflection_parameters(
    delta_v: Optional[float] = None,
    lead_time: Optional[float] = None,
    asteroid_mass: Optional[float] = None,
) -> list[Disclaimer]:
    """Delta-V (m/s), lead time (years), asteroid mass (kg)."""
    return _validate_domain(
        "deflection", {"delta_v": delta_v, "lead_time": lead_time, "asteroid_mass": asteroid_mass}
    )
