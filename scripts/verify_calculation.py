# scripts/verify_calculation.py

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pyimpact.impact import ImpactorParameters, safe_calculate_impact
from pyimpact.seismic import (
    KNOWN_IMPACT_EVENTS,
    calculate_ground_motion_at_distance,
    validate_against_known_impacts,
)
from pyimpact.validation import scientific_validator

# --- 1. Reference impactors ---
# Diameter / velocity / composition chosen to land near the historical energies
SCENARIOS = {
    "Tunguska_1908": ImpactorParameters(diameter_m=55.0, velocity_km_s=15.0, composition="stony"),
    "Chelyabinsk_2013": ImpactorParameters(diameter_m=19.0, velocity_km_s=19.0, composition="stony", mass_kg=1.2e7),
    "Barringer_Crater": ImpactorParameters(diameter_m=35.0, velocity_km_s=12.8, composition="metallic"),
}

DISTANCES_KM = (1.0, 10.0, 50.0, 200.0)

for name, params in SCENARIOS.items():
    ref_energy, (mw_lo, mw_hi) = KNOWN_IMPACT_EVENTS[name]
    out = safe_calculate_impact(params)
    res = out.result
    print(f"\n=== {name} ===")
    if res is None:
        print(f"  calculation failed: {[str(e) for e in out.errors]}")
        continue

    # --- 2. Energetics ---
    print(f"  Mass:              {res.mass.to_display_string(4)}")
    print(f"  Kinetic energy:    {res.kinetic_energy.to_display_string(4)} (reference {ref_energy:.2e} J)")
    print(f"  TNT equivalent:    {res.tnt_equivalent.to_display_string(3)}")
    print(f"  Effective energy:  {res.effective_energy.to_display_string(4)} (eta = {res.efficiency:.3f})")

    # --- 3. Seismic response ---
    s = res.seismic
    check = validate_against_known_impacts(res.kinetic_energy, s.moment_magnitude, name)
    print(f"  Moment magnitude:  {s.moment_magnitude.to_display_string(3)} (expected {mw_lo}-{mw_hi})")
    print(f"  Confidence:        {check.confidence} (deviation {check.deviation:.2f})")
    print(f"  Felt radius:       {s.felt_radius.to_display_string(3)}")
    print(f"  Damage radius:     {s.damage_radius.to_display_string(3)}")
    for d in DISTANCES_KM:
        gm = calculate_ground_motion_at_distance(s.moment_magnitude, d)
        print(
            f"    {d:6.1f} km: PGA {gm.peak_ground_acceleration.value:.3e} m/s²"
            f" | PGV {gm.peak_ground_velocity.value:.3e} m/s"
            f" | MMI {gm.mercalli_intensity.value:.1f}"
        )

    # --- 4. Disclaimers ---
    accuracy = scientific_validator.generate_accuracy_disclaimer(
        "Seismic magnitude", s.moment_magnitude.relative_uncertainty_percent, uncertainty_propagated=True
    )
    combined = scientific_validator.combine_disclaimers([res.disclaimer, accuracy])
    print()
    print(scientific_validator.format_disclaimer(combined))
