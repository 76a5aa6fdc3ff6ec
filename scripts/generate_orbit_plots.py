import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import matplotlib.pyplot as plt

import pyimpact.constants as c
from pyimpact.orbital import (
    EARTH_THERMOSPHERE_400KM,
    ObjectProperties,
    OrbitalStateVector,
    create_perturbation_calculator,
    specific_orbital_energy,
)

# --- 1. Initial states ---
J2000 = 2451545.0
R_LEO = c.R_EARTH_EQ_KM + 400.0
R_GEO = 42_164.0
SAT = ObjectProperties(mass=500.0, area=4.0, reflectivity=0.3)

CASES = {
    "LEO": (R_LEO, 12 * 3600.0, 30.0),  # 12 h, 30 s steps
    "GEO": (R_GEO, 5 * 86400.0, 300.0),  # 5 days, 5 min steps
}


# --- 2. Low-precision circular ephemerides (geocentric, km) ---
def sun_position(jd):
    theta = 2 * np.pi * (jd - J2000) / 365.25
    return c.AU_KM * np.array([np.cos(theta), np.sin(theta), 0.0])


def moon_position(jd):
    theta = 2 * np.pi * (jd - J2000) / 27.321661
    inc = np.radians(5.145)
    return c.MOON_DISTANCE_KM * np.array([np.cos(theta), np.sin(theta) * np.cos(inc), np.sin(theta) * np.sin(inc)])


# --- 3. Propagate ---
runs = {}
for name, (r0, duration, dt) in CASES.items():
    v0 = np.sqrt(c.MU_EARTH / r0)
    inc = np.radians(51.6 if name == "LEO" else 0.05)
    state = OrbitalStateVector([r0, 0.0, 0.0], [0.0, v0 * np.cos(inc), v0 * np.sin(inc)], J2000)
    atmosphere = EARTH_THERMOSPHERE_400KM if name == "LEO" else None
    calc = create_perturbation_calculator(name, SAT, atmosphere)
    states = calc.propagate_state(state, dt, duration, sun_position, moon_position)

    t_hours = np.array([(s.epoch - J2000) * 24.0 for s in states])
    xyz = np.array([s.position for s in states])
    energy = np.array([specific_orbital_energy(s) for s in states])
    runs[name] = (t_hours, xyz, energy)
    drift = (energy[-1] - energy[0]) / abs(energy[0])
    print(f"{name}: {len(states) - 1} steps, final radius {states[-1].radius:.3f} km, energy drift {drift:.3e}")

# --- 4. Visualization ---
output_dir = "docs/images"
os.makedirs(output_dir, exist_ok=True)

# Plot 1: Ground-plane trajectories
plt.style.use('seaborn-v0_8-darkgrid')
fig1, axes = plt.subplots(1, 2, figsize=(14, 7))
for ax, (name, (t_hours, xyz, _)) in zip(axes, runs.items()):
    ax.plot(xyz[:, 0], xyz[:, 1], color='royalblue', linewidth=0.8, label=f'{name} trajectory')
    ax.plot(xyz[0, 0], xyz[0, 1], 'o', color='crimson', markersize=6, label='Initial position')
    ax.add_patch(plt.Circle((0, 0), c.R_EARTH_EQ_KM, color='seagreen', alpha=0.4, label='Earth'))
    ax.set_title(f'{name}: {t_hours[-1]:.0f} h of perturbed motion', fontsize=14)
    ax.set_xlabel('X (km)', fontsize=12)
    ax.set_ylabel('Y (km)', fontsize=12)
    ax.set_aspect('equal', adjustable='box')
    ax.legend()
fig1.tight_layout()
plot1_path = os.path.join(output_dir, "orbit-trajectories.png")
fig1.savefig(plot1_path)
print(f"Saved plot to {plot1_path}")

# Plot 2: Specific orbital energy relative to the initial value
fig2, ax2 = plt.subplots(figsize=(12, 6))
for name, (t_hours, _, energy) in runs.items():
    ax2.plot(t_hours, (energy - energy[0]) / abs(energy[0]), label=name)
ax2.axhline(0.0, color='gray', linestyle='--', linewidth=1)
ax2.set_title('Relative Change in Specific Orbital Energy', fontsize=16)
ax2.set_xlabel('Time since epoch (hours)', fontsize=12)
ax2.set_ylabel('ΔE / |E₀|', fontsize=12)
ax2.legend()
fig2.tight_layout()
plot2_path = os.path.join(output_dir, "orbit-energy-drift.png")
fig2.savefig(plot2_path)
print(f"Saved plot to {plot2_path}")

plt.close('all')
print("Successfully generated and saved both plots.")
