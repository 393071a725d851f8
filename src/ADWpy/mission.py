"""
This module flies an aircraft through a mission profile (climb, cruise,
descent), evaluating the fuel flow of each engine at every mission point, and
contains the on-design sizing loop that couples mission fuel burn to the weight
convergence engine.

The mission is evaluated quasi-steadily: at each point, thrust required follows
from the aircraft's weight, lift-to-drag ratio and climb (or descent) rate, and
the aircraft's mass is decremented by the fuel burned until the next point.

"""
from dataclasses import dataclass
import enum
import typing
import warnings

import numpy as np
import pandas as pd
from scipy import constants

from ADWpy import atmospheres as at
from ADWpy import fuelflow as ff
from ADWpy import propulsion as pr
from ADWpy import weights as wt
from ADWpy.aircraftspec import AircraftSpec, zero_if_none

__all__ = [
    "MissionInfeasibleError", "SegmentKind", "MissionSegment",
    "MissionProfile", "MissionHistory", "standard_profile", "fly_mission",
    "size_aircraft"
]
__author__ = "Yaseen Reza"


class MissionInfeasibleError(RuntimeError):
    """The aircraft is physically unable to fly the mission."""


class SegmentKind(enum.Enum):
    CLIMB = "climb"
    CRUISE = "cruise"
    DESCENT = "descent"


@dataclass(frozen=True)
class MissionSegment:
    """
    One phase of a mission, discretised into evenly spaced points.

    Altitude and Mach number vary linearly from the start to the end of the
    segment. For a climb, `rate_mps` is the maximum rate of climb, for a
    descent it is the (fixed) rate of descent, and it is ignored in cruise.
    """
    kind: SegmentKind
    npoints: int
    alt_start_m: float
    alt_end_m: float
    mach_start: float
    mach_end: float
    ld: float
    lam: float = 0.0
    rate_mps: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "kind", SegmentKind(self.kind))
        if self.npoints < 2:
            raise ValueError(f"Segment needs two or more points, {self.npoints=}")
        if not 0 <= self.lam < 1:
            raise ValueError(f"Power split must lie in [0, 1), got {self.lam=}")
        if self.ld <= 0:
            raise ValueError(f"Lift-to-drag ratio must be positive, {self.ld=}")
        if self.kind is not SegmentKind.CRUISE and self.rate_mps <= 0:
            errormsg = f"{self.kind.value} needs a positive {self.rate_mps=}"
            raise ValueError(errormsg)
        climbing = self.alt_end_m - self.alt_start_m
        if (self.kind is SegmentKind.CLIMB and climbing < 0) or \
                (self.kind is SegmentKind.DESCENT and climbing > 0):
            errormsg = (
                f"A {self.kind.value} can't go from {self.alt_start_m=} to "
                f"{self.alt_end_m=}"
            )
            raise ValueError(errormsg)

    @property
    def altitudes_m(self) -> np.ndarray:
        return np.linspace(self.alt_start_m, self.alt_end_m, self.npoints)

    @property
    def machs(self) -> np.ndarray:
        return np.linspace(self.mach_start, self.mach_end, self.npoints)

    def distance_m(self, atmosphere=None) -> float:
        """Ground distance covered by a descent, in metres."""
        if self.kind is not SegmentKind.DESCENT:
            errormsg = f"Distance of a {self.kind.value} depends on the aircraft"
            raise ValueError(errormsg)
        atmosphere = at.isa if atmosphere is None else atmosphere
        altitudes_m = self.altitudes_m
        tas_mps = np.atleast_1d(atmosphere.tas_mps(self.machs, altitudes_m))
        dt_s = -np.diff(altitudes_m) / self.rate_mps
        return float((tas_mps[:-1] * dt_s).sum())


@dataclass(frozen=True)
class MissionProfile:
    """An ordered sequence of mission segments, flown over a given range."""
    segments: typing.Tuple[MissionSegment, ...]
    range_m: float

    def __post_init__(self):
        object.__setattr__(self, "segments", tuple(self.segments))
        kinds = [segment.kind for segment in self.segments]
        if kinds.count(SegmentKind.CRUISE) > 1:
            raise ValueError("A mission profile can have one cruise segment")
        if SegmentKind.CRUISE in kinds:
            after = kinds[kinds.index(SegmentKind.CRUISE) + 1:]
            if SegmentKind.CLIMB in after:
                raise ValueError("Climbs after the cruise are not supported")

    @property
    def npoints(self) -> int:
        return sum(segment.npoints for segment in self.segments)


def standard_profile(spec: AircraftSpec, atmosphere=None) -> MissionProfile:
    """
    Climb, cruise, and descent, using the performance targets of an aircraft.

    Args:
        spec: Aircraft specification.
        atmosphere: Atmosphere object. Optional, defaults to ISA.

    Returns:
        A MissionProfile object, flown over the aircraft's design range.

    """
    atmosphere = at.isa if atmosphere is None else atmosphere
    perf, aero, power, settings = \
        spec.performance, spec.aero, spec.power, spec.settings

    mach_tko = perf.vtko_mps / atmosphere.vsound_mps(perf.alt_tko_m)

    climb = MissionSegment(
        SegmentKind.CLIMB, settings.clbpoints, perf.alt_tko_m, perf.alt_crs_m,
        mach_tko, perf.mach_crs, aero.ld_clb, power.lam_clb, perf.rcmax_mps)
    cruise = MissionSegment(
        SegmentKind.CRUISE, settings.crspoints, perf.alt_crs_m,
        perf.alt_crs_m, perf.mach_crs, perf.mach_crs, aero.ld_crs,
        power.lam_crs)
    descent = MissionSegment(
        SegmentKind.DESCENT, settings.despoints, perf.alt_crs_m,
        perf.alt_tko_m, perf.mach_crs, mach_tko, aero.ld_des, power.lam_des,
        perf.rdes_mps)

    return MissionProfile((climb, cruise, descent), range_m=perf.range_m)


class MissionHistory:
    """
    State of the aircraft at each point of a mission, and the thrust and fuel
    flow of each engine.

    Per-point arrays have shape (npoints,), per-engine arrays have shape
    (npoints, numengines). Undefined TSFC values are stored as NaN.
    """

    def __init__(self, npoints: int, numengines: int):
        self.time_s = np.zeros(npoints)
        self.distance_m = np.zeros(npoints)
        self.altitude_m = np.zeros(npoints)
        self.mach = np.zeros(npoints)
        self.tas_mps = np.zeros(npoints)
        self.mass_kg = np.zeros(npoints)
        self.fuelburned_kg = np.zeros(npoints)
        self.electricenergy_j = np.zeros(npoints)
        self.phase = np.empty(npoints, dtype=object)

        shape = (npoints, numengines)
        self.thrustreq_n = np.zeros(shape)
        self.thrustavail_n = np.zeros(shape)
        self.thrust_n = np.zeros(shape)
        self.fuelflow_kgps = np.zeros(shape)
        self.tsfc = np.full(shape, np.nan)
        self.tsfc_imperial = np.full(shape, np.nan)
        return

    def __len__(self):
        return len(self.time_s)

    @property
    def numengines(self) -> int:
        return self.thrust_n.shape[1]

    def thrust_available(self, missionidx: int, engineidx: int) -> float:
        """Thrust available from an engine at a mission point, in Newtons."""
        return float(self.thrustavail_n[missionidx, engineidx])

    def record(self, missionidx: int, engineidx: int,
               result: ff.FuelFlowResult) -> None:
        """Store the fuel flow model's output for an engine, at a point."""
        self.thrust_n[missionidx, engineidx] = result.thrust_n
        self.fuelflow_kgps[missionidx, engineidx] = result.fuel_kgps
        if result.tsfc is not None:
            self.tsfc[missionidx, engineidx] = result.tsfc
            self.tsfc_imperial[missionidx, engineidx] = result.tsfc_imperial
        return

    @property
    def fuel_burned_kg(self) -> float:
        """Total fuel burned over the mission."""
        return float(self.fuelburned_kg[-1])

    def to_dataframe(self) -> pd.DataFrame:
        """Mission history as a table, one row per mission point."""
        columns = {
            "phase": self.phase,
            "time [s]": self.time_s,
            "distance [m]": self.distance_m,
            "altitude [m]": self.altitude_m,
            "mach": self.mach,
            "TAS [m/s]": self.tas_mps,
            "mass [kg]": self.mass_kg,
            "fuel burned [kg]": self.fuelburned_kg,
            "electric energy [J]": self.electricenergy_j,
        }
        for j in range(self.numengines):
            columns[f"thrust required {j} [N]"] = self.thrustreq_n[:, j]
            columns[f"thrust available {j} [N]"] = self.thrustavail_n[:, j]
            columns[f"thrust {j} [N]"] = self.thrust_n[:, j]
            columns[f"fuel flow {j} [kg/s]"] = self.fuelflow_kgps[:, j]
            columns[f"TSFC {j} [kg/(s N)]"] = self.tsfc[:, j]
            columns[f"TSFC {j} [lb/(h lbf)]"] = self.tsfc_imperial[:, j]
        return pd.DataFrame(columns)


def _fly(spec: AircraftSpec, profile: MissionProfile, takeoffmass_kg: float,
         atmosphere=None) -> MissionHistory:
    """Fly the profile once, from a given takeoff mass."""
    atmosphere = at.isa if atmosphere is None else atmosphere
    n = spec.propulsion.numengines
    history = MissionHistory(profile.npoints, n)

    mass_kg = takeoffmass_kg
    time_s = distance_m = fuel_kg = energy_j = 0.0
    i = 0
    for s, segment in enumerate(profile.segments):

        if segment.kind is SegmentKind.CRUISE:
            # Whatever the climb and descent don't cover is flown in cruise
            descents = [x for x in profile.segments[s + 1:]
                        if x.kind is SegmentKind.DESCENT]
            remaining_m = profile.range_m - distance_m \
                - sum(x.distance_m(atmosphere) for x in descents)
            dx_m = max(remaining_m, 0.0) / (segment.npoints - 1)

        altitudes_m, machs = segment.altitudes_m, segment.machs
        for k in range(segment.npoints):
            condition = at.FlightCondition(altitudes_m[k], machs[k])
            tas_mps = condition.tas_mps(atmosphere)
            thrustavail_n = pr.thrust_available(
                spec, machs[k], altitudes_m[k], atmosphere)

            history.time_s[i] = time_s
            history.distance_m[i] = distance_m
            history.altitude_m[i] = altitudes_m[k]
            history.mach[i] = machs[k]
            history.tas_mps[i] = tas_mps
            history.mass_kg[i] = mass_kg
            history.fuelburned_kg[i] = fuel_kg
            history.electricenergy_j[i] = energy_j
            history.phase[i] = segment.kind.value
            history.thrustavail_n[i, :] = thrustavail_n

            weight_n = mass_kg * constants.g
            drag_n = weight_n / segment.ld
            # Engines cover (1 - lam) of the thrust, electric motors the rest
            available_n = sum(thrustavail_n) / (1 - segment.lam)

            if segment.kind is SegmentKind.CLIMB:
                thrustreq_n = min(
                    drag_n + weight_n * segment.rate_mps / tas_mps, available_n)
                rate_mps = (thrustreq_n - drag_n) * tas_mps / weight_n
                if not rate_mps > 0:
                    errormsg = (
                        f"Unable to climb at {altitudes_m[k]=:.0f}, "
                        f"{machs[k]=:.3f} (thrust available "
                        f"{available_n:.0f} N, drag {drag_n:.0f} N)"
                    )
                    raise MissionInfeasibleError(errormsg)
            elif segment.kind is SegmentKind.CRUISE:
                thrustreq_n = drag_n
            else:
                thrustreq_n = max(
                    drag_n - weight_n * segment.rate_mps / tas_mps, 0.0)

            if not thrustreq_n <= available_n * (1 + 1e-9):
                errormsg = (
                    f"Thrust required ({thrustreq_n:.0f} N) exceeds thrust "
                    f"available ({available_n:.0f} N) in {segment.kind.value} "
                    f"at {altitudes_m[k]=:.0f}, {machs[k]=:.3f}"
                )
                raise MissionInfeasibleError(errormsg)

            # Share thrust equally between engines
            thrustreq_engine_n = thrustreq_n / n
            electricload_w = segment.lam * thrustreq_engine_n * tas_mps
            fuelflow_kgps = 0.0
            for j in range(n):
                history.thrustreq_n[i, j] = thrustreq_engine_n
                result = ff.compute_fuel_flow(
                    spec, condition, thrustreq_engine_n, electricload_w,
                    engineidx=j, missionidx=i, history=history,
                    atmosphere=atmosphere
                )
                history.record(i, j, result)
                fuelflow_kgps += result.fuel_kgps
            fuelflow_kgps *= spec.propulsion.mdot_cf

            if not np.isfinite(fuelflow_kgps):
                errormsg = f"Non-finite fuel flow at mission point {i}"
                raise MissionInfeasibleError(errormsg)

            # Advance to the next point of the segment
            if k < segment.npoints - 1:
                dh_m = altitudes_m[k + 1] - altitudes_m[k]
                if segment.kind is SegmentKind.CLIMB:
                    dt_s = dh_m / rate_mps
                elif segment.kind is SegmentKind.CRUISE:
                    dt_s = dx_m / tas_mps
                else:
                    dt_s = -dh_m / segment.rate_mps
                time_s += dt_s
                distance_m += tas_mps * dt_s
                fuel_kg += fuelflow_kgps * dt_s
                energy_j += n * electricload_w * dt_s
                mass_kg -= fuelflow_kgps * dt_s

            i += 1

    return history


def fly_mission(spec: AircraftSpec, profile: MissionProfile = None,
                atmosphere=None) -> typing.Tuple[AircraftSpec, MissionHistory]:
    """
    Fly an already sized aircraft over a mission (off-design analysis).

    The takeoff mass is the OEW plus payload, crew, battery and fuel. The fuel
    load is iterated until it matches the fuel burned over the mission.

    Args:
        spec: A sized aircraft specification. The payload and the range to
            fly are taken from it.
        profile: Mission profile. Optional, defaults to the standard profile
            of the aircraft.
        atmosphere: Atmosphere object. Optional, defaults to ISA.

    Returns:
        A tuple (spec, history). The returned spec carries the fuel load
        required by the mission, the history the final mission flown.

    Raises:
        MissionInfeasibleError: If the aircraft can't fly the mission.

    """
    profile = standard_profile(spec, atmosphere) if profile is None else profile
    settings = spec.settings
    weight = spec.weight
    fixedmass_kg = \
        weight.oew + weight.payload + weight.crew + zero_if_none(weight.batt)

    fuel_kg = weight.fuel
    for _ in range(settings.analysis_maxiter):
        history = _fly(spec, profile, fixedmass_kg + fuel_kg, atmosphere)
        burned_kg = history.fuel_burned_kg
        settled = abs(burned_kg - fuel_kg) <= settings.analysis_tol * burned_kg
        fuel_kg = burned_kg
        if settled:
            break
    else:
        errormsg = (
            f"Fuel load failed to settle in {settings.analysis_maxiter} "
            f"iterations"
        )
        raise MissionInfeasibleError(errormsg)

    return spec.evolve("weight", fuel=fuel_kg), history


def size_aircraft(spec: AircraftSpec, profile: MissionProfile = None,
                  atmosphere=None, **kwargs
                  ) -> typing.Tuple[AircraftSpec, MissionHistory]:
    """
    Size an aircraft to its design mission (on-design analysis).

    Weights are converged, the design mission is flown from MTOW, and the
    fuel load is updated to the fuel burned, until the fuel load settles.

    Args:
        spec: Initial aircraft specification.
        profile: Mission profile. Optional, defaults to the standard profile
            of the aircraft (re-derived as the aircraft is sized).
        atmosphere: Atmosphere object. Optional, defaults to ISA.
        **kwargs: Passed on to `weights.converge_weights`.

    Returns:
        A tuple (spec, history), the sized aircraft and its design mission.
        A ConvergenceWarning is issued if the fuel load failed to settle.

    """
    settings = spec.settings
    for _ in range(settings.analysis_maxiter):
        spec = wt.converge_weights(spec, **kwargs)
        missionprofile = standard_profile(spec, atmosphere) \
            if profile is None else profile
        history = _fly(spec, missionprofile, spec.weight.mtow, atmosphere)
        burned_kg = history.fuel_burned_kg
        settled = \
            abs(burned_kg - spec.weight.fuel) <= settings.analysis_tol * burned_kg
        spec = spec.evolve("weight", fuel=burned_kg)
        if settled:
            break
    else:
        warnmsg = (
            f"Design mission fuel did not settle in "
            f"{settings.analysis_maxiter} iterations"
        )
        warnings.warn(warnmsg, wt.ConvergenceWarning, stacklevel=2)

    return spec, history
