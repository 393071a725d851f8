"""
Module for sizing the propulsion system of an aircraft to a thrust (or power)
requirement, and for estimating the thrust it makes available in flight.
"""
import typing

import numpy as np
from scipy import constants

from ADWpy import atmospheres as at
from ADWpy import unitconversions as uc
from ADWpy.aircraftspec import (
    AircraftSpec, PropArch, UnsupportedAircraftClassError, VehicleClass
)
from ADWpy.mtools4acdc import recastasnpfloatarray, reverttoscalar

__all__ = ["TP0ratio", "thrust_lapse", "size_propulsion", "thrust_available"]
__author__ = "Yaseen Reza"


def TP0ratio(mach, altitude_m, atmosphere=None):
    """
    Compute the stagnation temperature and pressure ratio to sea-level static.

    Args:
        mach: Freestream Mach number.
        altitude_m: Geopotential altitude, in metres.
        atmosphere: An atmosphere object. Optional, defaults to ISA.

    Returns:
        A tuple (theta0, delta0), each quantity is the total quantity divided
        by the sea-level, standard day static quantity.

    """
    atmosphere = at.isa if atmosphere is None else atmosphere
    mach = recastasnpfloatarray(mach)

    temp_c = recastasnpfloatarray(atmosphere.airtemp_c(altitude_m))
    pressure_pa = recastasnpfloatarray(atmosphere.airpress_pa(altitude_m))
    theta0 = at.tempratio(temp_c=temp_c, mach=mach)
    delta0 = at.pressratio(pressure_pa=pressure_pa, mach=mach)

    return theta0, delta0


def thrust_lapse(vehicleclass: VehicleClass, mach, altitude_m,
                 atmosphere=None):
    """
    Ratio of thrust available at a flight condition to sea-level static thrust.

    Args:
        vehicleclass: Turbofan (high bypass ratio) or turboprop aircraft.
        mach: Flight Mach number.
        altitude_m: Flight level (above mean sea level), in metres.
        atmosphere: Alternative atmosphere object. Optional, defaults to ISA.

    Returns:
        The thrust lapse. NaN where the model isn't valid (Mach >= 0.9).

    References:
        -   J. D. Mattingly, W. H. Heiser, D. T. Pratt, *Aircraft Engine Design*
            2nd ed. Reston, Virginia: AIAA, 2002. Sections 2.3.2, 3.3.2.

    """
    mach = recastasnpfloatarray(mach)
    altitude_m = recastasnpfloatarray(altitude_m)
    mach, altitude_m = np.broadcast_arrays(mach, altitude_m)

    theta0, delta0 = TP0ratio(mach, altitude_m, atmosphere)
    # Assume theta break (throttle ratio) of 1.05
    TR = 1.05
    hot = theta0 > TR

    if vehicleclass is VehicleClass.TURBOFAN:
        lapse = delta0 * (1 - 0.49 * mach ** 0.5)
        lapse[hot] -= (delta0 * 3 * (theta0 - TR) / (1.5 + mach))[hot]
    elif vehicleclass is VehicleClass.TURBOPROP:
        lowspeed = mach <= 0.1
        dmach = np.where(lowspeed, 1.0, mach - 0.1)
        lapse = delta0 * (1 - 0.96 * dmach ** 0.25)
        lapse[hot] -= (delta0 * 3 * (theta0 - TR) / 8.13 / dmach)[hot]
        lapse[lowspeed] = delta0[lowspeed]
    else:
        errormsg = f"No thrust lapse model for {vehicleclass=}"
        raise UnsupportedAircraftClassError(errormsg)

    lapse = np.clip(lapse, 0, None)
    lapse[~(mach < 0.9)] = np.nan  # Invalidate M >= 0.9

    return reverttoscalar(lapse)


def _electric_machines(spec: AircraftSpec, emotor_w: float):
    """Weights of motors, generators, and cables for a given motor power."""
    arch = spec.propulsion.arch
    power = spec.power

    if arch is PropArch.CONVENTIONAL:
        return None, None, 0.0

    if emotor_w > 0 and power.p_w_em is None:
        errormsg = f"{arch} needs the electric motor power-weight ratio"
        raise ValueError(errormsg)
    em_kg = uc.W_kW(emotor_w) / power.p_w_em if emotor_w > 0 else 0.0

    eg_kg = None
    if arch is PropArch.SERIES_HYBRID:
        if emotor_w > 0 and (power.p_w_eg is None or power.eta_em is None):
            errormsg = (
                f"{arch} needs the generator power-weight ratio and the motor "
                f"efficiency"
            )
            raise ValueError(errormsg)
        eg_kg = uc.W_kW(emotor_w / power.eta_em) / power.p_w_eg \
            if emotor_w > 0 else 0.0

    cables_kg = spec.propulsion.cable_kgpkw * uc.W_kW(emotor_w)

    return em_kg, eg_kg, cables_kg


def size_propulsion(spec: AircraftSpec) -> AircraftSpec:
    """
    Size the propulsion system to the aircraft's thrust or power requirement.

    The requirement is split between the gas turbines and the electric motors
    according to the sea-level static power split (`spec.power.lam_sls`,
    ignored for conventional architectures), and shared equally between
    engines.

    Args:
        spec: Aircraft specification with a sea-level static thrust
            requirement (`propulsion.thrust_sls_n`, turbofans) or power
            requirement (`power.power_sls_w`, turboprops).

    Returns:
        A new AircraftSpec with updated engine, electric motor, generator and
        cable weights, and per-engine sea-level static thrust and thrust
        supplements.

    """
    propulsion = spec.propulsion
    engine = propulsion.engine
    n = propulsion.numengines
    lam = spec.power.lam_sls if propulsion.arch.is_electrified else 0.0
    vtko_mps = spec.performance.vtko_mps

    if not 0 <= lam < 1:
        raise ValueError(f"Power split must lie in [0, 1), got {lam=}")

    if spec.vehicleclass is VehicleClass.TURBOFAN:
        if propulsion.thrust_sls_n is None or engine.thrust_weight is None:
            errormsg = (
                f"Turbofan sizing needs a thrust requirement and the engine's "
                f"thrust-weight ratio, got {propulsion.thrust_sls_n=}, "
                f"{engine.thrust_weight=}"
            )
            raise ValueError(errormsg)
        thrust_engine_n = propulsion.thrust_sls_n * (1 - lam) / n
        thrustsupp_n = propulsion.thrust_sls_n * lam / n
        engines_kg = n * thrust_engine_n / (engine.thrust_weight * constants.g)
        emotor_w = n * thrustsupp_n * vtko_mps / propulsion.eta_prop

    elif spec.vehicleclass is VehicleClass.TURBOPROP:
        power_sls_w = spec.power.power_sls_w
        if power_sls_w is None or engine.power_weight_kwkg is None:
            errormsg = (
                f"Turboprop sizing needs a power requirement and the engine's "
                f"power-weight ratio, got {power_sls_w=}, "
                f"{engine.power_weight_kwkg=}"
            )
            raise ValueError(errormsg)
        power_engine_w = power_sls_w * (1 - lam) / n
        emotor_w = power_sls_w * lam
        engines_kg = n * uc.W_kW(power_engine_w) / engine.power_weight_kwkg
        # Static thrust equivalent, at the takeoff speed
        thrust_engine_n = propulsion.eta_prop * power_engine_w / vtko_mps
        thrustsupp_n = propulsion.eta_prop * emotor_w / n / vtko_mps

    else:
        errormsg = f"Can't size propulsion for {spec.vehicleclass=}"
        raise UnsupportedAircraftClassError(errormsg)

    em_kg, eg_kg, cables_kg = _electric_machines(spec, emotor_w)

    sized = spec.evolve(
        "weight", engines=engines_kg, em=em_kg, eg=eg_kg, cables=cables_kg)
    sized = sized.evolve(
        "propulsion",
        slsthrust_n=(thrust_engine_n,) * n,
        thrustsupp_n=(thrustsupp_n,) * n
    )
    return sized


def thrust_available(spec: AircraftSpec, mach, altitude_m,
                     atmosphere=None) -> typing.Tuple[float, ...]:
    """
    Thrust available from each engine at a flight condition.

    Args:
        spec: A sized aircraft specification.
        mach: Flight Mach number.
        altitude_m: Flight level (above mean sea level), in metres.
        atmosphere: Alternative atmosphere object. Optional, defaults to ISA.

    Returns:
        A tuple of thrusts, in Newtons, one per engine.

    """
    if not spec.propulsion.slsthrust_n:
        raise ValueError("Propulsion system has not been sized yet")
    lapse = thrust_lapse(spec.vehicleclass, mach, altitude_m, atmosphere)
    return tuple(float(t * lapse) for t in spec.propulsion.slsthrust_n)
