"""
This module contains tools for converting between units commonly used in
aircraft weight estimation and mission performance.

All conversions are pure functions of their argument, and work equally well on
scalars and numpy arrays.
"""

__author__ = "Andras Sobester"

import scipy.constants as sc

# Imperial TSFC is quoted as pound-mass of fuel per hour, per pound-force
_LBM_KG = sc.pound
_LBF_N = sc.pound * sc.g


def ft_m(length_feet):
    """Converts length value from feet to meters"""
    return length_feet * 0.3048


def nmi_m(length_nmi):
    """Converts length value from nautical miles to metres"""
    return length_nmi * sc.nautical_mile


def mps_kts(speed_mps):
    """Convert speed value from m/s to knots"""
    return speed_mps * 1.9438445


def kts_mps(speed_kts):
    """Convert speed value knots to mps"""
    return speed_kts * 0.5144444


def fpm_mps(speed_fpm):
    """Convert speed value from feet/min to m/s"""
    return ft_m(speed_fpm) / 60.0


def kN_N(force_kn):
    """Convert force from kN to N"""
    return force_kn * 1e3


def N_kN(force_n):
    """Convert force from N to kN"""
    return force_n / 1e3


def W_kW(power_w):
    """Convert power from watts to kilowatts"""
    return power_w / 1e3


def kW_W(power_kw):
    """Convert power from kilowatts to watts"""
    return power_kw * 1e3


def kWh_J(energy_kwh):
    """Convert energy from kilowatt-hours to joules"""
    return energy_kwh * 3.6e6


def tsfcSI_tsfcImp(tsfc_kgpsn):
    """
    Convert thrust specific fuel consumption from kg/(s N) to lbm/(hr lbf).

    Args:
        tsfc_kgpsn: TSFC, in kilograms of fuel per second per Newton of thrust.

    Returns:
        TSFC, in pounds-mass of fuel per hour per pound-force of thrust.

    """
    return tsfc_kgpsn / _LBM_KG * 3600 * _LBF_N


def tsfcImp_tsfcSI(tsfc_lbmphrlbf):
    """
    Convert thrust specific fuel consumption from lbm/(hr lbf) to kg/(s N).

    Args:
        tsfc_lbmphrlbf: TSFC, in pounds-mass per hour per pound-force.

    Returns:
        TSFC, in kilograms of fuel per second per Newton of thrust.

    """
    return tsfc_lbmphrlbf * _LBM_KG / 3600 / _LBF_N
