"""
Sample aircraft definitions, for use in examples and tests.
"""
from ADWpy import unitconversions as uc
from ADWpy.aircraftspec import AircraftSpec

__author__ = "Yaseen Reza"

# BADA fuel flow coefficients, of the A320neo's engines
_bada_a320neo = {"cff3": 0.299, "cff2": -0.346, "cff1": 0.701, "cffch": 8.0e-7}


def FZN1E():
    """
    Returns an AircraftSpec of the FlyZero FZN-1E, a liquid hydrogen fuelled
    narrowbody concept.

    References:
        -   Aerospace Technology Institute, "FlyZero: Narrowbody Concept
            Aircraft Report", FZO-AIN-REP-0007, 2022.
    """
    # Aerodynamic improvements over today's narrowbodies
    ld_cf = 1.30

    definition = {
        "tlar": {"eis": 2016, "vehicleclass": "Turbofan", "maxpax": 180},
        "aero": {
            "ld_clb": 16 * ld_cf, "ld_crs": 19.6 * ld_cf, "ld_des": 16 * ld_cf,
            "ws_kgm2": 594
        },
        "weight": {
            "mtow": 70_700, "fuel": 3_903, "payload": 23_000,
            "airframe_cf": 1.10
        },
        "propulsion": {
            "engine": {
                "name": "FZN-1E", **_bada_a320neo, "thrust_weight": 4.1,
                # Retarget A320neo -> 2030 technology -> hydrogen combustion
                "calibration": {
                    "reference": 14.7e-6, "targets": (12.6e-6, 4.7e-6)
                }
            },
            "arch": "C", "numengines": 2,
            "t_w": 170_000 / (70_700 * 9.81), "thrust_sls_n": 170_000,
            "eta_prop": 0.8, "mdot_cf": 1.0
        },
        "power": {"specenergy_fuel": 33.33},
        "performance": {
            "range_m": 4445e3, "vtko_mps": uc.kts_mps(135), "mach_crs": 0.79,
            "alt_crs_m": uc.ft_m(35_000), "alt_tko_m": 0.0,
            "rcmax_mps": uc.fpm_mps(2_250)
        },
        "settings": {
            "oew_tol": 0.001, "oew_maxiter": 50, "analysis_maxiter": 50,
            "clbpoints": 5, "crspoints": 5, "despoints": 5
        }
    }
    return AircraftSpec.from_dict(definition)


def A320neo():
    """
    Returns an AircraftSpec of the Airbus A320neo, with CFM LEAP-1A engines.

    References:
        -   Airbus, "A320 Aircraft Characteristics: Airport and Maintenance
            Planning", Rev. 2020.
        -   EASA, "Type-Certificate Data Sheet for LEAP-1A and LEAP-1C Series
            Engines", E.110.
    """
    definition = {
        "tlar": {"eis": 2016, "vehicleclass": "Turbofan", "maxpax": 180},
        "aero": {"ld_clb": 18.0, "ld_crs": 17.5, "ld_des": 18.0,
                 "ws_kgm2": 79_000 / 122.4},
        "weight": {"mtow": 79_000, "fuel": 9_000, "payload": 18_000},
        "propulsion": {
            "engine": {"name": "LEAP-1A", **_bada_a320neo,
                       "thrust_weight": 120_600 / (2_990 * 9.81)},
            "arch": "C", "numengines": 2,
            "t_w": 2 * 120_600 / (79_000 * 9.81)
        },
        "power": {"specenergy_fuel": 12.0},
        "performance": {
            "range_m": uc.nmi_m(2_000), "vtko_mps": uc.kts_mps(140),
            "mach_crs": 0.78, "alt_crs_m": uc.ft_m(35_000),
            "rcmax_mps": uc.fpm_mps(2_250)
        }
    }
    return AircraftSpec.from_dict(definition)


def ATR42():
    """
    Returns an AircraftSpec of the ATR 42-600, with PW127M engines.

    References:
        -   ATR, "ATR 42-600 Aircraft Characteristics", 2014.
    """
    definition = {
        "tlar": {"eis": 2012, "vehicleclass": "Turboprop", "maxpax": 48},
        "aero": {"ld_clb": 14.0, "ld_crs": 16.0, "ld_des": 14.0,
                 "ws_kgm2": 18_600 / 54.5},
        "weight": {"mtow": 18_600, "fuel": 1_500, "payload": 5_300,
                   "crew": 270},
        "propulsion": {
            "engine": {"name": "PW127M", "cff3": 0.18, "cff2": -0.21,
                       "cff1": 0.42, "cffch": 4.8e-7,
                       "power_weight_kwkg": 1_846 / 481},
            "arch": "C", "numengines": 2, "eta_prop": 0.8
        },
        "power": {"specenergy_fuel": 12.0, "p_w_kwkg": 2 * 1_846 / 18_600},
        "performance": {
            "range_m": uc.nmi_m(716), "vtko_mps": uc.kts_mps(110),
            "mach_crs": 0.45, "alt_crs_m": uc.ft_m(17_000),
            "rcmax_mps": uc.fpm_mps(1_800)
        }
    }
    return AircraftSpec.from_dict(definition)
