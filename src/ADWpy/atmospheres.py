"""
This module contains tools for defining the standard atmosphere in which
mission performance and fuel-flow calculations are carried out, and for
turning a flight condition (altitude, Mach number) into a true airspeed.

"""
from dataclasses import dataclass
import warnings

import numpy as np

from ADWpy.mtools4acdc import recastasnpfloatarray, reverttoscalar

__author__ = "Andras Sobester"

# Specific gas constant for dry air
# (in Joules ) per kilogram per Kelvin
R_JPKGPK = 287.05287
# Dry air ratio of specific heats
GAMMA_DRY_AIR = 1.401


class Atmosphere:
    """
    The International Standard Atmosphere (**ISA**), or a temperature offset
    version of it. Based on ESDU Data Item 77022, `"Equations for calculation
    of International Standard Atmosphere and associated off-standard
    atmospheres"`, published in 1977, amended in 2008. It covers the first
    50km of the atmosphere.

    Examples:

        >>> from ADWpy import atmospheres as at
        >>> isa = at.Atmosphere()
        >>> round(isa.vsound_mps(0.0), 2)
        340.29

    """
    # Layer limits (geopotential), in m
    _levels_m = np.array([11000, 20000, 32000, 47000, 50000])
    # Base temperatures in K, and lapse rates in K/m (ESDU 77022, Table 11.3)
    _A = np.array([288.15, 216.65, 196.65, 139.05, 270.65])
    _B = np.array([-6.5e-3, 0.0, 1e-3, 2.8e-3, 0.0])
    # Pressure coefficients, gradient layers: p = (C + D h) ** E
    _C = {0: 8.9619638, 2: 0.70551848, 3: 0.34926867}
    _D = {0: -0.20216125e-3, 2: 3.5876861e-6, 3: 7.0330980e-6}
    _E = {0: 5.2558797, 2: -34.163218, 3: -12.201149}
    # Pressure coefficients, isothermal layers: p = F exp(G h)
    _F = {1: 128244.5, 4: 41828.42}
    _G = {1: -0.15768852e-3, 4: -0.12622656e-3}

    def __init__(self, offset_deg=0):
        """
        Args:
            offset_deg: Temperature offset from the standard day, in degrees
                Celsius (or Kelvin). Optional, defaults to zero.
        """
        self.offset_deg = offset_deg

    def _alttest(self, altitude_m):
        altitude_m = recastasnpfloatarray(altitude_m)
        if (altitude_m > self._levels_m[-1]).any():
            warnmsg = "Altitudes had to be limited to 50km where higher."
            warnings.warn(warnmsg, RuntimeWarning, stacklevel=3)
            altitude_m = np.clip(altitude_m, None, self._levels_m[-1])
        return altitude_m

    def _layer(self, altitude_m):
        """Index of the ISA layer that each altitude falls into."""
        return np.clip(
            np.searchsorted(self._levels_m, altitude_m, side="right"), 0, 4)

    def airtemp_k(self, altitude_m=0):
        """
        Ambient (static air) temperature, in Kelvin.

        Args:
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            Temperature, in Kelvin.

        """
        altitude_m = self._alttest(altitude_m)
        layer = self._layer(altitude_m)
        temp_k = self._A[layer] + self._B[layer] * altitude_m
        return reverttoscalar(temp_k + self.offset_deg)

    def airpress_pa(self, altitude_m=0):
        """
        Ambient (static air) pressure, in Pascal.

        Args:
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            Pressure, in Pascal.

        """
        altitude_m = self._alttest(altitude_m)
        layer = self._layer(altitude_m)
        press_pa = np.zeros_like(altitude_m)
        for i in range(5):
            inlayer = layer == i
            h = altitude_m[inlayer]
            if i in self._F:
                press_pa[inlayer] = self._F[i] * np.exp(self._G[i] * h)
            else:
                press_pa[inlayer] = (self._C[i] + self._D[i] * h) ** self._E[i]
        return reverttoscalar(press_pa)

    def airdens_kgpm3(self, altitude_m=0):
        """
        Ambient air density, from the ideal gas law, in kg/m^3.

        Args:
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            Density, in kilograms per metre cubed.

        """
        temp_k = recastasnpfloatarray(self.airtemp_k(altitude_m))
        press_pa = recastasnpfloatarray(self.airpress_pa(altitude_m))
        return reverttoscalar(press_pa / R_JPKGPK / temp_k)

    def airtemp_c(self, altitude_m=0):
        """Ambient (static air) temperature, in degrees Celsius."""
        return self.airtemp_k(altitude_m) - 273.15

    def vsound_mps(self, altitude_m=0):
        """
        Speed of sound in m/s at an altitude given in m.

        Args:
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            Speed of sound at altitude, in metres per second.

        """
        temp_k = recastasnpfloatarray(self.airtemp_k(altitude_m))
        return reverttoscalar(np.sqrt(1.4 * R_JPKGPK * temp_k))

    def mach(self, airspeed_mps, altitude_m=0):
        """
        Mach number at a given true airspeed (m/s) and altitude (m).

        Args:
            airspeed_mps: True airspeed, in metres per second.
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            Mach number.

        """
        airspeed_mps = recastasnpfloatarray(airspeed_mps)
        if (airspeed_mps < 0).any():
            negmsg = (
                "Airspeed < 0. If intentional, ignore this. Positive Mach no."
                " returned."
            )
            warnings.warn(negmsg, RuntimeWarning, stacklevel=2)
            airspeed_mps = abs(airspeed_mps)
        vs_mps = recastasnpfloatarray(self.vsound_mps(altitude_m))
        return reverttoscalar(airspeed_mps / vs_mps)

    def tas_mps(self, mach, altitude_m=0):
        """
        True airspeed for a given Mach number and altitude.

        Args:
            mach: Flight Mach number.
            altitude_m: Geopotential altitude(s) above mean sea level.

        Returns:
            True airspeed, in metres per second.

        """
        mach = recastasnpfloatarray(mach)
        vs_mps = recastasnpfloatarray(self.vsound_mps(altitude_m))
        return reverttoscalar(mach * vs_mps)


isa = Atmosphere()


@dataclass(frozen=True)
class FlightCondition:
    """A transient flight condition: altitude and Mach number."""
    altitude_m: float
    mach: float

    def tas_mps(self, atmosphere: Atmosphere = None) -> float:
        """True airspeed at this flight condition, in m/s."""
        atmosphere = isa if atmosphere is None else atmosphere
        return atmosphere.tas_mps(self.mach, self.altitude_m)


def tempratio(temp_c, mach):
    """Ratio of total temperature and the standard SL temperature"""
    temp_k = temp_c + 273.15
    return (temp_k / 288.15) * (1 + (mach ** 2) * (GAMMA_DRY_AIR - 1) / 2)


def pressratio(pressure_pa, mach):
    """Ratio of total pressure and the standard SL pressure"""
    exp = GAMMA_DRY_AIR / (GAMMA_DRY_AIR - 1)
    return (pressure_pa / 101325) * \
        (1 + (mach ** 2) * (GAMMA_DRY_AIR - 1) / 2) ** exp
