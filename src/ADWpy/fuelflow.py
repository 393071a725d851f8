"""
Simple off-design engine model, using the fuel flow equation from the BADA
database, for computing the fuel burn rate and thrust specific fuel
consumption of an engine at any point in a mission.
"""
from dataclasses import dataclass
import typing

import numpy as np

from ADWpy import unitconversions as uc
from ADWpy.atmospheres import FlightCondition

__all__ = ["TSFC_TABLE", "TSFCCalibration", "FuelFlowResult",
           "compute_fuel_flow"]
__author__ = "Yaseen Reza"

# Thrust below this (after subtracting electric supplements) means the
# electric motors are producing all the propulsive power
THRUST_NEGLIGIBLE_N = -1.0e-6

# Specific fuel consumption of real and notional engines, in kg/(s N)
TSFC_TABLE = {
    "A320neo": 14.7e-6,
    "A320-2030": 12.6e-6,
    "FZN-1E": 4.7e-6,
}


@dataclass(frozen=True)
class TSFCCalibration:
    """
    Retarget the fuel flow polynomial of a reference engine to other engines.

    The BADA polynomial is calibrated to a single reference engine. Scaling the
    fuel flow by ratios of specific fuel consumption approximates a different
    engine's fuel economy without re-deriving the coefficients. Each entry of
    `targets` contributes one factor (target / reference), applied in turn.

    Notes:
        Chaining several targets off the same reference multiplies their
        factors together. Whether this composition is meaningful beyond the
        combinations it was tuned on (e.g. A320neo -> 2030 target -> FZN-1E)
        is an open question; define calibrations per engine rather than
        assuming it generalises.

    Examples:

        >>> cal = TSFCCalibration.from_table("A320neo", ["A320-2030", "FZN-1E"])
        >>> round(cal.factor, 4)
        0.2741

    """
    reference: float = TSFC_TABLE["A320neo"]
    targets: typing.Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "targets", tuple(self.targets))
        if self.reference <= 0 or any(t <= 0 for t in self.targets):
            errormsg = (
                f"TSFC values must be positive, got {self.reference=}, "
                f"{self.targets=}"
            )
            raise ValueError(errormsg)

    @classmethod
    def from_table(cls, reference: str, targets: typing.Iterable[str],
                   table: dict = None) -> "TSFCCalibration":
        """
        Build a calibration from named entries of a TSFC table.

        Args:
            reference: Name of the engine the fuel flow polynomial describes.
            targets: Names of the engines to rescale towards, in order.
            table: Mapping of engine names to TSFC values in kg/(s N).
                Optional, defaults to TSFC_TABLE.

        Returns:
            A TSFCCalibration object.

        """
        table = TSFC_TABLE if table is None else table
        try:
            return cls(table[reference], tuple(table[x] for x in targets))
        except KeyError as exc:
            errormsg = f"{exc.args[0]!r} not found in {list(table.keys())}"
            raise KeyError(errormsg) from None

    @property
    def factor(self) -> float:
        """The product of all the rescaling factors."""
        return float(np.prod([t / self.reference for t in self.targets]))

    def apply(self, mdot_kgps: float) -> float:
        """Rescale a fuel flow rate, one target at a time."""
        for target in self.targets:
            mdot_kgps = (target / self.reference) * mdot_kgps
        return mdot_kgps


@dataclass(frozen=True)
class FuelFlowResult:
    """Fuel flow and TSFC of one engine, at one point in the mission."""
    fuel_kgps: float
    tsfc: typing.Optional[float]
    tsfc_imperial: typing.Optional[float]
    thrust_n: float
    c: float


def electric_thrust_n(electricload_w: float, tas_mps: float) -> float:
    """
    Thrust equivalent of electric power at a given airspeed.

    Args:
        electricload_w: Power from the electric motor(s), in Watts.
        tas_mps: True airspeed, in metres per second.

    Returns:
        The thrust supplement, in Newtons. Zero if the result isn't finite
        (e.g. the aircraft is stationary).

    """
    with np.errstate(divide="ignore", invalid="ignore"):
        supplement_n = np.float64(electricload_w) / np.float64(tas_mps)
    if not np.isfinite(supplement_n):
        return 0.0
    return float(supplement_n)


def compute_fuel_flow(spec, condition: FlightCondition, thrustreq_n: float,
                      electricload_w: float, engineidx: int, missionidx: int,
                      history, atmosphere=None) -> FuelFlowResult:
    """
    Compute the fuel flow of an engine at a flight condition.

    Args:
        spec: The AircraftSpec of the aircraft being flown.
        condition: Flight condition (altitude, Mach number).
        thrustreq_n: Thrust required of the engine, in Newtons.
        electricload_w: Contribution of the electric motor, in Watts.
        engineidx: Index of the engine being evaluated.
        missionidx: Index of the point in the mission history being evaluated.
        history: Mission history, providing the thrust available at each
            mission point and engine (via its `thrust_available` method).
        atmosphere: Atmosphere object. Optional, defaults to ISA.

    Returns:
        A FuelFlowResult. The `thrust_n` attribute is the thrust the engine
        actually delivers: zero if the electric motor covers all the thrust
        required, capped at the thrust available. If that thrust is zero,
        TSFC is undefined and reported as None.

    """
    engine = spec.propulsion.engine
    altitude_m = condition.altitude_m

    # Remove the thrust provided by the electric motor(s)
    tas_mps = condition.tas_mps(atmosphere)
    thrustreq_n = thrustreq_n - electric_thrust_n(electricload_w, tas_mps)

    thrustavail_n = history.thrust_available(missionidx, engineidx)
    if thrustreq_n < THRUST_NEGLIGIBLE_N:
        thrustreq_n = 0.0
    elif thrustreq_n > thrustavail_n:
        thrustreq_n = thrustavail_n
    thrustreq_n = max(thrustreq_n, 0.0)
    thrustreq_kn = uc.N_kN(thrustreq_n)

    # Design thrust of the engine. Negative supplements siphon power off, and
    # so don't count towards the conventional (non-electrified) design thrust
    slsthrust_n = spec.propulsion.slsthrust_n[engineidx]
    supplements = spec.propulsion.thrustsupp_n
    thrustsupp_n = supplements[engineidx] if supplements else 0.0
    thrustsupp_n = max(thrustsupp_n, 0.0)
    slsthrust_conv_kn = uc.N_kN(slsthrust_n + thrustsupp_n)

    c = engine.hecoeff
    thrustfrac = thrustreq_kn / (c * slsthrust_conv_kn)

    mdot_kgps = (engine.cff3 * thrustfrac ** 3
                 + engine.cff2 * thrustfrac ** 2
                 + engine.cff1 * thrustfrac
                 + engine.cffch * thrustreq_kn * altitude_m)
    mdot_kgps = engine.calibration.apply(mdot_kgps)

    if thrustreq_n > 0:
        tsfc = mdot_kgps / thrustreq_n
        tsfc_imperial = uc.tsfcSI_tsfcImp(tsfc)
    else:
        tsfc, tsfc_imperial = None, None

    return FuelFlowResult(
        fuel_kgps=float(mdot_kgps), tsfc=tsfc, tsfc_imperial=tsfc_imperial,
        thrust_n=float(thrustreq_n), c=c
    )
