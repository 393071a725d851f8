"""
This module contains the weight convergence engine: a fixed-point iteration on
airframe weight, coupled to propulsion sizing and to statistical (historical
fleet) estimates of airframe weight, that returns an aircraft specification
with a self-consistent OEW, MTOW, component weights, thrust (or power) rating
and wing area.

    >>> from ADWpy import weights as wt
    >>> from ADWpy._sampleac import FZN1E
    >>> sized = wt.converge_weights(FZN1E())
    >>> sized.weight.oew == sized.weight.oew_from_components
    True

"""
from dataclasses import dataclass
import functools
import typing
import warnings

from scipy import constants

from ADWpy import propulsion as pr
from ADWpy import unitconversions as uc
from ADWpy.aircraftspec import (
    AircraftSpec, UnsupportedAircraftClassError, VehicleClass
)
from ADWpy.fleet import HistoricalFleetTable
from ADWpy.regression import GaussianProcess, LinearFit

__all__ = [
    "ConvergenceWarning", "AirframeQuery", "TurbofanAirframeGPR",
    "TurbopropAirframeFit", "airframe_estimator", "cryotank_weight",
    "oew_iteration", "converge_weights", "OEWIterationResult"
]
__author__ = "Yaseen Reza"

# Fuels with a specific energy above this (kWh/kg) are cryogenic hydrogen
HYDROGEN_SPECENERGY_THRESHOLD = 20.0
# Usable fuel mass / (fuel mass + tank mass)
GRAVIMETRIC_EFFICIENCY = 0.61
# Fallback airframe weight fraction, if the prior OEW is inconsistent
AIRFRAME_FRACTION_GUESS = 0.4


class ConvergenceWarning(RuntimeWarning):
    """An iterative solve stopped at its iteration cap."""


@dataclass(frozen=True)
class AirframeQuery:
    """Inputs to a statistical airframe weight estimate."""
    s_m2: float
    thrust_n: typing.Optional[float]
    power_w: typing.Optional[float]
    eis: float
    mtow_kg: float


class TurbofanAirframeGPR:
    """
    Airframe weight of turbofan aircraft, from Gaussian process regression over
    wing area, SLS thrust, entry-into-service year, and MTOW.
    """
    inputs = ("s_m2", "thrust_n", "eis", "mtow_kg")
    # Year of entry into service matters less than the other parameters
    weights = (1.0, 1.0, 0.2, 1.0)

    def __init__(self, fleet: HistoricalFleetTable):
        records = fleet.complete(*self.inputs, "airframe_kg")
        self.model = GaussianProcess(weights=self.weights)
        self.model.fit(records[:, :-1], records[:, -1])
        return

    def __call__(self, query: AirframeQuery) -> float:
        if query.thrust_n is None:
            raise ValueError("Turbofan airframe estimate needs a thrust")
        x = [query.s_m2, query.thrust_n, query.eis, query.mtow_kg]
        return float(self.model.predict(x))


class TurbopropAirframeFit:
    """Airframe weight of turboprop aircraft, as a straight line in MTOW."""

    def __init__(self, fleet: HistoricalFleetTable):
        records = fleet.complete("mtow_kg", "airframe_kg")
        self.model = LinearFit(records[:, 0], records[:, 1])
        return

    def __call__(self, query: AirframeQuery) -> float:
        return float(self.model(query.mtow_kg))


@functools.lru_cache(maxsize=None)
def airframe_estimator(vehicleclass: VehicleClass,
                       fleet: HistoricalFleetTable = None):
    """
    Statistical airframe weight model for a class of aircraft.

    Models are fitted once per (class, fleet table) and cached, and are not
    modified after fitting.

    Args:
        vehicleclass: Turbofan or turboprop.
        fleet: Historical fleet table to train on. Optional, defaults to the
            packaged table for the aircraft class.

    Returns:
        A callable, mapping an AirframeQuery to an airframe weight in kg.

    """
    vehicleclass = VehicleClass.parse(vehicleclass)
    fleet = HistoricalFleetTable.load(vehicleclass) if fleet is None else fleet

    if vehicleclass is VehicleClass.TURBOFAN:
        return TurbofanAirframeGPR(fleet)
    elif vehicleclass is VehicleClass.TURBOPROP:
        return TurbopropAirframeFit(fleet)
    errormsg = f"No airframe weight model for {vehicleclass=}"
    raise UnsupportedAircraftClassError(errormsg)


def is_hydrogen(specenergy_fuel: float) -> bool:
    """True if the fuel's specific energy (kWh/kg) implies liquid hydrogen."""
    return specenergy_fuel > HYDROGEN_SPECENERGY_THRESHOLD


def cryotank_weight(fuel_kg: float) -> float:
    """Structural weight of the cryogenic tanks holding a mass of fuel."""
    return fuel_kg * (1 / GRAVIMETRIC_EFFICIENCY - 1)


def _requirement(spec: AircraftSpec, mtow_kg: float) -> AircraftSpec:
    """Set the thrust (or power) requirement and wing area for an MTOW."""
    if spec.vehicleclass is VehicleClass.TURBOFAN:
        t_w = spec.propulsion.t_w
        if t_w is None or t_w <= 0:
            raise ValueError(f"Turbofan sizing needs a positive {t_w=}")
        spec = spec.evolve(
            "propulsion", thrust_sls_n=mtow_kg * t_w * constants.g)
    elif spec.vehicleclass is VehicleClass.TURBOPROP:
        p_w_kwkg = spec.power.p_w_kwkg
        if p_w_kwkg is None or p_w_kwkg <= 0:
            raise ValueError(f"Turboprop sizing needs a positive {p_w_kwkg=}")
        spec = spec.evolve("power", power_sls_w=uc.kW_W(mtow_kg * p_w_kwkg))
    else:
        errormsg = f"Can't size {spec.vehicleclass=}"
        raise UnsupportedAircraftClassError(errormsg)

    ws_kgm2 = spec.aero.ws_kgm2
    if ws_kgm2 <= 0:
        raise ValueError(f"Wing loading must be positive, got {ws_kgm2=}")
    return spec.evolve("aero", s_m2=mtow_kg / ws_kgm2)


@dataclass(frozen=True)
class OEWIterationResult:
    """Outcome of the airframe weight fixed-point iteration."""
    spec: AircraftSpec
    iterations: int
    converged: bool
    errors: typing.Tuple[float, ...]


def oew_iteration(spec: AircraftSpec, *,
                  sizer: typing.Callable = pr.size_propulsion,
                  estimator: typing.Callable = None,
                  fleet: HistoricalFleetTable = None) -> OEWIterationResult:
    """
    Iterate on airframe weight until it stops changing.

    Each pass computes MTOW from the current airframe weight and the other
    weight components, derives the thrust (or power) requirement and the wing
    area, resizes the propulsion system, corrects MTOW for the change in
    propulsion weight, and estimates a new airframe weight from historical
    data. Cryogenic hydrogen tanks are added to the airframe, and the result
    is scaled by the airframe calibration factor.

    Args:
        spec: Initial aircraft specification.
        sizer: Propulsion sizing function, mapping a spec with a thrust or
            power requirement to a spec with updated component weights.
            Optional, defaults to `propulsion.size_propulsion`.
        estimator: Airframe weight model, mapping an AirframeQuery to a
            weight. Optional, defaults to the statistical model for the
            aircraft class.
        fleet: Historical fleet table for the default estimator. Optional.

    Returns:
        An OEWIterationResult. If the iteration cap was reached, `converged`
        is False and the spec holds the last computed values.

    """
    vehicleclass = spec.vehicleclass
    if vehicleclass not in (VehicleClass.TURBOFAN, VehicleClass.TURBOPROP):
        errormsg = f"Can't size {vehicleclass=}"
        raise UnsupportedAircraftClassError(errormsg)
    if estimator is None:
        estimator = airframe_estimator(vehicleclass, fleet)

    settings = spec.settings
    hydrogen = is_hydrogen(spec.power.specenergy_fuel)

    # Initial guess of airframe weight
    airframe_kg = spec.weight.oew - spec.weight.propulsion_total
    if airframe_kg <= 0:
        airframe_kg = AIRFRAME_FRACTION_GUESS * spec.weight.mtow

    current = spec
    errors = []
    converged = False
    iteration = 0
    while iteration < settings.oew_maxiter:
        weight = current.weight
        mtow_kg = airframe_kg + weight.useful_load + weight.propulsion_total

        current = _requirement(current, mtow_kg)
        sized = sizer(current)
        mtow_kg += sized.weight.propulsion_total - weight.propulsion_total

        query = AirframeQuery(
            s_m2=current.aero.s_m2,
            thrust_n=current.propulsion.thrust_sls_n,
            power_w=current.power.power_sls_w,
            eis=current.tlar.eis,
            mtow_kg=mtow_kg
        )
        airframe_new_kg = estimator(query)
        if hydrogen:
            airframe_new_kg += cryotank_weight(weight.fuel)
        airframe_new_kg *= weight.airframe_cf

        error = abs(airframe_kg - airframe_new_kg) / airframe_kg
        errors.append(error)
        airframe_kg = airframe_new_kg
        current = sized.evolve("weight", airframe=airframe_kg, mtow=mtow_kg)
        iteration += 1

        if error <= settings.oew_tol:
            converged = True
            break

    current = current.evolve("weight", oew=current.weight.oew_from_components)
    return OEWIterationResult(
        spec=current, iterations=iteration, converged=converged,
        errors=tuple(errors)
    )


def converge_weights(spec: AircraftSpec, *,
                     sizer: typing.Callable = pr.size_propulsion,
                     estimator: typing.Callable = None,
                     fleet: HistoricalFleetTable = None) -> AircraftSpec:
    """
    Converge the weight breakdown of an aircraft.

    Args:
        spec: Initial aircraft specification.
        sizer: Propulsion sizing function. Optional.
        estimator: Airframe weight model. Optional.
        fleet: Historical fleet table for the default estimator. Optional.

    Returns:
        A new AircraftSpec with self-consistent OEW, MTOW, component weights,
        thrust (or power) rating and wing area. A ConvergenceWarning is issued
        if the iteration cap is hit, and the last computed values returned.

    Raises:
        UnsupportedAircraftClassError: If the aircraft class can't be sized.

    """
    result = oew_iteration(spec, sizer=sizer, estimator=estimator, fleet=fleet)

    if not result.converged:
        warnmsg = (
            f"OEW iteration did not converge in {result.iterations} "
            f"iterations (relative error {result.errors[-1]:.3g} > "
            f"{spec.settings.oew_tol=})"
        )
        warnings.warn(warnmsg, ConvergenceWarning, stacklevel=2)

    return result.spec
