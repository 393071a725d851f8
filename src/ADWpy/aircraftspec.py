"""
This module contains the data model for an aircraft under design: the
top-level requirements, aerodynamics, weight breakdown, propulsion and power
descriptions, performance targets and solver settings.

Aircraft specifications are immutable. Every step of the sizing process takes
a specification and returns a new one, for example:

    >>> from ADWpy._sampleac import FZN1E
    >>> spec = FZN1E()
    >>> heavier = spec.evolve("weight", payload=20_000)
    >>> spec.weight.payload, heavier.weight.payload
    (23000, 20000)

"""
from dataclasses import dataclass, field, fields, replace
import enum
import typing

from ADWpy.fuelflow import TSFCCalibration

__all__ = [
    "VehicleClass", "PropArch", "UnsupportedAircraftClassError",
    "TLAR", "Aero", "Weight", "EngineSpec", "Propulsion", "Power",
    "Performance", "Settings", "AircraftSpec", "zero_if_none"
]
__author__ = "Yaseen Reza"


class UnsupportedAircraftClassError(ValueError):
    """The aircraft class is neither a turbofan nor a turboprop aircraft."""


class VehicleClass(enum.Enum):
    """Closed set of aircraft classes that can be sized."""
    TURBOFAN = "Turbofan"
    TURBOPROP = "Turboprop"

    @classmethod
    def parse(cls, value) -> "VehicleClass":
        """Recast a string (or VehicleClass) as a VehicleClass member."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if isinstance(value, str) and value.lower() == member.value.lower():
                return member
        errormsg = (
            f"Aircraft class {value=} is not supported. Try one of "
            f"{[member.value for member in cls]}"
        )
        raise UnsupportedAircraftClassError(errormsg)


class PropArch(enum.Enum):
    """Propulsion architectures."""
    CONVENTIONAL = "C"
    PARALLEL_HYBRID = "PHE"
    SERIES_HYBRID = "SHE"

    @property
    def is_electrified(self) -> bool:
        return self is not PropArch.CONVENTIONAL


def zero_if_none(value: typing.Optional[float]) -> float:
    """Components that don't apply to an architecture weigh nothing."""
    return 0.0 if value is None else value


@dataclass(frozen=True)
class TLAR:
    """Top-level aircraft requirements."""
    eis: int
    vehicleclass: VehicleClass
    maxpax: int = 0

    def __post_init__(self):
        # Accept strings from configuration dictionaries
        object.__setattr__(
            self, "vehicleclass", VehicleClass.parse(self.vehicleclass))


@dataclass(frozen=True)
class Aero:
    """Aerodynamic coefficients and wing loading."""
    ws_kgm2: float
    ld_clb: float = 16.0
    ld_crs: float = 18.0
    ld_des: float = 16.0
    s_m2: typing.Optional[float] = None


@dataclass(frozen=True)
class Weight:
    """Weight breakdown, all values in kilograms."""
    mtow: float
    oew: float = 0.0
    airframe: float = 0.0
    engines: float = 0.0
    em: typing.Optional[float] = None
    eg: typing.Optional[float] = None
    eap: float = 0.0
    cables: float = 0.0
    fuel: float = 0.0
    batt: typing.Optional[float] = None
    payload: float = 0.0
    crew: float = 0.0
    airframe_cf: float = 1.0

    @property
    def propulsion_total(self) -> float:
        """Engines, electric machines, auxiliary power, and cabling."""
        return (self.engines + zero_if_none(self.em) + zero_if_none(self.eg)
                + self.eap + self.cables)

    @property
    def oew_from_components(self) -> float:
        """Operating empty weight as the sum of its components."""
        return self.airframe + self.propulsion_total

    @property
    def useful_load(self) -> float:
        """Fuel, battery, payload, and crew."""
        return self.fuel + zero_if_none(self.batt) + self.payload + self.crew

    @property
    def mtow_from_components(self) -> float:
        """Takeoff weight as the sum of OEW and the useful load."""
        return self.oew + self.useful_load


@dataclass(frozen=True)
class EngineSpec:
    """
    Specification of a gas turbine engine, for fuel-flow and sizing purposes.

    The fuel flow coefficients are those of the BADA fuel flow equation, where
    thrust fractions are non-dimensional and thrust is measured in kN:

        mdot = cff3 * f**3 + cff2 * f**2 + cff1 * f + cffch * T_kN * h_m

    """
    name: str
    cff3: float
    cff2: float
    cff1: float
    cffch: float
    hecoeff: float = 1.0
    thrust_weight: typing.Optional[float] = None
    power_weight_kwkg: typing.Optional[float] = None
    calibration: TSFCCalibration = field(default_factory=TSFCCalibration)


@dataclass(frozen=True)
class Propulsion:
    """Propulsion system description."""
    engine: EngineSpec
    arch: PropArch = PropArch.CONVENTIONAL
    numengines: int = 2
    t_w: typing.Optional[float] = None
    thrust_sls_n: typing.Optional[float] = None
    slsthrust_n: typing.Tuple[float, ...] = ()
    thrustsupp_n: typing.Tuple[float, ...] = ()
    eta_prop: float = 0.8
    mdot_cf: float = 1.0
    cable_kgpkw: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "arch", PropArch(self.arch))
        object.__setattr__(self, "slsthrust_n", tuple(self.slsthrust_n))
        object.__setattr__(self, "thrustsupp_n", tuple(self.thrustsupp_n))
        if self.numengines < 1:
            raise ValueError(f"Need at least one engine, got {self.numengines=}")


@dataclass(frozen=True)
class Power:
    """Power and energy description."""
    specenergy_fuel: float = 12.0
    specenergy_batt: typing.Optional[float] = None
    p_w_kwkg: typing.Optional[float] = None
    power_sls_w: typing.Optional[float] = None
    p_w_em: typing.Optional[float] = None
    p_w_eg: typing.Optional[float] = None
    eta_em: typing.Optional[float] = None
    eta_eg: typing.Optional[float] = None
    lam_sls: float = 0.0
    lam_clb: float = 0.0
    lam_crs: float = 0.0
    lam_des: float = 0.0


@dataclass(frozen=True)
class Performance:
    """Design mission performance targets."""
    range_m: float
    vtko_mps: float = 70.0
    mach_crs: float = 0.78
    alt_crs_m: float = 10_668.0
    alt_tko_m: float = 0.0
    rcmax_mps: float = 11.43
    rdes_mps: float = 10.0


@dataclass(frozen=True)
class Settings:
    """Solver settings."""
    oew_tol: float = 1e-3
    oew_maxiter: int = 50
    analysis_tol: float = 1e-3
    analysis_maxiter: int = 50
    clbpoints: int = 5
    crspoints: int = 5
    despoints: int = 5

    def __post_init__(self):
        if self.oew_maxiter < 1 or self.analysis_maxiter < 1:
            errormsg = (
                f"Iteration caps must be at least one, got "
                f"{self.oew_maxiter=}, {self.analysis_maxiter=}"
            )
            raise ValueError(errormsg)
        if self.oew_tol <= 0 or self.analysis_tol <= 0:
            errormsg = (
                f"Tolerances must be positive, got {self.oew_tol=}, "
                f"{self.analysis_tol=}"
            )
            raise ValueError(errormsg)
        if min(self.clbpoints, self.crspoints, self.despoints) < 2:
            raise ValueError("Each mission segment needs at least two points")


_sections = {
    "tlar": TLAR, "aero": Aero, "weight": Weight, "propulsion": Propulsion,
    "power": Power, "performance": Performance, "settings": Settings
}


def _fromdict(cls, dictionary: dict):
    """Instantiate a section, rejecting keys the section doesn't know about."""
    known = {f.name for f in fields(cls)}
    for key in dictionary:
        if key not in known:
            errormsg = f"Unknown {key=} for {cls.__name__}"
            raise KeyError(errormsg)
    return cls(**dictionary)


@dataclass(frozen=True)
class AircraftSpec:
    """
    Complete, immutable specification of an aircraft design point.

    Sections are accessible as attributes (e.g. ``spec.weight.mtow``). Use
    `evolve` to produce a modified copy.
    """
    tlar: TLAR
    aero: Aero
    weight: Weight
    propulsion: Propulsion
    power: Power = field(default_factory=Power)
    performance: Performance = field(
        default_factory=lambda: Performance(range_m=0.0))
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def from_dict(cls, definition: dict) -> "AircraftSpec":
        """
        Build a specification from nested dictionaries.

        Args:
            definition: Dictionary with any of the keys 'tlar', 'aero',
                'weight', 'propulsion', 'power', 'performance' and 'settings'.
                Each maps to a dictionary of that section's parameters. The
                'propulsion' section's 'engine' entry may itself be a
                dictionary of EngineSpec parameters, with an optional
                'calibration' dictionary of TSFCCalibration parameters.

        Returns:
            An AircraftSpec.

        Raises:
            KeyError: If a section or parameter name is not recognised.
            UnsupportedAircraftClassError: If the aircraft class is unknown.

        """
        for key in definition:
            if key not in _sections:
                errormsg = (
                    f"Unknown section {key=}, expected any of "
                    f"{list(_sections)}"
                )
                raise KeyError(errormsg)

        sections = dict()
        for name, section in _sections.items():
            if name not in definition:
                continue
            params = dict(definition[name])
            if name == "propulsion" and isinstance(params.get("engine"), dict):
                engine = dict(params["engine"])
                if isinstance(engine.get("calibration"), dict):
                    engine["calibration"] = _fromdict(
                        TSFCCalibration, engine["calibration"])
                params["engine"] = _fromdict(EngineSpec, engine)
            sections[name] = _fromdict(section, params)

        return cls(**sections)

    @property
    def vehicleclass(self) -> VehicleClass:
        return self.tlar.vehicleclass

    def evolve(self, section: str, **changes) -> "AircraftSpec":
        """
        Return a copy of the specification with one section's parameters
        changed.

        Args:
            section: Name of the section to modify, e.g. "weight".
            **changes: Parameter names and their new values.

        Returns:
            A new AircraftSpec. The original is left untouched.

        """
        if section not in _sections:
            raise KeyError(f"Unknown section {section=}")
        newsection = replace(getattr(self, section), **changes)
        return replace(self, **{section: newsection})
