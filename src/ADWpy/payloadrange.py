"""
This module traces the payload-range envelope of a sized aircraft: the
maximum payload it can carry over each of a sequence of ranges, subject to a
takeoff weight limit and a fuel capacity.

Each (range, payload) trial is flown by a mission oracle, a callable that maps
an aircraft specification to a tuple (spec, history), where the history
reports the fuel burned (see `mission.fly_mission`).

"""
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
import functools
import typing

import numpy as np
import pandas as pd

from ADWpy import mission as ms
from ADWpy.aircraftspec import AircraftSpec, UnsupportedAircraftClassError

__all__ = [
    "Feasible", "Infeasible", "EnvelopePoint", "EnvelopeResult",
    "payload_grid", "evaluate_payload", "max_payload_at_range",
    "payload_range"
]
__author__ = "Yaseen Reza"

# Errors in the aircraft's definition, as opposed to in its ability to fly
CONFIGURATION_ERRORS = (UnsupportedAircraftClassError,)


@dataclass(frozen=True)
class Feasible:
    """The mission can be flown, burning this much fuel."""
    fuel_kg: float


@dataclass(frozen=True)
class Infeasible:
    """The mission can't be flown."""
    reason: str


TrialOutcome = typing.Union[Feasible, Infeasible]


@dataclass(frozen=True)
class EnvelopePoint:
    range_m: float
    payload_kg: float
    fuel_kg: float


@dataclass(frozen=True)
class EnvelopeResult:
    """
    Points on the payload-range envelope, in order of increasing range.

    If the search stopped at a range for which no payload was feasible, that
    range is given by `truncated_at_m` (and it and any later ranges are not
    part of the envelope).
    """
    points: typing.Tuple[EnvelopePoint, ...]
    truncated_at_m: typing.Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    @property
    def ranges_m(self) -> np.ndarray:
        return np.array([p.range_m for p in self.points], dtype=float)

    @property
    def payloads_kg(self) -> np.ndarray:
        return np.array([p.payload_kg for p in self.points], dtype=float)

    @property
    def fuels_kg(self) -> np.ndarray:
        return np.array([p.fuel_kg for p in self.points], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({
            "range [m]": self.ranges_m,
            "payload [kg]": self.payloads_kg,
            "fuel [kg]": self.fuels_kg
        })


def payload_grid(maxpayload_kg: float, step_kg: float) -> np.ndarray:
    """
    Payloads to trial, from the maximum down to zero.

    Args:
        maxpayload_kg: Largest payload to trial.
        step_kg: Decrement between successive trials.

    Returns:
        A descending array of payloads. Zero is always the last entry, even if
        the maximum isn't a whole number of steps.

    Examples:

        >>> payload_grid(1000, 400)
        array([1000.,  600.,  200.,    0.])

    """
    if step_kg <= 0:
        raise ValueError(f"Payload step must be positive, got {step_kg=}")
    if maxpayload_kg < 0:
        raise ValueError(f"Payload can't be negative, got {maxpayload_kg=}")

    nsteps = int(np.floor(maxpayload_kg / step_kg + 1e-9))
    payloads = maxpayload_kg - step_kg * np.arange(nsteps + 1)
    payloads = np.clip(payloads, 0, None)
    if payloads[-1] > 0:
        payloads = np.append(payloads, 0.0)
    return payloads


def evaluate_payload(design: AircraftSpec, payload_kg: float,
                     oracle: typing.Callable) -> TrialOutcome:
    """
    Fly a mission with a trial payload.

    Args:
        design: Aircraft specification, set up for the range to fly.
        payload_kg: Payload to carry.
        oracle: Mission oracle.

    Returns:
        Feasible, with the fuel burned, or Infeasible, with the reason the
        oracle gave.

    Raises:
        UnsupportedAircraftClassError: An aircraft class that can't be flown
            is never treated as infeasibility.

    """
    trial = design.evolve("weight", payload=payload_kg)
    try:
        _, history = oracle(trial)
    except CONFIGURATION_ERRORS:
        raise
    except Exception as exc:
        return Infeasible(f"{type(exc).__name__}: {exc}")

    fuel_kg = history.fuel_burned_kg
    if not np.isfinite(fuel_kg):
        return Infeasible(f"Non-finite fuel burn {fuel_kg=}")
    return Feasible(fuel_kg=float(fuel_kg))


def max_payload_at_range(design: AircraftSpec, range_m: float,
                         payloads_kg: typing.Sequence[float],
                         mtow_limit_kg: float, fuelcap_kg: float,
                         oew_kg: float, oracle: typing.Callable
                         ) -> typing.Optional[EnvelopePoint]:
    """
    Largest payload that can be flown over a range.

    Args:
        design: Sized aircraft specification. Not modified.
        range_m: Range to fly.
        payloads_kg: Payloads to trial, in descending order.
        mtow_limit_kg: Limit on OEW + payload + fuel.
        fuelcap_kg: Fuel capacity.
        oew_kg: Operating empty weight.
        oracle: Mission oracle.

    Returns:
        The envelope point of the first (largest) feasible payload, or None
        if no positive payload is feasible. Reaching zero payload marks the
        ferry range, which is not part of the envelope.

    """
    clone = design.evolve("performance", range_m=range_m)
    clone = clone.evolve("weight", mtow=mtow_limit_kg)

    for payload_kg in payloads_kg:
        if payload_kg <= 0:
            break
        outcome = evaluate_payload(clone, payload_kg, oracle)
        if isinstance(outcome, Infeasible):
            continue
        fuel_kg = outcome.fuel_kg
        if oew_kg + payload_kg + fuel_kg <= mtow_limit_kg \
                and fuel_kg <= fuelcap_kg:
            return EnvelopePoint(
                range_m=float(range_m), payload_kg=float(payload_kg),
                fuel_kg=fuel_kg
            )
    return None


def payload_range(design: AircraftSpec, ranges_m, maxpayload_kg: float,
                  step_kg: float, mtow_limit_kg: float, fuelcap_kg: float, *,
                  oracle: typing.Callable = ms.fly_mission,
                  oew_kg: float = None, workers: int = None,
                  use_threads: bool = True,
                  verbose: bool = False) -> EnvelopeResult:
    """
    Compute the payload-range envelope of an aircraft.

    For each range, in ascending order, payloads are trialled from the maximum
    downwards; the first one for which OEW + payload + fuel is within the
    takeoff weight limit, and the fuel is within capacity, is recorded. The
    envelope stops at the first range for which no positive payload is
    feasible (zero-payload points are never recorded).

    Args:
        design: Sized aircraft specification.
        ranges_m: Ranges to evaluate, in ascending order.
        maxpayload_kg: Largest payload to trial.
        step_kg: Payload decrement between trials.
        mtow_limit_kg: Maximum takeoff weight.
        fuelcap_kg: Fuel capacity.
        oracle: Mission oracle. Optional, defaults to `mission.fly_mission`.
        oew_kg: Operating empty weight. Optional, defaults to the design's.
        workers: Number of workers to evaluate ranges in parallel. Optional,
            defaults to evaluating ranges in sequence.
        use_threads: If True (default), use threads as workers, otherwise
            processes (the oracle must then be picklable).
        verbose: Print progress every 1000 km of range. Optional.

    Returns:
        An EnvelopeResult object.

    """
    ranges_m = np.array(ranges_m, dtype=float).ravel()
    if (np.diff(ranges_m) < 0).any():
        raise ValueError("Ranges must be given in ascending order")
    oew_kg = design.weight.oew if oew_kg is None else oew_kg

    search = functools.partial(
        max_payload_at_range, design,
        payloads_kg=payload_grid(maxpayload_kg, step_kg),
        mtow_limit_kg=mtow_limit_kg, fuelcap_kg=fuelcap_kg, oew_kg=oew_kg,
        oracle=oracle
    )

    def reassemble(outcomes):
        """Keep points in range order, up to the first infeasible range."""
        points = []
        report_m = 1000e3
        for range_m, point in zip(ranges_m, outcomes):
            if point is None:
                if verbose:
                    print(f"No feasible payload at {range_m / 1e3:.0f} km")
                return EnvelopeResult(points, truncated_at_m=float(range_m))
            points.append(point)
            if verbose and range_m >= report_m:
                print(f"{range_m / 1e3:.0f} km: {point.payload_kg:.0f} kg "
                      f"payload, {point.fuel_kg:.0f} kg fuel")
                while report_m <= range_m:
                    report_m += 1000e3
        return EnvelopeResult(points)

    if workers is None:
        # Lazily, so that no range beyond the first infeasible one is flown
        return reassemble(map(search, ranges_m))

    Executor = ThreadPoolExecutor if use_threads else ProcessPoolExecutor
    with Executor(max_workers=workers) as ex:
        outcomes = list(ex.map(search, ranges_m))
    return reassemble(outcomes)
