"""Unit tests for the weight convergence engine."""
import itertools
import unittest
import warnings

from scipy import constants

from ADWpy import weights as wt
from ADWpy.aircraftspec import (
    TLAR, UnsupportedAircraftClassError, VehicleClass
)
from ADWpy._sampleac import ATR42, FZN1E


def fixed_sizer(engines_kg):
    """A propulsion sizer whose engines always weigh the same."""

    def sizer(spec):
        n = spec.propulsion.numengines
        thrust_n = spec.propulsion.thrust_sls_n
        spec = spec.evolve("weight", engines=engines_kg)
        return spec.evolve("propulsion", slsthrust_n=(thrust_n / n,) * n)

    return sizer


class RecordingEstimator:
    """Airframe weight as a fixed fraction of MTOW, remembering queries."""

    def __init__(self, fraction=0.45, constant=0.0):
        self.fraction = fraction
        self.constant = constant
        self.queries = []

    def __call__(self, query):
        self.queries.append(query)
        return self.constant + self.fraction * query.mtow_kg


class HydrogenCorrection(unittest.TestCase):

    def test_tank_penalty(self):
        """Cryogenic tanks add exactly fuel * (1/0.61 - 1) * cf of airframe."""
        hydrogen = FZN1E()
        self.assertGreater(hydrogen.power.specenergy_fuel, 20)
        kerosene = hydrogen.evolve("power", specenergy_fuel=12.0)
        threshold = hydrogen.evolve("power", specenergy_fuel=20.0)

        kwargs = dict(
            sizer=fixed_sizer(4_000),
            estimator=RecordingEstimator(fraction=0.0, constant=30_000)
        )
        h2 = wt.converge_weights(hydrogen, **kwargs)
        jeta = wt.converge_weights(kerosene, **kwargs)
        limit = wt.converge_weights(threshold, **kwargs)

        weight = hydrogen.weight
        expected = weight.fuel * (1 / 0.61 - 1) * weight.airframe_cf
        self.assertAlmostEqual(
            h2.weight.airframe - jeta.weight.airframe, expected, places=6)
        self.assertEqual(limit.weight.airframe, jeta.weight.airframe)
        self.assertAlmostEqual(
            wt.cryotank_weight(weight.fuel), weight.fuel * (1 / 0.61 - 1))
        return


class Conservation(unittest.TestCase):
    """Converged weights add up."""

    def check(self, spec, sized):
        weight = sized.weight
        self.assertAlmostEqual(
            weight.oew,
            weight.airframe + weight.engines + (weight.em or 0)
            + (weight.eg or 0) + weight.eap + weight.cables, places=6)
        self.assertLessEqual(
            abs(weight.mtow - weight.mtow_from_components),
            spec.settings.oew_tol * weight.mtow
        )
        self.assertAlmostEqual(
            sized.aero.s_m2 * sized.aero.ws_kgm2, weight.mtow,
            delta=spec.settings.oew_tol * weight.mtow)
        return

    def test_turbofan(self):
        spec = FZN1E()
        result = wt.oew_iteration(spec)
        self.assertTrue(result.converged)
        self.assertLessEqual(result.iterations, spec.settings.oew_maxiter)
        self.assertLessEqual(result.errors[-1], spec.settings.oew_tol)
        self.check(spec, result.spec)

        # Sized thrust follows the thrust-to-weight ratio
        self.assertAlmostEqual(
            result.spec.propulsion.thrust_sls_n,
            result.spec.weight.mtow * spec.propulsion.t_w * constants.g,
            delta=1e-2 * result.spec.propulsion.thrust_sls_n)
        return

    def test_turboprop(self):
        spec = ATR42()
        result = wt.oew_iteration(spec)
        self.assertTrue(result.converged)
        self.check(spec, result.spec)
        self.assertIsNotNone(result.spec.power.power_sls_w)
        return

    def test_grid(self):
        """Well-posed specs converge within the iteration cap."""
        base = FZN1E()
        for mtow_kg, payload_kg, ws_kgm2 in itertools.product(
                (40_000, 70_700, 120_000), (5_000, 23_000), (450, 594, 700)):
            spec = base.evolve("weight", mtow=mtow_kg, payload=payload_kg)
            spec = spec.evolve("aero", ws_kgm2=ws_kgm2)
            with warnings.catch_warnings():
                warnings.simplefilter("error", wt.ConvergenceWarning)
                result = wt.oew_iteration(
                    spec, estimator=RecordingEstimator(fraction=0.45))
            self.assertTrue(result.converged)
            self.assertLessEqual(result.iterations, spec.settings.oew_maxiter)
            self.check(spec, result.spec)
        return


class IterationStates(unittest.TestCase):

    def test_initial_guess(self):
        """An inconsistent prior OEW falls back to 40% of MTOW."""
        spec = FZN1E().evolve("weight", oew=1_000, engines=3_000)
        estimator = RecordingEstimator()
        wt.oew_iteration(spec, sizer=fixed_sizer(3_000), estimator=estimator)

        weight = spec.weight
        expected = 0.4 * weight.mtow + weight.useful_load + 3_000
        self.assertAlmostEqual(
            estimator.queries[0].mtow_kg, expected, places=6)
        return

    def test_additive_correction(self):
        """MTOW is corrected by the change in propulsion weight."""
        spec = FZN1E().evolve("weight", oew=40_000, engines=3_000)
        estimator = RecordingEstimator()
        wt.oew_iteration(spec, sizer=fixed_sizer(4_000), estimator=estimator)

        weight = spec.weight
        # Airframe guess of 37,000 kg, engines 1,000 kg heavier
        expected = 37_000 + weight.useful_load + 3_000 + 1_000
        self.assertAlmostEqual(
            estimator.queries[0].mtow_kg, expected, places=6)
        query = estimator.queries[0]
        self.assertIsNotNone(query.thrust_n)
        self.assertIsNone(query.power_w)
        self.assertEqual(query.eis, 2016)
        return

    def test_max_iterations(self):
        """Hitting the iteration cap warns, and returns the last values."""
        spec = FZN1E()
        spec = spec.evolve("settings", oew_maxiter=3)

        def oscillating(query, values=itertools.cycle((30_000, 40_000))):
            return next(values)

        result = wt.oew_iteration(
            spec, sizer=fixed_sizer(4_000), estimator=oscillating)
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 3)
        self.assertEqual(len(result.errors), 3)

        with self.assertWarns(wt.ConvergenceWarning):
            sized = wt.converge_weights(
                spec, sizer=fixed_sizer(4_000), estimator=oscillating)
        self.assertEqual(
            sized.weight.oew, sized.weight.oew_from_components)
        self.assertTrue(issubclass(wt.ConvergenceWarning, RuntimeWarning))
        return

    def test_unsupported_class(self):
        """Unknown aircraft classes are fatal."""
        spec = FZN1E()
        tlar = TLAR(eis=2016, vehicleclass="Turbofan")
        object.__setattr__(tlar, "vehicleclass", "Airship")
        spec = spec.evolve("settings")
        object.__setattr__(spec, "tlar", tlar)

        with self.assertRaises(UnsupportedAircraftClassError):
            wt.converge_weights(spec, estimator=RecordingEstimator())
        with self.assertRaises(UnsupportedAircraftClassError):
            wt.airframe_estimator("Airship")
        return

    def test_missing_ratios(self):
        spec = FZN1E().evolve("propulsion", t_w=None)
        with self.assertRaises(ValueError):
            wt.converge_weights(spec, estimator=RecordingEstimator())
        spec = ATR42().evolve("power", p_w_kwkg=None)
        with self.assertRaises(ValueError):
            wt.converge_weights(spec, estimator=RecordingEstimator())
        return


class Estimators(unittest.TestCase):

    def test_cached(self):
        """Statistical models are fitted once per fleet table."""
        first = wt.airframe_estimator(VehicleClass.TURBOFAN)
        second = wt.airframe_estimator(VehicleClass.TURBOFAN)
        self.assertIs(first, second)
        self.assertIsInstance(first, wt.TurbofanAirframeGPR)
        self.assertIsInstance(
            wt.airframe_estimator(VehicleClass.TURBOPROP),
            wt.TurbopropAirframeFit)
        return

    def test_plausible(self):
        """Airframe weight estimates are a sensible fraction of MTOW."""
        turbofan = wt.airframe_estimator(VehicleClass.TURBOFAN)
        query = wt.AirframeQuery(
            s_m2=122.6, thrust_n=240e3, power_w=None, eis=2010,
            mtow_kg=78_000)
        self.assertTrue(0.3 < turbofan(query) / 78_000 < 0.6)

        turboprop = wt.airframe_estimator(VehicleClass.TURBOPROP)
        query = wt.AirframeQuery(
            s_m2=54.5, thrust_n=None, power_w=3.7e6, eis=2012,
            mtow_kg=18_600)
        self.assertTrue(0.4 < turboprop(query) / 18_600 < 0.7)
        return


if __name__ == '__main__':
    unittest.main()
