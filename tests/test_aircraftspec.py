"""Unit tests for the aircraft specification data model."""
import dataclasses
import unittest

from ADWpy import aircraftspec as acs
from ADWpy._sampleac import A320neo, ATR42, FZN1E


class Definitions(unittest.TestCase):

    def test_samples(self):
        """The sample aircraft load from their definitions."""
        fzn1e = FZN1E()
        self.assertIs(fzn1e.vehicleclass, acs.VehicleClass.TURBOFAN)
        self.assertIs(fzn1e.propulsion.arch, acs.PropArch.CONVENTIONAL)
        self.assertAlmostEqual(fzn1e.aero.ld_crs, 19.6 * 1.3, places=9)
        self.assertAlmostEqual(
            fzn1e.propulsion.engine.calibration.factor, 0.2741, places=4)
        self.assertIsNone(fzn1e.weight.em)
        self.assertIsNone(fzn1e.weight.batt)

        self.assertIs(A320neo().vehicleclass, acs.VehicleClass.TURBOFAN)
        self.assertIs(ATR42().vehicleclass, acs.VehicleClass.TURBOPROP)
        return

    def test_unknown_keys(self):
        """Misspelt sections and parameters are rejected."""
        with self.assertRaises(KeyError):
            acs.AircraftSpec.from_dict({"weights": {"mtow": 1}})
        definition = {
            "tlar": {"eis": 2020, "vehicleclass": "Turbofan"},
            "aero": {"ws_kgm2": 600, "ld_cruise": 18},
        }
        with self.assertRaises(KeyError):
            acs.AircraftSpec.from_dict(definition)
        return

    def test_vehicleclass(self):
        self.assertIs(
            acs.VehicleClass.parse("TURBOPROP"), acs.VehicleClass.TURBOPROP)
        with self.assertRaises(acs.UnsupportedAircraftClassError):
            acs.TLAR(eis=2020, vehicleclass="Rotorcraft")
        # An unsupported class is a configuration (value) error
        self.assertTrue(
            issubclass(acs.UnsupportedAircraftClassError, ValueError))
        return

    def test_settings(self):
        with self.assertRaises(ValueError):
            acs.Settings(oew_maxiter=0)
        with self.assertRaises(ValueError):
            acs.Settings(oew_tol=0.0)
        with self.assertRaises(ValueError):
            acs.Settings(crspoints=1)
        return


class Immutability(unittest.TestCase):

    def test_evolve(self):
        """Evolving a spec leaves the original untouched."""
        spec = FZN1E()
        heavier = spec.evolve("weight", payload=25_000)
        self.assertEqual(spec.weight.payload, 23_000)
        self.assertEqual(heavier.weight.payload, 25_000)
        self.assertEqual(heavier.aero, spec.aero)

        with self.assertRaises(dataclasses.FrozenInstanceError):
            spec.weight.payload = 0
        with self.assertRaises(KeyError):
            spec.evolve("wing", span_m=30)
        return


class WeightBreakdown(unittest.TestCase):

    def test_components(self):
        """Components that don't apply weigh nothing."""
        weight = acs.Weight(
            mtow=50_000, oew=30_000, airframe=26_000, engines=3_000,
            em=None, eg=500.0, eap=400, cables=100, fuel=5_000, batt=None,
            payload=14_000, crew=500
        )
        self.assertEqual(weight.propulsion_total, 4_000)
        self.assertEqual(weight.oew_from_components, 30_000)
        self.assertEqual(weight.useful_load, 19_500)
        self.assertEqual(weight.mtow_from_components, 49_500)
        self.assertEqual(acs.zero_if_none(None), 0.0)
        self.assertEqual(acs.zero_if_none(2.5), 2.5)
        return


if __name__ == '__main__':
    unittest.main()
