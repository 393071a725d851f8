"""Unit tests for the mission module."""
import unittest

import numpy as np

from ADWpy import mission as ms
from ADWpy.aircraftspec import AircraftSpec
from ADWpy._sampleac import A320neo


def sized_aircraft(range_m=2_000e3, slsthrust_n=130e3, ld_crs=18.0,
                   arch="C", lam_crs=0.0, mdot_cf=1.0):
    """A twin turbofan that has already been sized."""
    definition = {
        "tlar": {"eis": 2020, "vehicleclass": "Turbofan"},
        "aero": {"ws_kgm2": 600, "ld_clb": 16.0, "ld_crs": ld_crs,
                 "ld_des": 16.0},
        "weight": {"mtow": 75_000, "oew": 42_000, "payload": 15_000,
                   "crew": 500},
        "propulsion": {
            "engine": {"name": "test", "cff3": 0.299, "cff2": -0.346,
                       "cff1": 0.701, "cffch": 8.0e-7},
            "arch": arch, "numengines": 2,
            "slsthrust_n": (slsthrust_n, slsthrust_n),
            "thrustsupp_n": (0.0, 0.0), "mdot_cf": mdot_cf
        },
        "power": {"lam_crs": lam_crs},
        "performance": {"range_m": range_m, "vtko_mps": 75.0,
                        "mach_crs": 0.78, "alt_crs_m": 10_000,
                        "rcmax_mps": 12.0}
    }
    return AircraftSpec.from_dict(definition)


class Profiles(unittest.TestCase):

    def test_standard(self):
        spec = sized_aircraft()
        profile = ms.standard_profile(spec)
        kinds = [segment.kind for segment in profile.segments]
        self.assertEqual(kinds, [ms.SegmentKind.CLIMB, ms.SegmentKind.CRUISE,
                                 ms.SegmentKind.DESCENT])
        self.assertEqual(profile.npoints, 15)
        self.assertEqual(profile.range_m, 2_000e3)

        climb, cruise, descent = profile.segments
        self.assertEqual(climb.alt_end_m, cruise.alt_start_m)
        self.assertEqual(descent.alt_end_m, 0.0)
        self.assertAlmostEqual(climb.mach_start, descent.mach_end, places=12)
        self.assertGreater(descent.distance_m(), 0)
        return

    def test_invalid(self):
        with self.assertRaises(ValueError):
            ms.MissionSegment("cruise", 1, 10e3, 10e3, 0.78, 0.78, 18.0)
        with self.assertRaises(ValueError):
            ms.MissionSegment("climb", 5, 10e3, 0.0, 0.78, 0.3, 16.0,
                              rate_mps=10.0)
        with self.assertRaises(ValueError):
            ms.MissionSegment("descent", 5, 10e3, 0.0, 0.78, 0.3, 16.0)
        with self.assertRaises(ValueError):
            ms.MissionSegment("cruise", 5, 10e3, 10e3, 0.78, 0.78, 18.0,
                              lam=1.0)

        cruise = ms.MissionSegment("cruise", 5, 10e3, 10e3, 0.78, 0.78, 18.0)
        climb = ms.MissionSegment("climb", 5, 10e3, 11e3, 0.78, 0.78, 16.0,
                                  rate_mps=5.0)
        with self.assertRaises(ValueError):
            ms.MissionProfile((cruise, cruise), range_m=1e6)
        with self.assertRaises(ValueError):
            ms.MissionProfile((cruise, climb), range_m=1e6)
        with self.assertRaises(ValueError):
            cruise.distance_m()
        return


class OffDesign(unittest.TestCase):
    """Flying a sized aircraft."""

    def test_history(self):
        spec = sized_aircraft()
        flown, history = ms.fly_mission(spec)
        weight = flown.weight

        self.assertEqual(len(history), 15)
        self.assertEqual(weight.fuel, history.fuel_burned_kg)
        self.assertGreater(weight.fuel, 0)
        self.assertEqual(spec.weight.fuel, 0.0)

        # Time, distance, and fuel burned accumulate, mass only falls
        for series in (history.time_s, history.distance_m,
                       history.fuelburned_kg):
            self.assertTrue((np.diff(series) >= 0).all())
        self.assertTrue((np.diff(history.mass_kg) <= 0).all())
        self.assertAlmostEqual(
            history.mass_kg[0] - history.mass_kg[-1], history.fuel_burned_kg,
            places=6)

        # Takeoff mass carries the fuel needed by the mission
        fixedmass_kg = weight.oew + weight.payload + weight.crew
        self.assertAlmostEqual(
            history.mass_kg[0], fixedmass_kg + weight.fuel,
            delta=spec.settings.analysis_tol * weight.fuel)

        # Range is flown, and the aircraft lands
        self.assertAlmostEqual(history.distance_m[-1], 2_000e3, delta=1.0)
        self.assertEqual(history.altitude_m[-1], 0.0)
        self.assertEqual(history.phase[0], "climb")
        self.assertEqual(history.phase[-1], "descent")
        return

    def test_thrust(self):
        """Engines never deliver more than they have available."""
        _, history = ms.fly_mission(sized_aircraft())
        self.assertTrue(
            (history.thrust_n <= history.thrustavail_n * (1 + 1e-9)).all())
        self.assertTrue((history.thrustavail_n > 0).all())
        cruising = history.phase == "cruise"
        self.assertTrue(np.isfinite(history.tsfc[cruising]).all())
        return

    def test_range(self):
        """Flying further burns more fuel."""
        short, _ = ms.fly_mission(sized_aircraft(range_m=1_000e3))
        long, _ = ms.fly_mission(sized_aircraft(range_m=3_000e3))
        self.assertGreater(long.weight.fuel, short.weight.fuel)

        # Ranges shorter than climb and descent have no cruise
        _, hop = ms.fly_mission(sized_aircraft(range_m=10e3))
        cruising = hop.phase == "cruise"
        self.assertEqual(np.ptp(hop.distance_m[cruising]), 0.0)
        self.assertGreater(hop.distance_m[-1], 10e3)
        return

    def test_fuelflow_calibration(self):
        """The fuel flow calibration factor scales fuel burned."""
        nominal, _ = ms.fly_mission(sized_aircraft())
        doubled, _ = ms.fly_mission(sized_aircraft(mdot_cf=2.0))
        ratio = doubled.weight.fuel / nominal.weight.fuel
        self.assertTrue(1.9 < ratio < 2.5)
        return

    def test_hybrid(self):
        """Electric motors take some of the burden off the engines."""
        conventional, _ = ms.fly_mission(sized_aircraft())
        hybrid, history = ms.fly_mission(
            sized_aircraft(arch="PHE", lam_crs=0.3))
        self.assertLess(hybrid.weight.fuel, conventional.weight.fuel)
        self.assertGreater(history.electricenergy_j[-1], 0)

        cruising = history.phase == "cruise"
        np.testing.assert_allclose(
            history.thrust_n[cruising],
            0.7 * history.thrustreq_n[cruising], rtol=1e-9)
        return

    def test_infeasible(self):
        """Insufficient thrust is detected, not silently flown."""
        with self.assertRaises(ms.MissionInfeasibleError):
            ms.fly_mission(sized_aircraft(slsthrust_n=15e3))
        with self.assertRaises(ms.MissionInfeasibleError):
            ms.fly_mission(sized_aircraft(ld_crs=5.0))
        return

    def test_dataframe(self):
        _, history = ms.fly_mission(sized_aircraft())
        df = history.to_dataframe()
        self.assertEqual(len(df), len(history))
        self.assertIn("fuel burned [kg]", df)
        self.assertIn("thrust available 1 [N]", df)
        self.assertEqual(df["fuel burned [kg]"].iloc[-1],
                         history.fuel_burned_kg)
        return


class OnDesign(unittest.TestCase):

    def test_size_aircraft(self):
        spec = A320neo()
        sized, history = ms.size_aircraft(spec)
        weight = sized.weight
        settings = spec.settings

        self.assertEqual(weight.fuel, history.fuel_burned_kg)
        self.assertAlmostEqual(
            weight.oew, weight.oew_from_components, places=6)
        self.assertLessEqual(
            abs(weight.mtow - weight.mtow_from_components),
            settings.oew_tol * weight.mtow + settings.analysis_tol * weight.fuel
        )
        self.assertAlmostEqual(
            history.distance_m[-1], spec.performance.range_m, delta=1.0)
        self.assertAlmostEqual(history.mass_kg[0], weight.mtow, places=6)
        return


if __name__ == '__main__':
    unittest.main()
