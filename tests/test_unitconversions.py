"""Unit tests for the unit conversions module."""
import unittest

from ADWpy import unitconversions as uc


class Conversions(unittest.TestCase):

    def test_length_speed(self):
        self.assertAlmostEqual(uc.ft_m(35_000), 10_668.0, places=6)
        self.assertAlmostEqual(uc.nmi_m(1), 1852.0, places=9)
        self.assertAlmostEqual(uc.kts_mps(uc.mps_kts(70.0)), 70.0, places=4)
        self.assertAlmostEqual(uc.fpm_mps(2_250), 11.43, places=9)
        return

    def test_tsfc(self):
        """1 kg/(s N) is 3600 g0 lb/(h lbf)."""
        self.assertAlmostEqual(uc.tsfcSI_tsfcImp(1.0), 35_303.94, places=2)
        tsfc_si = 14.7e-6
        self.assertAlmostEqual(
            uc.tsfcImp_tsfcSI(uc.tsfcSI_tsfcImp(tsfc_si)), tsfc_si, places=15)
        return

    def test_energy_power(self):
        self.assertEqual(uc.kWh_J(1), 3.6e6)
        self.assertEqual(uc.W_kW(1_500), 1.5)
        self.assertEqual(uc.N_kN(uc.kN_N(85)), 85)
        return


if __name__ == '__main__':
    unittest.main()
