"""
Module for accessing the historical database of prior aircraft, used as
training data for the statistical weight estimation models.
"""
import os

import numpy as np
import pandas as pd

from ADWpy.aircraftspec import VehicleClass

__all__ = ["fleet_catalogue", "HistoricalFleetTable"]
__author__ = "Yaseen Reza"

# Locate fleet data
fleet_data_path = os.path.join(os.path.dirname(__file__), "data")

# Catalogue (paths to) fleet tables, the dataframes are loaded lazily
fleet_catalogue = {
    VehicleClass.TURBOFAN: dict([
        ("path", os.path.join(fleet_data_path, "fleet_turbofan.csv")),
        ("dataframe", None)
    ]),
    VehicleClass.TURBOPROP: dict([
        ("path", os.path.join(fleet_data_path, "fleet_turboprop.csv")),
        ("dataframe", None)
    ]),
}

# Column names of each field, as they appear in the fleet data files
_columns = {
    "name": "Name",
    "eis": "EIS",
    "mtow_kg": "MTOW [kg]",
    "oew_kg": "OEW [kg]",
    "engines_kg": "Engines [kg]",
    "airframe_kg": "Airframe [kg]",
    "s_m2": "Wing Area [m2]",
    "thrust_n": "SLS Thrust [N]",
    "power_w": "SLS Power [W]",
    "numengines": "Engine Count",
}


class HistoricalFleetTable:
    """
    Read-only table of historical aircraft.

    Examples:

        >>> from ADWpy.fleet import HistoricalFleetTable
        >>> from ADWpy.aircraftspec import VehicleClass
        >>> fleet = HistoricalFleetTable.load(VehicleClass.TURBOPROP)
        >>> len(fleet.complete("mtow_kg", "airframe_kg")) < len(fleet)
        True

    """

    def __init__(self, dataframe: pd.DataFrame, name: str = None):
        """
        Args:
            dataframe: Historical aircraft records, one row per aircraft. Use
                the column names found in the packaged fleet data files. If
                the "Airframe [kg]" column is missing, it is derived from the
                OEW less the weight of the engines.
            name: A label for the table. Optional.
        """
        df = dataframe.copy()
        airframe = _columns["airframe_kg"]
        if airframe not in df:
            df[airframe] = df[_columns["oew_kg"]] - df[_columns["engines_kg"]]
        self.name = name
        self._dataframe = df
        return

    @classmethod
    def load(cls, vehicleclass: VehicleClass) -> "HistoricalFleetTable":
        """
        Load the packaged fleet table for an aircraft class.

        Args:
            vehicleclass: Class of aircraft the table should describe.

        Returns:
            A HistoricalFleetTable object.

        """
        vehicleclass = VehicleClass.parse(vehicleclass)
        entry = fleet_catalogue[vehicleclass]

        # Check if the table has been cached already, otherwise load it
        if entry["dataframe"] is None:
            entry["dataframe"] = pd.read_csv(entry["path"])

        return cls(entry["dataframe"], name=vehicleclass.value)

    def __len__(self):
        return len(self._dataframe)

    def __repr__(self):
        reprstr = f"{type(self).__name__}({self.name!r}, n={len(self)})"
        return reprstr

    @property
    def dataframe(self) -> pd.DataFrame:
        """A copy of the raw records."""
        return self._dataframe.copy()

    def field(self, name: str) -> np.ndarray:
        """
        Values of one field across all records, missing values as NaN.

        Args:
            name: Any of 'eis', 'mtow_kg', 'oew_kg', 'engines_kg',
                'airframe_kg', 's_m2', 'thrust_n', 'power_w', 'numengines'.

        Returns:
            A (copied) array of floats.

        """
        if name not in _columns or name == "name":
            errormsg = f"Unknown {name=}, try one of {list(_columns)[1:]}"
            raise KeyError(errormsg)
        column = _columns[name]
        if column not in self._dataframe:
            return np.full(len(self), np.nan)
        return self._dataframe[column].to_numpy(dtype=float, copy=True)

    def eis(self) -> np.ndarray:
        return self.field("eis")

    def mtow_kg(self) -> np.ndarray:
        return self.field("mtow_kg")

    def airframe_kg(self) -> np.ndarray:
        return self.field("airframe_kg")

    def s_m2(self) -> np.ndarray:
        return self.field("s_m2")

    def thrust_n(self) -> np.ndarray:
        return self.field("thrust_n")

    def power_w(self) -> np.ndarray:
        return self.field("power_w")

    def complete(self, *names: str) -> np.ndarray:
        """
        Records with every one of the named fields present.

        Args:
            *names: Field names, see `field`.

        Returns:
            An array of shape (n_complete, len(names)). Incomplete records are
            excluded, never imputed.

        """
        if not names:
            raise ValueError("Name at least one field")
        table = np.column_stack([self.field(name) for name in names])
        return table[~np.isnan(table).any(axis=1)]
