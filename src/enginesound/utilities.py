"""
Utilities Module
Physical constants, unit conversion, trace statistics and data export.
"""

import json
import csv
import math
import numpy as np
from typing import Dict, List, Optional, Any
from scipy.signal import find_peaks

# ── Physical constants ───────────────────────────────────────────────────────

GAS_CONSTANT: float = 8.3145  # J/(mol·K)

BAR: float = 1.0e5  # Pa
CELSIUS: float = 273.15  # K at 0 °C
MILLILITER: float = 1.0e-6  # m³
CCM: float = MILLILITER  # m³, cubic centimetre

_RPM_TO_AV: float = math.pi / 30.0


def rpm_to_rad(rpm: float) -> float:
    """Engine speed [rpm] → angular velocity [rad/s]."""
    return rpm * _RPM_TO_AV


def rad_to_rpm(rad: float) -> float:
    """Angular velocity [rad/s] → engine speed [rpm]."""
    return rad / _RPM_TO_AV


class UnitConverter:
    """
    Conversions between SI and the display units used for chamber state.

    Each quantity has a table of ``unit -> SI factor``; temperature is the
    only affine conversion and gets its own pair of helpers.
    """

    PRESSURE_UNITS: Dict[str, float] = {
        "pa": 1.0,
        "bar": BAR,
        "psi": 6894.757293168,
    }

    VOLUME_UNITS: Dict[str, float] = {
        "m3": 1.0,
        "l": 1.0e-3,
        "liter": 1.0e-3,
        "cc": CCM,
        "ml": MILLILITER,
    }

    @staticmethod
    def _factor(table: Dict[str, float], unit: str, quantity: str) -> float:
        try:
            return table[unit]
        except KeyError:
            raise ValueError(
                f"Unknown {quantity} unit '{unit}', expected one of {sorted(table)}"
            ) from None

    @classmethod
    def pressure_to_si(cls, value: float, from_unit: str) -> float:
        """Pressure in ``from_unit`` → Pa."""
        return value * cls._factor(cls.PRESSURE_UNITS, from_unit, "pressure")

    @classmethod
    def pressure_from_si(cls, value: float, to_unit: str) -> float:
        """Pressure in Pa → ``to_unit``."""
        return value / cls._factor(cls.PRESSURE_UNITS, to_unit, "pressure")

    @classmethod
    def volume_to_si(cls, value: float, from_unit: str) -> float:
        """Volume in ``from_unit`` → m³."""
        return value * cls._factor(cls.VOLUME_UNITS, from_unit, "volume")

    @classmethod
    def volume_from_si(cls, value: float, to_unit: str) -> float:
        """Volume in m³ → ``to_unit``."""
        return value / cls._factor(cls.VOLUME_UNITS, to_unit, "volume")

    @staticmethod
    def celsius_to_kelvin(temp_c: float) -> float:
        return temp_c + CELSIUS

    @staticmethod
    def kelvin_to_celsius(temp_k: float) -> float:
        return temp_k - CELSIUS


def _json_default(value: Any) -> Any:
    """Fallback encoder for numpy values inside run summaries."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


class DataExporter:
    """
    Writes recorded engine traces and run summaries to disk.
    """

    @staticmethod
    def trace_columns(trace: Any) -> Dict[str, np.ndarray]:
        """Flatten a trace into named 1-D columns, cylinders in index order."""
        columns = {
            "time_s": np.asarray(trace.time),
            "crank_position_rad": np.asarray(trace.position),
        }
        for i in range(trace.pressure.shape[1]):
            columns[f"cyl{i}_pressure_pa"] = trace.pressure[:, i]
            columns[f"cyl{i}_temperature_k"] = trace.temperature[:, i]
            columns[f"cyl{i}_volume_m3"] = trace.volume[:, i]
        return columns

    @staticmethod
    def export_to_csv(
        trace: Any, filepath: str, variables: Optional[List[str]] = None
    ) -> None:
        """
        Write one CSV row per recorded step.

        Args:
            trace: EngineTrace from ``Generator.run`` or ``Generator.preview``
            filepath: Destination file
            variables: Column names to keep (None keeps every column)

        Raises:
            ValueError: If no column survives the selection
        """
        columns = DataExporter.trace_columns(trace)
        if variables:
            columns = {name: columns[name] for name in variables if name in columns}
        if not columns:
            raise ValueError("No trace columns selected for export")

        table = np.column_stack(list(columns.values()))
        with open(filepath, "w", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerow(columns)
            writer.writerows(table.tolist())

        print(f"Data exported to {filepath}")

    @staticmethod
    def export_to_json(data: Dict[str, Any], filepath: str) -> None:
        """
        Write a run summary as indented JSON; numpy arrays and scalars are
        converted to plain lists and numbers.

        Raises:
            ValueError: If a value is NaN or infinite (not valid JSON); the
                file is not written in that case
        """
        text = json.dumps(data, indent=2, default=_json_default, allow_nan=False)
        with open(filepath, "w") as fh:
            fh.write(text)

        print(f"Data exported to {filepath}")


def calculate_statistics(data: List[float]) -> Dict[str, float]:
    """Summary statistics of a series: mean, std, min, max, median, range."""
    values = np.asarray(data, dtype=float)
    low, high = float(values.min()), float(values.max())
    return {
        "mean": float(values.mean()),
        "std": float(values.std()),
        "min": low,
        "max": high,
        "median": float(np.median(values)),
        "range": high - low,
    }


def estimate_period(time: np.ndarray, signal: np.ndarray) -> float:
    """
    Estimate the period of an oscillating signal from its maxima.

    Peaks are located with scipy.signal.find_peaks, keeping only those that
    rise above the midpoint of the signal range so that numerical ripple
    near the minima is ignored.

    Args:
        time: Sample times [s]
        signal: Signal values aligned to ``time``

    Returns:
        Mean spacing between consecutive maxima [s]

    Raises:
        ValueError: If fewer than two maxima are found
    """
    time = np.asarray(time, dtype=float)
    signal = np.asarray(signal, dtype=float)
    if time.shape != signal.shape:
        raise ValueError(
            f"time and signal must have the same shape, "
            f"got {time.shape} and {signal.shape}"
        )

    midpoint = 0.5 * (float(np.min(signal)) + float(np.max(signal)))
    peaks, _ = find_peaks(signal, height=midpoint)
    if len(peaks) < 2:
        raise ValueError(
            f"At least two maxima are needed to estimate a period, found {len(peaks)}"
        )
    return float(np.mean(np.diff(time[peaks])))
