"""
Smoke Tests for Visualization Module
Every plot renders headless and writes an image file.
"""

import math
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from enginesound.engine_config import create_default_inline_4  # noqa: E402
from enginesound.visualization import EnginePlotter  # noqa: E402


@pytest.fixture(scope="module")
def trace():
    return create_default_inline_4().build_generator().run(4_000)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestEnginePlotter:

    def setup_method(self):
        self.plotter = EnginePlotter()

    def test_pressure_trace(self, trace, tmp_path):
        path = tmp_path / "pressure.png"
        fig = self.plotter.plot_pressure_trace(trace, save_path=str(path), show=False)
        assert path.exists()
        assert len(fig.axes[0].lines) == trace.num_cylinders

    def test_temperature_trace(self, trace, tmp_path):
        path = tmp_path / "temperature.png"
        self.plotter.plot_temperature_trace(trace, save_path=str(path), show=False)
        assert path.exists()

    def test_pv_diagram(self, trace, tmp_path):
        path = tmp_path / "pv.png"
        fig = self.plotter.plot_pv_diagram(
            trace, cylinder=1, save_path=str(path), show=False
        )
        assert path.exists()
        assert "Cylinder 1" in fig.axes[0].get_title()

    def test_comprehensive_analysis(self, trace, tmp_path):
        path = tmp_path / "summary.png"
        fig = self.plotter.plot_comprehensive_analysis(
            trace, save_path=str(path), show=False
        )
        assert path.exists()
        assert len(fig.axes) == 4

    def test_invalid_cylinder_raises(self, trace):
        with pytest.raises(IndexError):
            self.plotter.plot_pv_diagram(trace, cylinder=4, show=False)

    def test_unknown_style_falls_back(self, capsys):
        EnginePlotter(style="no-such-style")
        assert "not found" in capsys.readouterr().out

    def test_trace_covers_expected_time(self, trace):
        assert trace.time[-1] == pytest.approx(4_000 / 80_000.0)
        assert math.isfinite(trace.pressure.max())
