"""
Visualization Module
Static plots of recorded engine traces.
"""

import matplotlib.pyplot as plt
from matplotlib.gridspec import GridSpec
import numpy as np
from typing import Optional

from .engine import EngineTrace
from .utilities import BAR, CCM


class EnginePlotter:
    """
    Plots for engine traces.

    Supports:
    - Pressure, temperature and volume vs time
    - P-V diagrams
    - Combined four-panel figure
    """

    def __init__(self, style: str = "default"):
        """
        Initialize plotter with specified style.

        Args:
            style: Matplotlib style ('default', 'ggplot', ...)
        """
        if style != "default":
            if style in plt.style.available:
                plt.style.use(style)
            else:
                print(f"Warning: Style '{style}' not found, using default.")

        self.fig_size = (12, 8)
        self.dpi = 100

    @staticmethod
    def _finish(fig, save_path: Optional[str], label: str, show: bool):
        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches="tight")
            print(f"{label} saved to {save_path}")

        if show:
            plt.show()

        return fig

    def plot_pressure_trace(
        self,
        trace: EngineTrace,
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Plot chamber pressure of every cylinder vs time.

        Args:
            trace: Recorded engine trace
            save_path: Optional path to save figure
            show: Display the figure interactively
        """
        fig, ax = plt.subplots(figsize=(12, 6))

        time_ms = trace.time * 1e3
        for i in range(trace.num_cylinders):
            ax.plot(
                time_ms, trace.pressure[:, i] / BAR, linewidth=1.5, label=f"Cylinder {i}"
            )

        ax.set_xlabel("Time (ms)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Pressure (bar)", fontsize=12, fontweight="bold")
        ax.set_title("Chamber Pressure", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=9)

        return self._finish(fig, save_path, "Pressure trace", show)

    def plot_temperature_trace(
        self,
        trace: EngineTrace,
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Plot gas temperature of every cylinder vs time.

        Args:
            trace: Recorded engine trace
            save_path: Optional path to save figure
            show: Display the figure interactively
        """
        fig, ax = plt.subplots(figsize=(12, 6))

        time_ms = trace.time * 1e3
        for i in range(trace.num_cylinders):
            ax.plot(
                time_ms, trace.temperature[:, i], linewidth=1.5, label=f"Cylinder {i}"
            )

        ax.set_xlabel("Time (ms)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Temperature (K)", fontsize=12, fontweight="bold")
        ax.set_title("Gas Temperature", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=9)

        return self._finish(fig, save_path, "Temperature trace", show)

    def plot_pv_diagram(
        self,
        trace: EngineTrace,
        cylinder: int = 0,
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Create P-V diagram of one cylinder.

        An adiabatic chamber retraces the same curve on compression and
        expansion, so the loop encloses no area.

        Args:
            trace: Recorded engine trace
            cylinder: Cylinder index
            save_path: Optional path to save figure
            show: Display the figure interactively
        """
        cyl = trace.cylinder(cylinder)
        fig, ax = plt.subplots(figsize=(10, 8))

        volume_cc = cyl.volume / CCM
        pressure_bar = cyl.pressure / BAR

        ax.plot(volume_cc, pressure_bar, "b-", linewidth=2, label="Adiabat")

        tdc_idx = int(np.argmin(cyl.volume))
        ax.plot(
            volume_cc[tdc_idx], pressure_bar[tdc_idx], "ro", markersize=10, label="TDC"
        )
        bdc_idx = int(np.argmax(cyl.volume))
        ax.plot(
            volume_cc[bdc_idx], pressure_bar[bdc_idx], "go", markersize=10, label="BDC"
        )

        ax.set_xlabel("Volume (cm³)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Pressure (bar)", fontsize=12, fontweight="bold")
        ax.set_title(f"P-V Diagram, Cylinder {cylinder}", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=10)

        return self._finish(fig, save_path, "P-V diagram", show)

    def plot_comprehensive_analysis(
        self,
        trace: EngineTrace,
        cylinder: int = 0,
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Create four-panel figure for one cylinder.

        Args:
            trace: Recorded engine trace
            cylinder: Cylinder index
            save_path: Optional path to save figure
            show: Display the figure interactively
        """
        cyl = trace.cylinder(cylinder)
        fig = plt.figure(figsize=(16, 12))
        gs = GridSpec(2, 2, figure=fig, hspace=0.3, wspace=0.3)

        time_ms = cyl.time * 1e3
        volume_cc = cyl.volume / CCM
        pressure_bar = cyl.pressure / BAR

        # P-V Diagram
        ax1 = fig.add_subplot(gs[0, 0])
        ax1.plot(volume_cc, pressure_bar, "b-", linewidth=2)
        ax1.set_xlabel("Volume (cm³)", fontweight="bold")
        ax1.set_ylabel("Pressure (bar)", fontweight="bold")
        ax1.set_title("P-V Diagram", fontweight="bold")
        ax1.grid(True, alpha=0.3)

        # Pressure vs time
        ax2 = fig.add_subplot(gs[0, 1])
        ax2.plot(time_ms, pressure_bar, "b-", linewidth=2)
        ax2.set_xlabel("Time (ms)", fontweight="bold")
        ax2.set_ylabel("Pressure (bar)", fontweight="bold")
        ax2.set_title("Pressure", fontweight="bold")
        ax2.grid(True, alpha=0.3)

        # Temperature vs time
        ax3 = fig.add_subplot(gs[1, 0])
        ax3.plot(time_ms, cyl.temperature, "r-", linewidth=2)
        ax3.set_xlabel("Time (ms)", fontweight="bold")
        ax3.set_ylabel("Temperature (K)", fontweight="bold")
        ax3.set_title("Temperature", fontweight="bold")
        ax3.grid(True, alpha=0.3)

        # Volume vs time
        ax4 = fig.add_subplot(gs[1, 1])
        ax4.plot(time_ms, volume_cc, "g-", linewidth=2)
        ax4.set_xlabel("Time (ms)", fontweight="bold")
        ax4.set_ylabel("Volume (cm³)", fontweight="bold")
        ax4.set_title("Chamber Volume", fontweight="bold")
        ax4.grid(True, alpha=0.3)

        fig.suptitle(
            f"Cylinder {cylinder} Gas State", fontsize=16, fontweight="bold"
        )

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches="tight")
            print(f"Comprehensive analysis saved to {save_path}")

        if show:
            plt.show()

        return fig
