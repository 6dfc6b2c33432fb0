"""
Basic Engine Simulation Example
Demonstrates building a generator by hand, stepping it, previewing
without mutation, and plotting.
"""

import math
import os

# Headless environment check
if "DISPLAY" not in os.environ and os.name != "nt":
    import matplotlib
    matplotlib.use("Agg")
    print("Physical display not detected. Using 'Agg' backend for plot exports.")

from enginesound.cylinder import Cylinder
from enginesound.engine import EngineState, Generator
from enginesound.engine_config import create_default_inline_4
from enginesound.thermodynamics import Atmosphere
from enginesound.utilities import BAR, CCM, CELSIUS, DataExporter, rpm_to_rad
from enginesound.visualization import EnginePlotter


def example_1_single_cylinder():
    """Example 1: Single cylinder built from the core types"""

    print("=" * 70)
    print("EXAMPLE 1: Single Cylinder")
    print("=" * 70)

    atmosphere = Atmosphere.from_reference_density(
        pressure=101_325.0, temperature=CELSIUS + 20.0
    )
    position = -math.pi
    generator = Generator(
        engine=EngineState(
            cylinders=[
                Cylinder(position, 0.0, 10.0, 0.35, 50.0 * CCM, 0.025, atmosphere)
            ],
            speed=rpm_to_rad(300.0),
            position=position,
        ),
        rate=80_000.0,
        sample_rate=48_000,
        atmosphere=atmosphere,
    )

    for _ in range(8_000):
        generator.step()

    chamber = generator.engine.cylinders[0].cylinder
    print(f"Crank position : {generator.engine.position:.4f} rad")
    print(f"Pressure       : {chamber.pressure / BAR:.3f} bar")
    print(f"Temperature    : {chamber.temperature:.1f} K")
    print(f"Volume         : {chamber.pipe_volume / CCM:.3f} cc")
    print()

    # Preview one revolution without touching the live generator
    trace = generator.preview(16_000)
    print(f"Preview peak pressure: {trace.pressure.max() / BAR:.2f} bar")
    print(f"Live crank position unchanged: {generator.engine.position:.4f} rad")
    print()

    plotter = EnginePlotter()
    plotter.plot_comprehensive_analysis(trace, save_path="single_cylinder.png")
    return trace


def example_2_inline_4():
    """Example 2: Inline-4 preset from configuration"""

    print("=" * 70)
    print("EXAMPLE 2: Inline-4 Preset")
    print("=" * 70)

    config = create_default_inline_4()
    config.to_json("inline4_config.json")
    generator = config.build_generator()

    trace = generator.run(16_000)
    for i in range(trace.num_cylinders):
        print(
            f"Cylinder {i}: {trace.pressure[:, i].min() / BAR:.3f} – "
            f"{trace.pressure[:, i].max() / BAR:.3f} bar"
        )

    DataExporter.export_to_csv(trace, "inline4_trace.csv")
    EnginePlotter().plot_pressure_trace(trace, save_path="inline4_pressure.png")
    return trace


if __name__ == "__main__":
    example_1_single_cylinder()
    example_2_inline_4()
