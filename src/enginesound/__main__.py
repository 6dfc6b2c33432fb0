"""
CLI entry point for enginesound.
"""
import argparse
import dataclasses
import math
import sys
from .engine_config import (
    EngineConfiguration,
    create_default_inline_4,
    create_default_single_cylinder,
)
from .utilities import BAR, DataExporter, calculate_statistics, estimate_period

PRESETS = {
    "single": create_default_single_cylinder,
    "inline4": create_default_inline_4,
}


def load_config(preset, config_path=None, rpm=None):
    if config_path:
        config = EngineConfiguration.from_json(config_path)
    elif preset in PRESETS:
        config = PRESETS[preset]()
    else:
        print(f"Error: Unknown preset '{preset}'")
        sys.exit(1)

    if rpm is not None:
        # replace() re-runs the cross-parameter checks for the new speed
        config = dataclasses.replace(
            config, operating=dataclasses.replace(config.operating, rpm=rpm)
        )
    return config


def _format_ms(seconds):
    return "n/a" if seconds is None else f"{seconds * 1e3:.3f} ms"


def run_simulation(config, steps, csv_path=None, json_path=None, plot_path=None):
    generator = config.build_generator()
    speed = generator.engine.speed
    preview_steps = config.simulation.preview_steps

    print("\n" + "═" * 50)
    print(
        f"  SIMULATION: {len(generator.engine.cylinders)} cylinder(s) at "
        f"{config.operating.rpm:.0f} RPM, {steps} steps @ {generator.rate:.0f} Hz"
    )
    print("═" * 50)

    preview = generator.preview(preview_steps)
    preview_peak = float(preview.pressure.max())
    print(f"Preview:         {preview_steps} steps, peak {preview_peak / BAR:.3f} bar")

    trace = generator.run(steps)
    cyl = trace.cylinder(0)

    pressure = calculate_statistics(cyl.pressure)
    temperature = calculate_statistics(cyl.temperature)
    # None where no finite value exists, so summaries stay valid JSON
    expected_period = 2.0 * math.pi / abs(speed) if speed else None
    try:
        period = estimate_period(cyl.time, cyl.pressure)
    except ValueError:
        period = None

    print(f"Pressure:        {pressure['min'] / BAR:.3f} – {pressure['max'] / BAR:.3f} bar")
    print(f"Temperature:     {temperature['min']:.1f} – {temperature['max']:.1f} K")
    print(f"Period:          {_format_ms(period)} (expected {_format_ms(expected_period)})")
    print(f"Crank position:  {generator.engine.position:.4f} rad")
    print("─" * 50)

    if csv_path:
        DataExporter.export_to_csv(trace, csv_path)

    if json_path:
        summary = {
            "rpm": config.operating.rpm,
            "steps": steps,
            "rate_hz": generator.rate,
            "preview_steps": preview_steps,
            "preview_max_pressure_pa": preview_peak,
            "min_pressure_pa": pressure["min"],
            "max_pressure_pa": pressure["max"],
            "min_temperature_k": temperature["min"],
            "max_temperature_k": temperature["max"],
            "period_s": period,
            "expected_period_s": expected_period,
            "config": config.to_dict(),
        }
        DataExporter.export_to_json(summary, json_path)

    if plot_path:
        import matplotlib

        matplotlib.use("Agg")
        from .visualization import EnginePlotter

        EnginePlotter().plot_comprehensive_analysis(
            trace, save_path=plot_path, show=False
        )

    print("═" * 50 + "\n")
    return trace


def main(argv=None):
    parser = argparse.ArgumentParser(description="Cylinder gas-state simulator CLI")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="single", help="Engine preset to run (default: single)")
    parser.add_argument("--config", default=None, help="JSON configuration file (overrides --preset)")
    parser.add_argument("--rpm", type=float, default=None, help="Engine speed in RPM")
    parser.add_argument("--steps", type=int, default=100_000, help="Number of simulation steps (default: 100000)")
    parser.add_argument("--csv", default=None, help="Export the trace to this CSV file")
    parser.add_argument("--json", default=None, help="Export a run summary to this JSON file")
    parser.add_argument("--plot", default=None, help="Save a summary figure to this image file")

    args = parser.parse_args(argv)
    if args.steps < 1:
        parser.error("--steps must be ≥ 1")

    config = load_config(args.preset, args.config, args.rpm)
    run_simulation(config, args.steps, args.csv, args.json, args.plot)


if __name__ == "__main__":
    main()
