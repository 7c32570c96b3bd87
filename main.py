#!/usr/bin/env python3
"""Main script for launch vehicle staging optimization."""
import sys

from stagesizer.exceptions import StagingError
from stagesizer.utils.config import CONFIG_FILE, OUTPUT_DIR, load_config, logger, setup_logging
from stagesizer.utils.data import load_input_data
from stagesizer.optimization.objective import RocketStageOptimizer
from stagesizer.reporting.csv_reports import write_results_to_csv
from stagesizer.reporting.report_generator import generate_report
from stagesizer.visualization.plots import plot_results


def main(input_file="input_data.json", config_file=CONFIG_FILE, output_dir=OUTPUT_DIR):
    """Main optimization routine."""
    setup_logging(output_dir)
    config = load_config(config_file)

    try:
        problem = load_input_data(input_file, config=config)
        optimizer = RocketStageOptimizer(config, problem)
        results = optimizer.solve()
    except StagingError as e:
        logger.error(f"Optimization failed: {e}")
        return 1
    except (OSError, KeyError, ValueError) as e:
        logger.error(f"Error in main routine: {e}")
        return 1

    solution = results['solution']
    logger.info(
        f"Total mass {solution.total_mass}, payload fraction "
        f"{solution.payload_fraction_percent:.3f}%, delta-v {solution.delta_v} "
        f"(margin {solution.margin}, {solution.margin_percent:+.2f}%)"
    )
    for i, stage in enumerate(solution.vehicle.stages):
        logger.info(
            f"  Stage {i + 1}: {stage.unit_count} x {stage.unit.name}, "
            f"propellant {stage.propellant_mass}, wet {stage.wet_mass}, "
            f"delta-v {solution.vehicle.stage_delta_v(i)}, TWR {solution.vehicle.stage_twr(i).value:.2f}"
        )

    # Generate plots
    plot_results(results, output_dir)

    # Generate reports
    report = generate_report(results, config, output_dir)
    write_results_to_csv(solution, output_dir, results.get('monte_carlo'))
    if report is None:
        logger.error("Report generation failed")
        return 1

    logger.info("Reports generated successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
