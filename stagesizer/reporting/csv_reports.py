"""CSV report generation for staging results."""
import os
import csv

from ..utils.config import logger

STAGE_COLUMNS = [
    'Stage', 'Engine', 'Engines', 'Propellant (kg)', 'Structure (kg)', 'Dry Mass (kg)',
    'Wet Mass (kg)', 'Mass Ratio', 'Delta-V (m/s)', 'TWR', 'Burn Time (s)',
]


def write_results_to_csv(solution, output_dir, monte_carlo=None):
    """Write staging results to CSV files.

    Args:
        solution: Solution to tabulate
        output_dir (str): Directory to write CSV files to
        monte_carlo: Optional MonteCarloResult; its sorted samples are written too

    Returns:
        tuple: Paths to the generated CSV files (stage_path, samples_path);
            an entry is None when that file was not written
    """
    stage_path = None
    samples_path = None

    os.makedirs(output_dir, exist_ok=True)

    # Write stage table
    try:
        stage_path = os.path.join(output_dir, "stage_results.csv")
        with open(stage_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(STAGE_COLUMNS)
            for stage in solution.vehicle.to_dict()['stages']:
                writer.writerow([
                    stage['stage'],
                    stage['engine'],
                    stage['engine_count'],
                    f"{stage['propellant_mass']:.1f}",
                    f"{stage['structural_mass']:.1f}",
                    f"{stage['dry_mass']:.1f}",
                    f"{stage['wet_mass']:.1f}",
                    f"{stage['mass_ratio']:.4f}",
                    f"{stage['delta_v']:.1f}",
                    f"{stage['twr']:.3f}",
                    f"{stage['burn_time']:.1f}",
                ])
        logger.info(f"Stage results written to {stage_path}")
    except OSError as e:
        logger.error(f"Failed to write stage CSV: {str(e)}")
        stage_path = None

    # Write Monte Carlo samples
    if monte_carlo is not None:
        try:
            samples_path = os.path.join(output_dir, "monte_carlo_samples.csv")
            with open(samples_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow(['Rank', 'Delta-V Sorted (m/s)', 'Total Mass Sorted (kg)'])
                for rank, (dv, mass) in enumerate(zip(monte_carlo.delta_v_samples, monte_carlo.mass_samples)):
                    writer.writerow([rank, f"{dv:.2f}", f"{mass:.1f}"])
            logger.info(f"Monte Carlo samples written to {samples_path}")
        except OSError as e:
            logger.error(f"Failed to write Monte Carlo CSV: {str(e)}")
            samples_path = None

    return stage_path, samples_path
