"""Plotting functions for staging results."""
import os
import numpy as np
import matplotlib.pyplot as plt

from ..utils.config import logger, OUTPUT_DIR


def plot_mass_breakdown(solution, output_dir=OUTPUT_DIR, filename="mass_breakdown.png"):
    """Stacked bar of propellant, structure and engine mass per stage."""
    try:
        stages = solution.vehicle.stages
        positions = np.arange(len(stages))
        labels = [f"Stage {i + 1}\n{s.unit_count} x {s.unit.name}" for i, s in enumerate(stages)]
        propellant = np.array([s.propellant_mass.tonnes for s in stages])
        structure = np.array([s.structural_mass.tonnes for s in stages])
        engines = np.array([s.engine_mass.tonnes for s in stages])

        plt.figure(figsize=(10, 6))
        plt.bar(positions, propellant, 0.5, color='dodgerblue', label='Propellant')
        plt.bar(positions, structure, 0.5, bottom=propellant, color='orange', label='Structure')
        plt.bar(positions, engines, 0.5, bottom=propellant + structure, color='green', label='Engines')

        for x, total in zip(positions, propellant + structure + engines):
            plt.text(x, total, f"{total:,.1f} t", ha='center', va='bottom')

        plt.xticks(positions, labels)
        plt.ylabel('Mass (t)')
        plt.title(f"Stage Mass Breakdown (payload {solution.vehicle.payload.tonnes:,.1f} t, "
                  f"{solution.payload_fraction_percent:.2f}% payload fraction)")
        plt.legend()
        plt.grid(True, alpha=0.3)

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, filename)
        plt.savefig(output_path, dpi=300, bbox_inches='tight')
        plt.close()
        logger.info(f"Mass breakdown plot saved to {output_path}")
        return output_path

    except Exception as e:
        plt.close()
        logger.error(f"Error plotting mass breakdown: {str(e)}")
        return None


def plot_monte_carlo(monte_carlo, output_dir=OUTPUT_DIR, filename="monte_carlo.png"):
    """Histograms of Monte Carlo delta-v and total mass with 5/50/95 percentile markers."""
    try:
        if monte_carlo is None or monte_carlo.valid_trials == 0:
            logger.warning("No Monte Carlo samples to plot")
            return None

        fig, (ax_dv, ax_mass) = plt.subplots(1, 2, figsize=(14, 5))

        ax_dv.hist(monte_carlo.delta_v_samples, bins=40, color='dodgerblue', alpha=0.7)
        ax_dv.axvline(monte_carlo.target_delta_v, color='red', linestyle='-', label='Target')
        for q in (5, 50, 95):
            ax_dv.axvline(monte_carlo.delta_v_percentile(q), color='black', linestyle='--', alpha=0.6)
        ax_dv.set_xlabel('Delta-V (m/s)')
        ax_dv.set_ylabel('Trials')
        ax_dv.set_title(f"Delta-V (success {monte_carlo.success_probability:.1%})")
        ax_dv.legend()
        ax_dv.grid(True, alpha=0.3)

        ax_mass.hist(monte_carlo.mass_samples / 1000.0, bins=40, color='orange', alpha=0.7)
        for q in (5, 50, 95):
            ax_mass.axvline(monte_carlo.mass_percentile(q) / 1000.0, color='black', linestyle='--', alpha=0.6)
        ax_mass.set_xlabel('Total Mass (t)')
        ax_mass.set_ylabel('Trials')
        ax_mass.set_title('Total Mass')
        ax_mass.grid(True, alpha=0.3)

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, filename)
        fig.savefig(output_path, dpi=300, bbox_inches='tight')
        plt.close(fig)
        logger.info(f"Monte Carlo plot saved to {output_path}")
        return output_path

    except Exception as e:
        plt.close('all')
        logger.error(f"Error plotting Monte Carlo results: {str(e)}")
        return None


def plot_results(results, output_dir=OUTPUT_DIR):
    """Generate all plots."""
    if not results or results.get('solution') is None:
        logger.warning("No results to plot")
        return []

    paths = [plot_mass_breakdown(results['solution'], output_dir)]
    if results.get('monte_carlo') is not None:
        paths.append(plot_monte_carlo(results['monte_carlo'], output_dir))
    return [p for p in paths if p]
