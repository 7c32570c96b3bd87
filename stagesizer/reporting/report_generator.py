"""Report generation functions for staging results."""
import os
import json
from datetime import datetime

from ..utils.config import logger, OUTPUT_DIR


def build_report(results, config=None):
    """Assemble the JSON-serializable report for a staging run.

    Args:
        results: Dict with 'solution' (Solution) and optional 'monte_carlo'
            (MonteCarloResult), as returned by RocketStageOptimizer.solve
        config: Configuration dictionary to embed

    Returns:
        dict: Report content
    """
    solution = results.get('solution')
    monte_carlo = results.get('monte_carlo')
    report = {
        'timestamp': datetime.now().isoformat(),
        'configuration': config or {},
        'solution': None,
        'losses': None,
        'monte_carlo': None,
    }
    if solution is not None:
        report['solution'] = solution.to_dict()
        estimate = solution.vehicle.estimate_losses()
        report['losses'] = estimate.to_dict()
    if monte_carlo is not None:
        report['monte_carlo'] = monte_carlo.to_dict()
    return report


def generate_report(results, config, output_dir=OUTPUT_DIR, filename="optimization_report.json"):
    """Generate a JSON report of staging results.

    Returns:
        dict: The report written, or None if there was nothing to write
    """
    if not isinstance(results, dict) or results.get('solution') is None:
        logger.warning("No solution to include in report")
        return None

    try:
        report = build_report(results, config)
        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, filename)
        with open(output_path, 'w') as f:
            json.dump(report, f, indent=4)
        logger.info(f"Report saved to {output_path}")
        return report
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Error generating report: {str(e)}")
        return None
