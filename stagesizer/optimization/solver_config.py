"""Configuration utilities for staging solvers."""


def get_solver_config(config, solver_name):
    """Get solver-specific configuration with defaults.

    Args:
        config: Main configuration dictionary
        solver_name: Name of the solver ('analytical', 'brute_force', 'monte_carlo')

    Returns:
        dict: Solver configuration with defaults applied
    """
    config = config or {}

    # Get optimization section with defaults
    opt_config = config.get('optimization', {})

    # Get solver specific config from solvers section
    solver_config = opt_config.get('solvers', {}).get(solver_name, {})

    # Common defaults
    defaults = {
        'log_dir': config.get('logging', {}).get('log_dir'),
        'constraints': opt_config.get('constraints', {}),
    }

    # Solver-specific defaults
    solver_defaults = {
        'analytical': {
            'robustness_margin': 0.02,
        },
        'brute_force': {
            'propellant_steps': 20,
            'min_propellant_kg': 1.0e4,
            'max_propellant_kg': 5.0e6,
            'refine_steps': 11,
            'refine_window': 1.0,
        },
        'monte_carlo': {
            'trials': 1000,
            'seed': 42,
            'max_workers': None,
            'chunk_size': 64,
        },
    }

    # Deep merge configs
    result = dict(defaults)
    result.update(solver_defaults.get(solver_name, {}))
    if solver_config:
        for key, value in solver_config.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = {**result[key], **value}
            else:
                result[key] = value

    return result
