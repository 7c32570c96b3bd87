"""Configuration module."""
import os
import copy
import json
import logging
import sys
from logging.handlers import RotatingFileHandler

# Constants
PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))
CONFIG_FILE = os.path.join(os.path.dirname(PACKAGE_DIR), 'config.json')
OUTPUT_DIR = os.path.join(os.path.dirname(PACKAGE_DIR), 'output')
DEFAULT_CATALOG = os.path.join(PACKAGE_DIR, 'data', 'engines.json')

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# Package logger
logger = logging.getLogger("stagesizer")
logger.setLevel(logging.DEBUG)  # Capture all levels

# Console handler - for basic output
if not any(getattr(h, '_stagesizer_console', False) for h in logger.handlers):
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
    console_handler._stagesizer_console = True
    logger.addHandler(console_handler)


def setup_logging(output_dir=OUTPUT_DIR):
    """Attach rotating debug and error file handlers to the package logger.

    Only the driver calls this; library use never writes log files.

    Args:
        output_dir: Directory to write debug.log and error.log into

    Returns:
        logging.Logger: The package logger
    """
    os.makedirs(output_dir, exist_ok=True)

    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()

    detailed_formatter = logging.Formatter(DETAILED_FORMAT)

    # Debug file handler - for detailed debug information
    debug_handler = RotatingFileHandler(
        os.path.join(output_dir, "debug.log"),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        mode='w'
    )
    debug_handler.setLevel(logging.DEBUG)
    debug_handler.setFormatter(detailed_formatter)
    logger.addHandler(debug_handler)

    # Error file handler - for warnings and errors
    error_handler = RotatingFileHandler(
        os.path.join(output_dir, "error.log"),
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3,
        mode='w'
    )
    error_handler.setLevel(logging.WARNING)
    error_handler.setFormatter(detailed_formatter)
    logger.addHandler(error_handler)

    return logger


# Default configuration
CONFIG = {
    "optimization": {
        "constraints": {
            "min_liftoff_twr": 1.2,
            "min_stage_twr": 0.5,
            "max_stages": 3,
            "structural_ratio": 0.08,
            "max_units_per_stage": 9
        },
        "uncertainty": {
            "isp": 0.01,
            "thrust": 0.02,
            "structural": 0.05
        },
        "solvers": {
            "analytical": {},
            "brute_force": {
                "propellant_steps": 20,
                "min_propellant_kg": 1.0e4,
                "max_propellant_kg": 5.0e6,
                "refine_steps": 11,
                "refine_window": 1.0
            },
            "monte_carlo": {
                "trials": 1000,
                "seed": 42,
                "max_workers": None,
                "chunk_size": 64
            }
        },
        "budget": {
            "time_limit": None,
            "max_evaluations": None
        }
    },
    "logging": {
        "log_dir": None
    }
}


def merge_config(base, override):
    """Recursively merge ``override`` into a copy of ``base``."""
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path=CONFIG_FILE):
    """Load configuration from a JSON file on top of the defaults.

    Args:
        path: Path to the JSON configuration file

    Returns:
        dict: Configuration dictionary
    """
    if not path or not os.path.exists(path):
        logger.warning(f"Config file {path} not found, using defaults")
        return copy.deepcopy(CONFIG)
    try:
        with open(path, 'r') as f:
            user_config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load config: {str(e)}")
        return copy.deepcopy(CONFIG)
    return merge_config(CONFIG, user_config)
