# logger_setup.py

import logging
import os
import json


def setup_logging(config_path='config.json'):
    """
    Sets up logging for the visualizer.

    Reads the logging section of the configuration, creates a run-specific
    log directory, and configures the dedicated "dotwave" logger (not the root
    logger) to write to both the console and a log file. pygame and numba keep
    their own logging untouched.

    Data Contract:
    - Inputs: config_path (str) - Path to the configuration file.
    - Outputs: logging.Logger - the configured application logger.
    - Side Effects:
        - Configures the "dotwave" logger.
        - Creates runs/<run_id>/ for the log file.
    - Invariants: Assumes the config file contains 'run_id' and a 'logging' dictionary
      with 'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger("dotwave")
    logger.setLevel(log_config['level'])
    logger.propagate = False

    log_dir = os.path.join('runs', run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'visualizer.log')

    formatter = logging.Formatter(log_config['format'])

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # Calling this twice must not duplicate output.
    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
