"""
Configuration System Module - Centralized Model Parameter Management

Loads, validates and merges the parameters of the forecasting pipeline from
YAML (or JSON) files and CLI overrides.

Sections:
- arima: order search bounds, information criterion, fixed order
- estimation: ridge terms and MA refinement rounds
- forecast: horizon and clamp range
- output: export format

Usage Examples:
    # Load defaults (or config/model_params.yml when present)
    config = load_config()

    # Load from specific file
    config = load_config('config/custom_params.yml')

    # Merge CLI overrides
    merged = merge_config(config, {'forecast': {'steps': 10}})
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from arima_forecast.exceptions import ConfigurationError


# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('config/model_params.yml')
REQUIRED_SECTIONS = ('arima', 'estimation', 'forecast', 'output')


def get_default_config() -> Dict[str, Any]:
    """
    Return hardcoded default configuration.

    These defaults reproduce the engine's own keyword defaults, so running
    with them is the same as calling arima_forecast() directly.

    Examples:
        >>> config = get_default_config()
        >>> config['arima']['max_p']
        4
        >>> config['forecast']['upper_bound']
        100.0
    """
    default_config = {
        'arima': {
            'auto': True,
            'max_p': 4,
            'max_d': 2,
            'max_q': 3,
            'information_criterion': 'aic',
            'order': [2, 1, 1],
        },
        'estimation': {
            'ar_ridge': 1e-8,
            'ma_ridge': 1e-6,
            'ma_iterations': 3,
        },
        'forecast': {
            'steps': 25,
            'lower_bound': -20.0,
            'upper_bound': 100.0,
        },
        'output': {
            'format': 'csv',
            'include_candidates': True,
        },
    }

    logger.debug("Default configuration created")
    return default_config


def _read_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Parse a YAML or JSON file; return None (and warn) when unusable."""
    try:
        logger.info(f"Loading configuration from {config_path}")
        with open(config_path, 'r') as f:
            if config_path.suffix.lower() == '.json':
                loaded = json.load(f)
            else:
                loaded = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        logger.warning(f"Parsing error in {config_path}: {str(e)}. Falling back to default configuration.")
        return None
    except OSError as e:
        logger.warning(f"Error reading configuration from {config_path}: {str(e)}. Falling back to default configuration.")
        return None

    if not isinstance(loaded, dict):
        logger.warning(f"{config_path} does not contain a mapping. Falling back to default configuration.")
        return None

    logger.info(f"Successfully loaded configuration from {config_path}")
    return loaded


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML/JSON file or use defaults.

    Values found in the file are deep-merged over get_default_config(), so a
    file only needs the keys it changes. A missing or unparsable file falls
    back to the defaults (with a warning when the path was given
    explicitly). The result is always validated.

    Args:
        config_path (str, optional): Path to the configuration file.
            Defaults to 'config/model_params.yml'.

    Returns:
        dict: Complete validated configuration

    Raises:
        ConfigurationError: If the loaded values fail validation
    """
    explicit = config_path is not None
    config_path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

    config = get_default_config()

    if config_path.exists():
        loaded = _read_config_file(config_path)
        if loaded is not None:
            _deep_merge(config, loaded)
    elif explicit:
        logger.warning(f"Configuration file not found: {config_path}. Using default configuration.")
    else:
        logger.debug(f"Default config file not found at {DEFAULT_CONFIG_PATH}. Using hardcoded defaults.")

    try:
        validate_config(config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise

    logger.info("Configuration loaded and validated successfully")
    return config


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration schema and parameter ranges.

    Validation Rules:
    - Required sections: arima, estimation, forecast, output
    - arima.max_p, max_d, max_q: non-negative integers
    - arima.information_criterion: 'aic' or 'bic'
    - arima.order: three non-negative integers; arima.auto: boolean
    - estimation.ar_ridge, ma_ridge: positive numbers
    - estimation.ma_iterations: positive integer
    - forecast.steps: non-negative integer
    - forecast.lower_bound < forecast.upper_bound
    - output.format: 'csv' or 'json'

    Returns:
        bool: True if configuration is valid.

    Raises:
        ConfigurationError: If validation fails, naming the parameter.
    """
    logger.debug("Validating configuration...")

    for section in REQUIRED_SECTIONS:
        if not isinstance(config.get(section), dict):
            raise ConfigurationError(f"Missing required section: {section}", parameter_name=section)

    # ===== ARIMA =====
    arima = config['arima']

    for key in ('max_p', 'max_d', 'max_q'):
        value = arima.get(key)
        if not _is_int(value) or value < 0:
            raise ConfigurationError(
                f"ARIMA {key} must be a non-negative integer, got {value}",
                parameter_name=f"arima.{key}", invalid_value=value, allowed_range=">= 0",
            )

    criterion = arima.get('information_criterion')
    if criterion not in ('aic', 'bic'):
        raise ConfigurationError(
            f"ARIMA information_criterion must be 'aic' or 'bic', got {criterion}",
            parameter_name="arima.information_criterion", invalid_value=criterion, allowed_range=('aic', 'bic'),
        )

    if not isinstance(arima.get('auto'), bool):
        raise ConfigurationError(
            f"ARIMA auto must be boolean, got {type(arima.get('auto'))}",
            parameter_name="arima.auto", invalid_value=arima.get('auto'),
        )

    order = arima.get('order')
    if not isinstance(order, (list, tuple)) or len(order) != 3 or not all(_is_int(v) and v >= 0 for v in order):
        raise ConfigurationError(
            f"ARIMA order must be three non-negative integers [p, d, q], got {order}",
            parameter_name="arima.order", invalid_value=order,
        )

    # ===== Estimation =====
    estimation = config['estimation']

    for key in ('ar_ridge', 'ma_ridge'):
        value = estimation.get(key)
        if not _is_number(value) or value <= 0:
            raise ConfigurationError(
                f"Estimation {key} must be a positive number, got {value}",
                parameter_name=f"estimation.{key}", invalid_value=value, allowed_range="> 0",
            )

    iterations = estimation.get('ma_iterations')
    if not _is_int(iterations) or iterations <= 0:
        raise ConfigurationError(
            f"Estimation ma_iterations must be a positive integer, got {iterations}",
            parameter_name="estimation.ma_iterations", invalid_value=iterations, allowed_range="> 0",
        )

    # ===== Forecast =====
    forecast = config['forecast']

    steps = forecast.get('steps')
    if not _is_int(steps) or steps < 0:
        raise ConfigurationError(
            f"Forecast steps must be a non-negative integer, got {steps}",
            parameter_name="forecast.steps", invalid_value=steps, allowed_range=">= 0",
        )

    lower, upper = forecast.get('lower_bound'), forecast.get('upper_bound')
    if not _is_number(lower) or not _is_number(upper) or lower >= upper:
        raise ConfigurationError(
            f"Forecast bounds must satisfy lower_bound < upper_bound, got [{lower}, {upper}]",
            parameter_name="forecast.lower_bound", invalid_value=(lower, upper),
        )

    # ===== Output =====
    output = config['output']

    if output.get('format') not in ('csv', 'json'):
        raise ConfigurationError(
            f"Output format must be 'csv' or 'json', got {output.get('format')}",
            parameter_name="output.format", invalid_value=output.get('format'), allowed_range=('csv', 'json'),
        )

    if not isinstance(output.get('include_candidates'), bool):
        raise ConfigurationError(
            f"Output include_candidates must be boolean, got {type(output.get('include_candidates'))}",
            parameter_name="output.include_candidates",
        )

    logger.debug(
        f"Config summary: ARIMA search p≤{arima['max_p']}, d≤{arima['max_d']}, q≤{arima['max_q']} "
        f"by {criterion.upper()}; {steps}-step forecast clamped to [{lower}, {upper}]"
    )
    return True


def _deep_merge(target: Dict[str, Any], source: Dict[str, Any], path: str = "") -> None:
    """Recursively merge source into target, logging changes."""
    for key, value in source.items():
        current_path = f"{path}.{key}" if path else key

        if key not in target:
            logger.warning(f"Override key not in base config: {current_path}")
            target[key] = value
        elif isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value, current_path)
        else:
            old_value = target[key]
            target[key] = value
            logger.info(f"Override config: {current_path} = {value} (was {old_value})")


def merge_config(base_config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration overrides into a copy of the base configuration.

    Nested dictionaries are merged key by key; scalars and lists are
    replaced. The merged result is validated before it is returned.

    Examples:
        >>> merged = merge_config(get_default_config(), {'arima': {'information_criterion': 'bic'}})
        >>> merged['arima']['information_criterion'], merged['arima']['max_p']
        ('bic', 4)

    Raises:
        ConfigurationError: If merged configuration fails validation.
    """
    logger.debug("Merging configuration overrides...")

    merged = copy.deepcopy(base_config)
    if overrides:
        _deep_merge(merged, overrides)

    try:
        validate_config(merged)
    except ConfigurationError as e:
        logger.error(f"Merged configuration validation failed: {str(e)}")
        raise

    logger.info("Merged configuration validated successfully")
    return merged


def config_to_dict(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Flatten nested configuration to dot-separated keys with string values.

    Examples:
        >>> flat = config_to_dict(get_default_config())
        >>> flat['arima.max_p'], flat['arima.order']
        ('4', '[2, 1, 1]')
    """
    flat = {}

    def flatten(node: Dict[str, Any], prefix: str = "") -> None:
        for key, value in node.items():
            full_key = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                flatten(value, full_key)
            else:
                flat[full_key] = str(value)

    flatten(config)
    return flat
