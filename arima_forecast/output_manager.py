"""
Output Manager Module for the ARIMA Inflation Forecasting System

Exports forecast results to CSV or JSON and renders a human-readable summary
for the console.

Functions:
    - export_results: Write forecasts and model diagnostics to CSV or JSON
    - format_results_summary: Create human-readable summary
"""

import csv
import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from arima_forecast.exceptions import FileIOError
from arima_forecast.logger_config import get_logger


# Configure module logging
logger = get_logger(__name__)

REQUIRED_KEYS = ('predictions', 'years', 'model')


def _finite_or_none(value: float) -> Optional[float]:
    """JSON has no Infinity; infeasible diagnostics are written as null."""
    value = float(value)
    return value if math.isfinite(value) else None


def _forecast_rows(results: dict) -> List[Dict[str, Any]]:
    return [
        {'year': int(year), 'predicted_rate': float(rate)}
        for year, rate in zip(results['years'], results['predictions'])
    ]


DIAGNOSTIC_KEYS = ('order', 'criterion', 'aic', 'bic', 'rmse', 'mse', 'ar_intercept', 'ar_coeffs', 'ma_coeffs')


def _diagnostics(model) -> Dict[str, Any]:
    """Model fields worth exporting; residuals and the fitted series are left out."""
    data = model.to_dict()
    diagnostics = {key: data[key] for key in DIAGNOSTIC_KEYS}
    for key in ('aic', 'bic', 'rmse', 'mse'):
        diagnostics[key] = _finite_or_none(diagnostics[key])
    return diagnostics


def _candidates(model) -> List[Dict[str, Any]]:
    return [
        {
            'order': list(c.order),
            'aic': _finite_or_none(c.aic),
            'bic': _finite_or_none(c.bic),
            'rmse': _finite_or_none(c.rmse),
        }
        for c in model.top_candidates
    ]


def _export_to_json(results: dict, file_path: Path, include_candidates: bool) -> None:
    payload = {
        'generated': results.get('timestamp', datetime.now().isoformat()),
        'input_file': results.get('input_file'),
        'model': _diagnostics(results['model']),
        'forecast': _forecast_rows(results),
    }
    if include_candidates:
        payload['top_candidates'] = _candidates(results['model'])
    if results.get('config'):
        payload['config'] = results['config']
    if results.get('stationarity'):
        payload['stationarity'] = results['stationarity']
    if results.get('inflation'):
        payload['inflation'] = results['inflation']

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2)


def _export_to_csv(results: dict, file_path: Path, include_candidates: bool) -> None:
    """
    Forecast table first, then model diagnostics as key/value rows:

        year,predicted_rate
        2026,21.43
        ...

        metric,value
        order,"(1, 1, 1)"
        aic,312.51
    """
    model = results['model']

    with open(file_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['year', 'predicted_rate'])
        for row in _forecast_rows(results):
            writer.writerow([row['year'], f"{row['predicted_rate']:.6f}"])

        writer.writerow([])
        writer.writerow(['metric', 'value'])
        writer.writerow(['order', str(model.order)])
        writer.writerow(['criterion', model.criterion or 'fixed'])
        for name in ('aic', 'bic', 'rmse'):
            writer.writerow([name, f"{getattr(model, name):.6f}"])

        if include_candidates and model.top_candidates:
            writer.writerow([])
            writer.writerow(['candidate_order', 'aic', 'bic', 'rmse'])
            for c in model.top_candidates:
                writer.writerow([str(c.order), f"{c.aic:.6f}", f"{c.bic:.6f}", f"{c.rmse:.6f}"])


def export_results(
    results: dict,
    output_path: Optional[str] = None,
    format: str = 'csv',
    include_candidates: bool = True,
) -> str:
    """
    Export forecast results to a CSV or JSON file.

    Args:
        results (dict): Output of run_inflation_forecast with keys:
            - predictions (required): forecast rates
            - years (required): forecast years, same length as predictions
            - model (required): the FittedModel used
            - timestamp, input_file, config (flattened), stationarity,
              inflation (optional)
        output_path (str, optional): Destination file. Defaults to
            output/forecast_YYYYMMDD_HHMMSS.{format}
        format (str): 'csv' or 'json'
        include_candidates (bool): Also write the top auto-selection candidates

    Returns:
        str: Absolute path of the written file

    Raises:
        TypeError: If results is not a dictionary
        ValueError: If format is unknown or required keys are missing
        FileIOError: If the file cannot be written
    """
    if not isinstance(results, dict):
        error_msg = f"results must be a dictionary, got {type(results)}"
        logger.error(error_msg)
        raise TypeError(error_msg)

    if format not in ('csv', 'json'):
        error_msg = f"format must be 'csv' or 'json', got '{format}'"
        logger.error(error_msg)
        raise ValueError(error_msg)

    missing_keys = [k for k in REQUIRED_KEYS if k not in results]
    if missing_keys:
        error_msg = f"results missing required keys: {missing_keys}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = Path('output') / f"forecast_{timestamp}.{format}"
    else:
        file_path = Path(output_path)

    logger.info(f"Exporting results to {format.upper()}: {file_path}")

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if format == 'json':
            _export_to_json(results, file_path, include_candidates)
        else:
            _export_to_csv(results, file_path, include_candidates)
    except OSError as e:
        error_msg = f"Cannot write {file_path}: {str(e)}"
        logger.error(error_msg)
        raise FileIOError(error_msg, file_path=str(file_path), operation='write') from e

    logger.info(f"Results successfully exported to: {file_path}")
    return str(file_path.absolute())


def format_results_summary(results: dict) -> str:
    """
    Create human-readable summary of forecast results.

    Sections: header, selected model (order, criterion, diagnostics,
    coefficients), top candidates, stationarity check, the forecast table
    and, when present, the inflation adjustment.

    Raises:
        TypeError: If results is not a dictionary.
        ValueError: If results is missing a required key.
    """
    if not isinstance(results, dict):
        error_msg = f"results must be a dictionary, got {type(results)}"
        logger.error(error_msg)
        raise TypeError(error_msg)

    missing_keys = [k for k in REQUIRED_KEYS if k not in results]
    if missing_keys:
        error_msg = f"results missing required keys: {missing_keys}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    model = results['model']
    rule = "-" * 70

    lines = []
    lines.append("=" * 70)
    lines.append("ARIMA INFLATION FORECAST SUMMARY")
    lines.append("=" * 70)
    lines.append(f"\nGenerated: {results.get('timestamp', datetime.now().isoformat())}")
    if results.get('input_file'):
        lines.append(f"Input: {results['input_file']}")
    lines.append(f"Forecast Horizon: {len(results['predictions'])} periods")

    lines.append("\n" + rule)
    lines.append("SELECTED MODEL")
    lines.append(rule)
    selection = f"via {model.criterion.upper()}" if model.criterion else "fixed order"
    lines.append(f"ARIMA{model.order} ({selection})")
    lines.append(f"{'AIC':20s}: {model.aic:.4f}")
    lines.append(f"{'BIC':20s}: {model.bic:.4f}")
    lines.append(f"{'RMSE':20s}: {model.rmse:.4f}")
    lines.append(f"{'AR intercept':20s}: {model.ar_intercept:.4f}")
    lines.append(f"{'AR coefficients':20s}: {[round(c, 4) for c in model.ar_coeffs]}")
    lines.append(f"{'MA coefficients':20s}: {[round(c, 4) for c in model.ma_coeffs]}")

    if model.top_candidates:
        lines.append("\n" + rule)
        lines.append("TOP CANDIDATES")
        lines.append(rule)
        for rank, c in enumerate(model.top_candidates, start=1):
            lines.append(f"{rank}. ARIMA{c.order}  AIC={c.aic:.2f}  BIC={c.bic:.2f}  RMSE={c.rmse:.2f}")

    stationarity = results.get('stationarity')
    if stationarity:
        lines.append("\n" + rule)
        lines.append("STATIONARITY (ADF, differenced series)")
        lines.append(rule)
        lines.append(f"Stationary: {stationarity['is_stationary']}  p-value: {stationarity['p_value']:.4f}")

    lines.append("\n" + rule)
    lines.append("FORECAST")
    lines.append(rule)
    for row in _forecast_rows(results):
        lines.append(f"{row['year']}: {row['predicted_rate']:8.2f}%")

    inflation = results.get('inflation')
    if inflation:
        lines.append("\n" + rule)
        lines.append("INFLATION ADJUSTMENT")
        lines.append(rule)
        marker = " (ARIMA predicted)" if inflation['is_predicted'] else ""
        lines.append(f"{inflation['start_year']} -> {inflation['end_year']}{marker}")
        lines.append(f"{'Amount':20s}: {inflation['amount']:,.2f}")
        lines.append(f"{'Adjusted value':20s}: {inflation['adjusted_value']:,.2f}")
        lines.append(f"{'Cumulative rate':20s}: {inflation['cumulative_rate']:.2f}%")
        lines.append(f"{'Avg annual rate':20s}: {inflation['avg_annual_rate']:.2f}%")
        lines.append(f"{'Purchasing power':20s}: {inflation['purchasing_power']:,.2f}")

    lines.append("\n" + "=" * 70)
    return "\n".join(lines)
