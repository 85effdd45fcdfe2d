"""
CLI Entry Point for the ARIMA Inflation Forecasting System

Loads a historical table of annual inflation rates, selects and fits an
ARIMA model, forecasts the following years and exports the results.
Optionally adjusts an amount of money for inflation between two years,
using forecasts for years past the end of the history.

Usage:
    python forecaster.py --input data/ethiopia_inflation.csv
    python forecaster.py --input data/ethiopia_inflation.csv --steps 10 --criterion bic --output results.json
    python forecaster.py --input data/ethiopia_inflation.csv --order 2 1 1 --output stdout
    python forecaster.py --input data/ethiopia_inflation.csv --amount 1000 --start-year 2020 --end-year 2030
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import pandas as pd

from arima_forecast.arima_engine import test_stationarity
from arima_forecast.config_loader import config_to_dict, load_config, merge_config
from arima_forecast.exceptions import FileIOError
from arima_forecast.forecasting import arima_forecast
from arima_forecast.inflation import build_rate_table, calculate_inflation, summarize_model
from arima_forecast.logger_config import configure_logging, get_logger, log_exception
from arima_forecast.output_manager import export_results, format_results_summary
from arima_forecast.preprocessing import extract_series, load_data


logger = get_logger(__name__)

# ADF results on shorter differenced series are not reported
MIN_STATIONARITY_POINTS = 10


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='ARIMA Inflation Forecasting System',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Auto-selected model, 25-year forecast, CSV in output/
  python forecaster.py --input data/ethiopia_inflation.csv

  # BIC selection, 10 years, JSON output
  python forecaster.py --input data/ethiopia_inflation.csv --steps 10 --criterion bic --output results.json

  # Fixed ARIMA(2,1,1), print only
  python forecaster.py --input data/ethiopia_inflation.csv --order 2 1 1 --output stdout

  # Inflation-adjust 1000 from 2020 to 2030
  python forecaster.py --input data/ethiopia_inflation.csv --amount 1000 --start-year 2020 --end-year 2030
        """
    )

    parser.add_argument(
        '--input',
        type=str,
        required=True,
        help='Path to input file (CSV or JSON) with year and rate columns'
    )

    parser.add_argument(
        '--steps',
        type=int,
        default=None,
        help='Number of years to forecast (default: forecast.steps from config, 25)'
    )

    parser.add_argument(
        '--criterion',
        choices=['aic', 'bic'],
        default=None,
        help='Information criterion for automatic order selection'
    )

    parser.add_argument(
        '--order',
        type=int,
        nargs=3,
        metavar=('P', 'D', 'Q'),
        default=None,
        help='Fit this fixed ARIMA order instead of searching'
    )

    parser.add_argument(
        '--value-column',
        type=str,
        default='rate',
        help='Column holding the annual rates (default: rate)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output file path (.csv or .json, default: output/forecast_YYYYMMDD_HHMMSS.csv). '
             'Set to "stdout" to only print the summary'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to model configuration file (YAML or JSON). Uses defaults if not specified'
    )

    parser.add_argument('--amount', type=float, default=None, help='Amount to adjust for inflation')
    parser.add_argument('--start-year', type=int, default=None, help='Year the amount is expressed in')
    parser.add_argument('--end-year', type=int, default=None, help='Year to adjust the amount to')

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging verbosity (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    return parser


def validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate CLI arguments.

    Raises:
        FileNotFoundError: If the input or config file does not exist
        ValueError: If arguments are invalid
    """
    input_path = Path(args.input)
    if not input_path.exists():
        error_msg = f"Input file not found: {args.input}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    if input_path.suffix.lower() not in ['.csv', '.json']:
        error_msg = f"Input file must be CSV or JSON, got: {input_path.suffix}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if args.steps is not None and args.steps < 0:
        error_msg = f"Steps must be a non-negative integer, got: {args.steps}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if args.order is not None and any(v < 0 for v in args.order):
        error_msg = f"Order values must be non-negative, got: {args.order}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    inflation_args = (args.amount, args.start_year, args.end_year)
    if any(v is not None for v in inflation_args) and not all(v is not None for v in inflation_args):
        error_msg = "--amount, --start-year and --end-year must be given together"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if args.config is not None and not Path(args.config).exists():
        error_msg = f"Configuration file not found: {args.config}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    logger.info("All CLI arguments validated successfully")


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate CLI flags into a nested config override dict."""
    overrides: Dict[str, Any] = {}
    if args.steps is not None:
        overrides.setdefault('forecast', {})['steps'] = args.steps
    if args.criterion is not None:
        overrides.setdefault('arima', {})['information_criterion'] = args.criterion
    if args.order is not None:
        overrides.setdefault('arima', {}).update({'auto': False, 'order': list(args.order)})
    return overrides


def run_inflation_forecast(
    data: pd.DataFrame,
    config: Dict[str, Any],
    value_column: str = 'rate',
    amount: Optional[float] = None,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Execute the forecasting workflow.

    Pipeline:
        Rate table -> validated annual series -> ARIMA selection/fit ->
        forecast (clamped) -> ADF check on the differenced series ->
        optional inflation adjustment -> results dict

    Args:
        data (pd.DataFrame): Table with 'year' and value_column columns
        config (dict): Validated configuration (see config_loader)
        value_column (str): Column holding the rates
        amount, start_year, end_year: Optional inflation adjustment request

    Returns:
        dict: predictions (np.ndarray), years (list of int), model
            (FittedModel), model_info (display dict), stationarity (dict or
            None), inflation (dict or None), timestamp (str)
    """
    try:
        logger.info("=" * 80)
        logger.info("STARTING INFLATION FORECAST WORKFLOW")
        logger.info("=" * 80)

        arima_config = config['arima']
        estimation_config = config['estimation']
        forecast_config = config['forecast']

        history = extract_series(data, value_column=value_column)
        steps = forecast_config['steps']

        p, d, q = arima_config['order']
        result = arima_forecast(
            history.to_numpy(),
            steps,
            auto=arima_config['auto'],
            p=p,
            d=d,
            q=q,
            criterion=arima_config['information_criterion'],
            max_p=arima_config['max_p'],
            max_d=arima_config['max_d'],
            max_q=arima_config['max_q'],
            lower_bound=forecast_config['lower_bound'],
            upper_bound=forecast_config['upper_bound'],
            ar_ridge=estimation_config['ar_ridge'],
            ma_ridge=estimation_config['ma_ridge'],
            ma_iterations=estimation_config['ma_iterations'],
        )
        model = result['model']
        predictions = result['predictions']
        last_year = int(history.index[-1])

        stationarity = None
        if len(model.diff_series) >= MIN_STATIONARITY_POINTS:
            # a flat or linear history differences to a constant series, which has no ADF result
            try:
                is_stationary, p_value = test_stationarity(pd.Series(model.diff_series))
                stationarity = {'is_stationary': is_stationary, 'p_value': p_value}
            except ValueError as e:
                logger.warning(f"ADF test not reported: {str(e)}")
        else:
            logger.info(f"Skipping ADF test: {len(model.diff_series)} differenced points")

        inflation = None
        if amount is not None:
            table = build_rate_table(history, predictions)
            inflation = calculate_inflation(table, start_year, end_year, amount)

        logger.info("=" * 80)
        logger.info("INFLATION FORECAST WORKFLOW COMPLETED SUCCESSFULLY")
        logger.info("=" * 80)

        return {
            'predictions': predictions,
            'years': list(range(last_year + 1, last_year + 1 + steps)),
            'model': model,
            'model_info': summarize_model(model),
            'stationarity': stationarity,
            'inflation': inflation,
            'timestamp': datetime.now().isoformat(),
        }

    except Exception as e:
        logger.error(f"Inflation forecast workflow failed: {str(e)}")
        log_exception(logger, e)
        raise


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        int: 0 on success, 1 on any error
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        logger.info("Command-line arguments parsed")
        logger.info(f"  Input: {args.input}")
        logger.info(f"  Output: {args.output if args.output else 'default'}")
        logger.info(f"  Config: {args.config if args.config else 'default'}")

        validate_arguments(args)

        config = merge_config(load_config(args.config), build_overrides(args))
        for key, value in config_to_dict(config).items():
            logger.debug(f"  {key} = {value}")

        data = load_data(args.input)
        results = run_inflation_forecast(
            data,
            config,
            value_column=args.value_column,
            amount=args.amount,
            start_year=args.start_year,
            end_year=args.end_year,
        )
        results['input_file'] = args.input
        results['config'] = config_to_dict(config)

        print("\n" + format_results_summary(results))

        if args.output == 'stdout':
            logger.info("Output to stdout requested. Summary displayed above.")
        else:
            if args.output is not None:
                output_format = 'json' if Path(args.output).suffix.lower() == '.json' else 'csv'
            else:
                output_format = config['output']['format']

            exported_path = export_results(
                results,
                output_path=args.output,
                format=output_format,
                include_candidates=config['output']['include_candidates'],
            )
            print(f"\nResults saved to: {exported_path}")

        return 0

    except FileNotFoundError as e:
        error_msg = f"File Error: {str(e)}"
        logger.error(error_msg)
        print(f"ERROR: {error_msg}", file=sys.stderr)
        return 1

    except FileIOError as e:
        logger.error(str(e))
        print(f"ERROR: {str(e)}", file=sys.stderr)
        return 1

    # DataValidationError and ConfigurationError are ValueErrors
    except ValueError as e:
        error_msg = f"Validation Error: {str(e)}"
        logger.error(error_msg)
        print(f"ERROR: {error_msg}", file=sys.stderr)
        return 1

    except Exception as e:
        error_msg = f"Unexpected Error: {str(e)}"
        logger.error(error_msg)
        log_exception(logger, e)
        print(f"ERROR: {error_msg}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
