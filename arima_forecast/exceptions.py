"""
Custom Exception Classes for the ARIMA Inflation Forecasting Engine

The numerical core never raises for degenerate data (it reports infinite
diagnostics instead). These exceptions cover the boundaries around it:
malformed input files, invalid configuration and failed exports.
"""


class ForecastError(Exception):
    """
    Base class for pipeline errors.

    Subclasses set `label` and list their context attributes in `details`;
    __str__ renders the message followed by one indented line per attribute
    that is set.
    """

    label = "Forecast Error"
    details = ()

    def __init__(self, error_message, **context):
        super().__init__(error_message)
        self.error_message = error_message
        for name in self.details:
            setattr(self, name, context.get(name))

    def _heading(self):
        return f"{self.label}: {self.error_message}"

    def __str__(self):
        msg = self._heading()
        for name in self.details:
            value = getattr(self, name)
            if value is not None and value != "":
                msg += f"\n  {name.replace('_', ' ').capitalize()}: {value}"
        return msg


class DataValidationError(ForecastError, ValueError):
    """
    Raised when an input table or rate column cannot be used.

    Triggered by:
    - Missing year/rate columns
    - Non-numeric or missing rates
    - Duplicate years or gaps in the annual index

    Example: "Annual index has gaps: missing years [1984, 1985]"
    """

    label = "Data Validation Error"
    details = ("file_path", "data_shape")

    def __init__(self, error_message, file_path=None, data_shape=None):
        super().__init__(error_message, file_path=file_path, data_shape=data_shape)


class FileIOError(ForecastError):
    """
    Raised when forecast results cannot be written.

    Example: "Cannot write output/forecast.csv: [Errno 13] Permission denied"
    """

    label = "File I/O Error"
    details = ("file_path",)

    def __init__(self, error_message, file_path=None, operation=None):
        super().__init__(error_message, file_path=file_path)
        self.operation = operation

    def _heading(self):
        return f"{self.label} ({self.operation or 'io'}): {self.error_message}"


class ConfigurationError(ForecastError, ValueError):
    """
    Raised when a configuration value is out of range or of the wrong type.

    Triggered by:
    - Order bounds that are negative or not integers
    - Unknown information criterion
    - Forecast clamp bounds in the wrong order

    Example: "ARIMA information_criterion must be 'aic' or 'bic', got hqic"
    """

    label = "Configuration Error"
    details = ("parameter_name", "invalid_value", "allowed_range")

    def __init__(self, error_message, parameter_name=None, invalid_value=None, allowed_range=None):
        """
        Args:
            error_message (str): Description of configuration error
            parameter_name (str, optional): Dotted name of the invalid parameter
            invalid_value (any, optional): Value that failed validation
            allowed_range (str/tuple, optional): Valid range or allowed values
        """
        super().__init__(
            error_message,
            parameter_name=parameter_name,
            invalid_value=invalid_value,
            allowed_range=allowed_range,
        )
