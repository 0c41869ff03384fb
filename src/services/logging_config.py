"""
Logging Configuration for the Inheritance Tax Service.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Calculation-specific logging for audit trails
- Request ID propagation through a context variable
"""

import logging
import json
import sys
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pathlib import Path
from contextvars import ContextVar

# Context variable for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        # Add extra fields from the record
        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human readability."""
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        level = f"{color}{record.levelname:8s}{reset}"

        message = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        request_id = request_id_var.get()
        if request_id:
            message += f" | request_id={request_id}"

        if hasattr(record, 'extra_data') and record.extra_data:
            extras = ' | '.join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" | {extras}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes bound context in all log messages.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        """Merge bound context into the record's extra_data."""
        extra = kwargs.get('extra', {})

        if 'extra_data' not in extra:
            extra['extra_data'] = {}
        extra['extra_data'] = {**self.extra, **extra['extra_data']}

        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    root_logger.handlers.clear()

    formatter = JsonFormatter() if json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())  # Always JSON for files
        root_logger.addHandler(file_handler)

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), extra)


class CalculationLogger:
    """
    Specialized logger for inheritance tax calculations.

    Records one operation from start to result:
    - inputs (family structure, taxable amount, division mode)
    - each step with its duration
    - validation failures
    - the final figures
    """

    def __init__(self, operation: str):
        """
        Initialize calculation logger.

        Args:
            operation: Operation name (heirs, tax_amount, actual_division)
        """
        self.operation = operation
        self.logger = get_logger("calculation", operation=operation)
        self._start_time: Optional[float] = None
        self._step_times: Dict[str, int] = {}

    @property
    def elapsed_ms(self) -> float:
        if self._start_time is None:
            return 0.0
        return (time.perf_counter() - self._start_time) * 1000

    def start_calculation(self, **inputs) -> None:
        """Log calculation start."""
        self._start_time = time.perf_counter()
        self.logger.info(
            "Starting inheritance tax calculation",
            extra={'extra_data': inputs}
        )

    def log_step(self, step_name: str, **data) -> float:
        """
        Log a calculation step.

        Returns:
            Start time to pass to complete_step
        """
        self.logger.debug(
            f"Calculation step: {step_name}",
            extra={'extra_data': {'step': step_name, **data}}
        )
        return time.perf_counter()

    def complete_step(self, step_name: str, step_start: float, **result) -> None:
        """Log step completion with timing."""
        duration_ms = int((time.perf_counter() - step_start) * 1000)
        self._step_times[step_name] = duration_ms
        self.logger.debug(
            f"Completed step: {step_name}",
            extra={'extra_data': {'step': step_name, 'duration_ms': duration_ms, **result}}
        )

    def log_heirs(self, statutory_count: int, non_heir_count: int) -> None:
        """Log heir determination."""
        self.logger.info(
            "Heirs determined",
            extra={'extra_data': {
                'statutory_heirs': statutory_count,
                'non_heirs': non_heir_count,
            }}
        )

    def log_deduction(self, deduction_heirs_count: int, basic_deduction: int, taxable_estate: int) -> None:
        """Log basic deduction and taxable estate."""
        self.logger.info(
            "Basic deduction applied",
            extra={'extra_data': {
                'deduction_heirs_count': deduction_heirs_count,
                'basic_deduction': basic_deduction,
                'taxable_estate': taxable_estate,
            }}
        )

    def log_result(self, **figures) -> None:
        """Log final calculation result."""
        self.logger.info(
            "Calculation complete",
            extra={'extra_data': {
                **figures,
                'duration_ms': round(self.elapsed_ms, 3),
                'step_times': self._step_times,
            }}
        )

    def log_validation_failure(self, issues) -> None:
        """Log every validation error of a rejected input."""
        self.logger.warning(
            "Validation failed",
            extra={'extra_data': {
                'error_count': len(issues),
                'codes': [issue.code for issue in issues],
                'fields': [issue.field for issue in issues],
            }}
        )
