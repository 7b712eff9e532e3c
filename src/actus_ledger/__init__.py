"""actus_ledger: an ACTUS debt contract state machine.

This package implements the ACTUS contract types PAM, LAM, NAM, ANN and CLM
as deterministic state machines over exact fixed-point amounts and integer
timestamps, with a binary codec for terms and state and a thin facade that
persists one contract instance.

Basic usage:
    >>> import actus_ledger
    >>> print(actus_ledger.__version__)
    0.1.0
"""

__version__ = "0.1.0"

# Import core exceptions for convenient access
from actus_ledger.exceptions import (
    ActusException,
    ConfigurationError,
    ContractValidationError,
    ConventionError,
    MathError,
    ScheduleGenerationError,
    StateTransitionError,
)
from actus_ledger.logging_config import configure_logging, get_logger

# Public API
__all__ = [
    # Version info
    "__version__",
    # Exceptions
    "ActusException",
    "ConfigurationError",
    "ContractValidationError",
    "ConventionError",
    "MathError",
    "ScheduleGenerationError",
    "StateTransitionError",
    # Logging
    "configure_logging",
    "get_logger",
]
