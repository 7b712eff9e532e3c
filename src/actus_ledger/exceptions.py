"""Custom exception classes for ACTUS ledger errors.

This module defines the error taxonomy shared by every layer of actus_ledger.
All exceptions inherit from ActusException, which carries a context mapping
describing where the error happened (contract id, event type, timestamp, ...).

The three kinds a caller needs to distinguish are:

- ContractValidationError: malformed or contradictory terms, configuration,
  or an unrecognized numeric code. Raised as early as possible.
- StateTransitionError: an event does not apply to the current lifecycle
  stage, ordering, or timestamp.
- MathError: fixed-point overflow, underflow, or division by zero.

All of them are recoverable by the caller; none of them leave contract state
partially updated.
"""

from typing import Any


class ActusException(Exception):
    """Base exception for all actus_ledger errors.

    Attributes:
        message: Human-readable error description
        context: Additional context information about the error
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description
            context: Optional dictionary with additional error context
                    (e.g., contract_id, event_type, timestamp)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of the exception."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ContractValidationError(ActusException):
    """Exception raised for invalid contract terms or configuration.

    This exception should be raised when:
    - Required contract terms are missing for the contract type
    - Term values are outside valid ranges
    - Term combinations are inconsistent (e.g. maturity before initial exchange)
    - A numeric enumerant code is not recognized
    - Encoded bytes cannot be decoded

    Example:
        >>> raise ContractValidationError(
        ...     "Notional principal must be positive",
        ...     context={"contract_id": "PAM-001", "notional_principal": -1000}
        ... )
    """


class ScheduleGenerationError(ContractValidationError):
    """Exception raised when a schedule cannot be constructed.

    Schedules are validated when they are built, never lazily while iterating,
    so this is always raised from a constructor.

    Example:
        >>> raise ScheduleGenerationError(
        ...     "Invalid cycle specification for interest payment",
        ...     context={"cycle": "0M", "anchor": 1000}
        ... )
    """


class ConventionError(ContractValidationError):
    """Exception raised for day count or business day convention errors.

    Example:
        >>> raise ConventionError(
        ...     "Unsupported day count convention",
        ...     context={"convention": "ACT/999"}
        ... )
    """


class StateTransitionError(ActusException):
    """Exception raised when an event cannot be applied to the contract state.

    The context always contains an ``invariant`` entry naming the rule that
    was violated (for example ``"status_date_monotonic"`` or
    ``"event_requires_active_contract"``).

    Example:
        >>> raise StateTransitionError(
        ...     "Event timestamp precedes status date",
        ...     "status_date_monotonic",
        ...     context={"timestamp": 900},
        ... )
    """

    def __init__(
        self,
        message: str,
        invariant: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description
            invariant: Name of the violated invariant
            context: Optional dictionary with additional error context
        """
        super().__init__(message, {"invariant": invariant, **(context or {})})
        self.invariant = invariant


class MathError(ActusException):
    """Exception raised for fixed-point arithmetic failures.

    This exception should be raised when:
    - A result does not fit the signed 128-bit Units range
    - A division by zero occurs during accrual or settlement

    Example:
        >>> raise MathError(
        ...     "Units overflow",
        ...     context={"operation": "add", "raw": 2**127}
        ... )
    """


class ConfigurationError(ActusException):
    """Exception raised for package configuration errors (e.g. logging setup).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid logging configuration",
        ...     context={"log_level": "INVALID", "valid_levels": ["DEBUG", "INFO"]}
        ... )
    """
