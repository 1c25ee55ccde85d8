"""
Typed exception hierarchy for the payroll kernel.

Every error carries a machine-readable ``code`` and structured attributes
so callers catch by type and report by code, never by message text.

    PayrollKernelError (base)
    |
    +-- PeriodError
    |   +-- UnsupportedFrequencyError
    |
    +-- ConfigurationError
    |   +-- InvalidConfigurationError
    |
    +-- BatchError
        +-- DuplicateBatchItemError

Business-rule violations (an employee clocking in outside the geofence,
an hourly rate that looks too high) are NOT exceptions.  They are reported
through result objects (``AntiSpoofingResult``) or advisory error lists
(``validate_input``, ``validate_period``).  Exceptions are reserved for
caller contract violations.

Value objects raise plain ``ValueError`` from ``__post_init__`` when a
constructor would produce an invalid state.
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Period-related exceptions


class PeriodError(PayrollKernelError):
    """Base exception for payroll period errors."""

    code: str = "PERIOD_ERROR"


class UnsupportedFrequencyError(PeriodError):
    """The scheduler was asked for something the frequency cannot do."""

    code: str = "UNSUPPORTED_FREQUENCY"

    def __init__(self, frequency: str, operation: str):
        self.frequency = frequency
        self.operation = operation
        super().__init__(
            f"Unsupported payroll frequency for {operation}: {frequency}"
        )


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidConfigurationError(ConfigurationError):
    """A configuration source could not be turned into an EngineConfig."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")


# Batch exceptions


class BatchError(PayrollKernelError):
    """Base exception for batch driver errors."""

    code: str = "BATCH_ERROR"


class DuplicateBatchItemError(BatchError):
    """Two items in one batch share the same business key."""

    code: str = "DUPLICATE_BATCH_ITEM"

    def __init__(self, item_key: str):
        self.item_key = item_key
        super().__init__(f"Duplicate batch item key: {item_key}")
