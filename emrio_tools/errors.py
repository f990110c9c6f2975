"""Error types raised by the EMRIO robustness tools."""


class EMRIOError(Exception):
    """Base class for all errors raised by the package."""


class ConfigurationError(EMRIOError, ValueError):
    """Raised when inputs or parameters are invalid before any computation starts.

    Examples are a base sector without a firm share, a share outside [0, 1], a
    reallocation rate outside [0, 1] or a mis-shaped base table.
    """


class NoCandidatesError(ConfigurationError):
    """Raised when no Firm->Firm pair is eligible for reallocation."""


class AccountingIdentityError(EMRIOError):
    """Raised when an accounting identity of the IO system does not hold.

    This always signals a modelling or input error and is never recovered from.
    """


class NegativeTransactionError(EMRIOError):
    """Raised when a transaction matrix with negative cells is rejected."""
