class CurveSaleError(Exception):
    """Base exception for all pool ledger errors."""
    pass


class CapacityError(CurveSaleError):
    """Raised when a trade would sell past the pool's cap, or the pool is past its end time (mint/burn limited)."""
    pass


class UnauthorizedError(CurveSaleError):
    """Raised when the caller is not the pool owner or not the platform treasury."""
    pass


class InvalidArgumentError(CurveSaleError, ValueError):
    """Raised for malformed arguments, e.g. handing ownership to the null address."""
    pass


class CurveNotFoundError(InvalidArgumentError):
    """Raised when the registry has no pricing curve under the requested type name."""
    pass


class InsufficientValueError(CurveSaleError):
    """Raised when attached native value is below the stated amount, or custody cannot cover a payout."""
    pass


class TransferFailedError(CurveSaleError):
    """Raised when the underlying value movement did not complete."""
    pass


class PoolNotFoundError(CurveSaleError):
    """Raised for a pool index that was never created."""
    pass


class PoolEndedError(CurveSaleError):
    """Raised when operating on a pool that has already been ended."""
    pass


class PoolNotEndedError(CurveSaleError):
    """Raised when ending a pool whose end time is unset or has not yet passed."""
    pass


class ReentrancyError(CurveSaleError):
    """Raised when a transfer callback tries to re-enter a mutating ledger call."""
    pass


class LedgerInvariantError(CurveSaleError):
    """
    Fatal: the curve quote disagrees with historical accounting (a sell would drive
    token_sold or raising_amount negative). Never a recoverable user error.
    """
    pass
