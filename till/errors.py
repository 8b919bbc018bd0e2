class TillError(Exception):
    """Base for every error the core raises. All of them are recoverable by the caller."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidLineItem(TillError):
    pass


class InvalidPayment(TillError):
    pass


class NotFound(TillError):
    pass


class TransactionFrozen(TillError):
    # Raised for any mutation of a transaction that has been completed.
    pass
