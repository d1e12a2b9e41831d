"""Storage layer exceptions.

Missing records are not errors: lookups return ``None`` and deletes return
``False``. These exceptions cover the failures a caller cannot prevent.
"""


class StorageError(Exception):
    """The underlying store could not complete the operation.

    Raised for connection failures and any other driver error. The HTTP layer
    maps it to a 500 response without exposing the message.
    """


class ConflictError(StorageError):
    """A unique field (product code, order number, username) already exists."""

    def __init__(self, message: str, entity: str = "", field: str = "") -> None:
        super().__init__(message)
        self.entity = entity
        self.field = field
