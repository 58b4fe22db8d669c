"""Public exceptions raised by the reference grid toolbox."""


class RefGridError(ValueError):
    """Base class for all user-facing reference grid errors."""


class ColumnNotFoundError(RefGridError, KeyError):
    """Raised when a requested column is absent from the table."""

    def __init__(self, column: str, available: list[str] | None = None) -> None:
        self.column = column
        self.available = list(available or [])
        message = f"Column '{column}' not found in table."
        if self.available:
            message += f" Available columns: {self.available}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return str(self.args[0])


class EmptyInputError(RefGridError):
    """Raised when the input table (or a required column) holds no observations."""


class InvalidParameterError(RefGridError):
    """Raised when a parameter, policy name or target specification is invalid."""
