class InvalidArgument(Exception):
    """Raised when scheduling input is malformed (bad day, duration, status or slot config)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
