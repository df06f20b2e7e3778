class StoreError(Exception):
    """Raised when the room store cannot answer a read (upstream error or open breaker)."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
