"""
Errors raised by the API Pointer Tester.

Simulated API failures and schema problems are reported as data and never
show up here.
"""


class GenerationError(Exception):
    """Test generation failed, e.g. the model returned unusable output."""

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message
