"""
Exception taxonomy for the MockPrep core.
"""


class MockPrepError(Exception):
    """Base class for all core errors."""
    pass


class StateTransitionError(MockPrepError):
    """Raised when an operation is not valid in the session's current state."""
    pass


class InsufficientQuestionPool(MockPrepError):
    """Raised when a session is started with fewer than the required distinct questions."""

    def __init__(self, available: int, required: int):
        super().__init__(
            f"Question pool has {available} distinct questions, {required} required"
        )
        self.available = available
        self.required = required


class EmptyAnswer(MockPrepError, ValueError):
    """Raised when a text answer is blank after trimming."""
    pass


class DeviceUnavailable(MockPrepError):
    """Raised when the recording device or permission cannot be acquired."""
    pass


class AIServiceError(MockPrepError):
    """A transient fault of the inference service. Retried."""
    pass


class MalformedResponse(MockPrepError):
    """A structured response failed to parse against its schema. Not retried."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"{operation}: malformed response ({detail})")
        self.operation = operation
        self.detail = detail


class InvocationExhausted(MockPrepError):
    """Every retry attempt failed; carries the last observed error."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"All {attempts} attempts failed: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class SynthesisFailed(MockPrepError):
    """Speech synthesis could not produce audio."""
    pass


class AIRequestRejected(MockPrepError):
    """The inference service refused the request itself (bad key, bad payload). Not retried."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Request rejected with HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
