"""Classified failures of the recovery pipeline."""


class PipelineError(Exception):
    """Base class for fatal pipeline failures."""


class UnrecoverableSyntaxError(PipelineError):
    def __init__(self, last_message: str, attempts: int) -> None:
        self.last_message = last_message
        self.attempts = attempts
        super().__init__(f"JSON could not be repaired after {attempts} attempt(s): {last_message}")


class MissingFieldError(PipelineError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Top-level field '{name}' is missing or is not an array.")


class InvalidNodeError(PipelineError):
    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Node #{index} is invalid: {reason}")


class InvalidEdgeError(PipelineError):
    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Edge #{index} is invalid: {reason}")
