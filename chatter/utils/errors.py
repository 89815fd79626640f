"""
Custom error classes for the assistant graph
"""

from typing import Optional


class AgentError(Exception):
    """Base exception for agent errors"""

    def __init__(self, message: str, node: Optional[str] = None):
        super().__init__(message)
        self.node = node

    def __str__(self) -> str:
        message = super().__str__()
        return f"[{self.node}] {message}" if self.node else message


class ValidationError(AgentError):
    """Missing or invalid input artifact (e.g. absent audio file)"""
    pass


class ClassificationError(AgentError):
    """Intent classification failed or produced an unknown label"""
    pass


class TranscriptionError(AgentError):
    """Model call failed while transcribing audio"""
    pass


class AnswerGenerationError(AgentError):
    """Model call failed while generating an answer"""
    pass


class RoutingError(AgentError):
    """Graph configuration defect: no satisfiable edge or step budget exceeded"""
    pass


class ModelClientError(AgentError):
    """Provider failure or timeout during a model call"""
    pass


class StructuredOutputExhaustedError(AgentError):
    """Structured output still invalid after the fixing retry budget"""

    def __init__(
        self,
        message: str,
        last_text: str,
        validation_error: Optional[str],
        attempts: int,
        node: Optional[str] = None,
    ):
        super().__init__(message, node=node)
        self.last_text = last_text
        self.validation_error = validation_error
        self.attempts = attempts
