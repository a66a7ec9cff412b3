from typing import List, Literal


class GreenRefactorError(Exception):
    """Base class for every error surfaced to the user."""


class ModelConfigError(GreenRefactorError):
    pass


class PromptNotFound(GreenRefactorError):
    pass


PreconditionKind = Literal["no_document", "empty_selection", "missing_api_key", "busy"]


class PreconditionError(GreenRefactorError):
    """
    Raised before any network call when the analysis cannot start.
    """

    def __init__(self, kind: PreconditionKind, message: str):
        super().__init__(message)
        self.kind = kind


class BackendError(GreenRefactorError):
    """
    Transport, auth or empty-response failure of the LLM backend.
    """


class MalformedResponseError(GreenRefactorError):
    """
    The sanitized response is not valid JSON.
    """

    def __init__(self, message: str, sanitized_text: str):
        super().__init__(message)
        self.sanitized_text = sanitized_text


class ValidationError(GreenRefactorError):
    """
    The JSON parsed but one or more required fields are absent.
    """

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Invalid analysis format. Missing fields: "
            + ", ".join(self.missing_fields)
        )


class EditApplyError(GreenRefactorError):
    """
    The optimized code could not be committed to the document.
    """
