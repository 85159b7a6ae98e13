class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class PipelineError(AppError):
    def __init__(self, message: str, code: str = "PIPELINE_ERROR"):
        super().__init__(message, code=code)


class DataFetchError(PipelineError):
    def __init__(self, message: str):
        super().__init__(f"Failed to load data: {message}", code="DATA_FETCH_ERROR")


class AgentNotFoundError(PipelineError):
    def __init__(self, agent_name: str):
        super().__init__(f"Agent '{agent_name}' not found", code="AGENT_NOT_FOUND")


class ExplanationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="EXPLANATION_ERROR")
