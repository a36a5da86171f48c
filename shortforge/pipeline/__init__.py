# Pipeline package - staged short generation (script -> prompts -> media)
# The orchestrator lives in shortforge.pipeline.orchestrator; it is not imported
# here because the narrative package depends on the error types below.

from shortforge.pipeline.base import (
    PipelineError,
    PresetValidationError,
    JobNotFoundError,
    JobConflictError,
    StageError,
    ExternalServiceError,
    NonRetryableError,
    RetryableError,
    ResponseParseError,
    with_retry,
)

__all__ = [
    "PipelineError",
    "PresetValidationError",
    "JobNotFoundError",
    "JobConflictError",
    "StageError",
    "ExternalServiceError",
    "NonRetryableError",
    "RetryableError",
    "ResponseParseError",
    "with_retry",
]
