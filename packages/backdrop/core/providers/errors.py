"""Generation provider errors."""


class GenerationError(RuntimeError):
    """Base class for image generation failures."""

    pass


class ProviderAuthError(GenerationError):
    """OAuth token could not be obtained for the generation service."""

    pass


class GenerationSubmitError(GenerationError):
    """The generation service rejected or failed the submit request."""

    pass


class GenerationJobFailedError(GenerationError):
    """An async generation job reached a failed or cancelled state."""

    def __init__(self, message: str, *, job_id: str, status: str) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.status = status


class NoImageInResponseError(GenerationError):
    """A generation response contained no recognizable image reference."""

    pass


class GenerationTimeoutError(GenerationError):
    """An async generation job did not finish within the polling ceiling."""

    def __init__(self, message: str, *, job_id: str, polls: int, ceiling_s: float) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.polls = polls
        self.ceiling_s = ceiling_s
