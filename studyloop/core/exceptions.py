"""Errors raised by the StudyLoop core."""


class StudyLoopError(Exception):
    """Base class for StudyLoop errors."""
    pass


class NoQuestionsAvailable(StudyLoopError):
    """Raised when the filtered question pool is empty.

    This is a legitimate "nothing to study" state, not a fault; callers
    should surface it rather than retry.
    """

    def __init__(self, categories: list[str] | None = None):
        self.categories = list(categories or [])
        if self.categories:
            message = (
                "No questions are available for the quiz session in categories: "
                + ", ".join(self.categories)
            )
        else:
            message = "No questions are available for the quiz session."
        super().__init__(message)
