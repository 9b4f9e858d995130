"""Application layer errors."""


class ApplicationError(Exception):
    """Base application error."""

    pass


class SubscriptionDegradedError(ApplicationError):
    """The session's subscription failed; its data can no longer be trusted.

    The original subscription error is available as ``__cause__`` and as
    ``cause``.
    """

    def __init__(self, recipe_id: str, cause: BaseException | None = None):
        self.recipe_id = recipe_id
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Discussion for recipe {recipe_id} is degraded{detail}")


class SessionClosedError(ApplicationError):
    """The session was closed and its index discarded."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Discussion session for recipe {recipe_id} is closed")
