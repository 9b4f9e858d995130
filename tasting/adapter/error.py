"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class TransportError(AdapterError):
    """The comment feed rejected or failed to complete a call.

    Never retried automatically: a blind retry of a write can duplicate a
    comment.
    """

    pass


class RecordNotFoundError(TransportError):
    """The feed has no record with the requested id."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found in feed: {identifier}")
