"""
Error taxonomy for hierarchy loading and queries.
"""


class StarSystemError(Exception):
    """Base class for star system errors."""


class MissingRootError(StarSystemError):
    """No root object could be determined for the hierarchy."""


class ObjectNotFoundError(StarSystemError, LookupError):
    """A query referenced an id that is not in the loaded system."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"Object not found: {object_id}")


class MalformedInputError(StarSystemError, ValueError):
    """The raw feed is not a mapping of id to record, or could not be parsed."""
