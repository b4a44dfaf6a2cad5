"""Exceptions surfaced to clients by the handlers registered in ``main``."""


class ConfigurationError(RuntimeError):
    """Required connection settings are missing."""


class NotFoundError(Exception):
    """The primary entity of a request does not exist."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found")


class UpstreamQueryError(Exception):
    """A query for data the response cannot do without failed."""

    def __init__(self, query: str, cause: Exception):
        self.query = query
        self.cause = cause
        # SQLAlchemy wraps the driver error; the driver text is what the store said
        super().__init__(str(getattr(cause, "orig", None) or cause))

    @property
    def details(self) -> dict:
        return {
            "query": self.query,
            "type": type(self.cause).__name__,
            "message": str(self),
        }
