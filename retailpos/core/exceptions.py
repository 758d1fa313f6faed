"""
Domain errors raised by services and translated to HTTP responses by the API.
"""


class NotFoundError(LookupError):
    """A requested record does not exist."""

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class BusinessRuleError(ValueError):
    """A request conflicts with a store rule (stock, loyalty, ownership)."""
