"""Exception hierarchy for the metadata core and its repository."""


class QuarryError(Exception):
    """Base class for all Quarry errors."""


class InvalidFieldState(QuarryError):
    """A field record violates a precondition the core relies on.

    Raised for fingerprints whose variant does not match the field's base type
    and for value lists that contain duplicates. These point at a sync bug, so
    they are never downgraded to empty metadata.
    """

    def __init__(self, field_id: int, reason: str):
        self.field_id = field_id
        self.reason = reason
        super().__init__(f"Field {field_id} is in an invalid state: {reason}")


class NotFoundError(QuarryError):
    entity = "Object"

    def __init__(self, key):
        self.key = key
        super().__init__(f"{self.entity} {key!r} not found.")


class DatabaseNotFound(NotFoundError):
    entity = "Database"


class TableNotFound(NotFoundError):
    entity = "Table"


class FieldNotFound(NotFoundError):
    entity = "Field"


class CardNotFound(NotFoundError):
    entity = "Card"
