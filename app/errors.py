"""
Error kinds raised below the HTTP layer.

Handlers catch all of these and answer with the operation's fixed 500 body;
the kind only shows up in the logs.
"""


class ContactStoreError(Exception):
    kind = "infra"


class ConstraintViolation(ContactStoreError):
    """Unique or NOT NULL constraint rejected the write."""
    kind = "conflict"


class DatastoreUnavailable(ContactStoreError):
    kind = "infra"


class InvalidPayload(ContactStoreError):
    """Body could not be parsed/validated, or the id is not an integer."""
    kind = "validation"
