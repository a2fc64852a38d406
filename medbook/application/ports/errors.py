class DuplicateKeyError(Exception):
    """A write collided with a unique index in the store."""
