class DataLayerException(Exception):
    pass


class DuplicateObjectError(DataLayerException):
    """A write would break a unique key (e.g. a second user with the same email)."""
