"""Domain-specific exceptions raised by the lookup layer."""


class SearchError(Exception):
    pass


class CollectionEmpty(SearchError):
    """The provider collection holds no documents at all."""


class SearchTimeout(SearchError):
    """The remote lookup did not settle within its time budget."""


class TransientFetchError(SearchError):
    """Any other failure while reading the remote provider collection."""
