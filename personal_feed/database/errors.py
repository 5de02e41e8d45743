"""
Store errors.
"""


class StoreError(Exception):
    """Base class for local store failures."""


class StoreValidationError(StoreError):
    """A write was rejected because a required field is missing or invalid."""


class ItemNotFoundError(StoreError):
    """No item exists for the given url."""

    def __init__(self, url: str):
        super().__init__(f'No item found for url "{url}"')
        self.url = url


class SourceNotFoundError(StoreError):
    """No source exists for the given id."""

    def __init__(self, source_id: str):
        super().__init__(f'No source found for id "{source_id}"')
        self.source_id = source_id
