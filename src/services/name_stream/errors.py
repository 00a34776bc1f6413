from typing import List, Optional

from services.name_stream.models import BusinessName


class NameStreamError(Exception):
    """Base class for failures that cross the name streaming boundary."""


class ProviderError(NameStreamError):
    """The completion provider answered with an error instead of a stream."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransportFailure(NameStreamError):
    """The upstream chunk source failed before end-of-stream.

    ``records`` holds everything emitted before the failure; those records
    were already delivered to the consumer and remain valid.
    """

    def __init__(self, message: str, records: Optional[List[BusinessName]] = None):
        super().__init__(message)
        self.records = list(records or [])
