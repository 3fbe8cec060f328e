"""Failures raised by the retrieval pipeline, one class per stage condition."""

from typing import Optional


class RetrievalError(Exception):
    """Base class for every pipeline failure"""

    stage = "unknown"


class LocationError(RetrievalError):
    stage = "location"


class InvalidLocationFormat(LocationError):
    pass


class InvalidLatitude(LocationError):
    pass


class InvalidLongitude(LocationError):
    pass


class DirectoryError(RetrievalError):
    stage = "directory"


class DirectoryFetchError(DirectoryError):
    pass


class DirectoryReadError(DirectoryError):
    pass


class NoStationFound(DirectoryError):
    pass


class BulletinError(RetrievalError):
    stage = "bulletin"


class BulletinFetchError(BulletinError):
    pass


class BulletinReadError(BulletinError):
    pass


class BulletinDecodeError(BulletinError):
    """The bulletin body could not be decoded; carries the raw body for diagnosis"""

    def __init__(self, message: str, body: str, url: Optional[str] = None):
        self.reason = message
        self.body = body
        self.url = url
        super().__init__(f"{message}\nThe response body is: {body}")
