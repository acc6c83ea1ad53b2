"""Error types raised by the listing API client and the form flow."""


class RentFinderError(Exception):
    """Base exception for RentFinder."""
    pass


class ApiError(RentFinderError):
    """The listing API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UploadError(ApiError):
    """An image could not be pushed to blob storage."""
    pass
