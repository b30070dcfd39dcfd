class ExplorerAPIError(Exception):
    """Base exception for failed calls to the explorer backend"""
    def __init__(self, message: str, url: str='', status_code: int=0) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code


class NotFound(ExplorerAPIError):
    """Raised when the backend answers 404 for a lookup"""
    pass


class FetchFailure(ExplorerAPIError):
    """Raised on non-success responses, undecodable bodies and network errors"""
    pass


class EmptyPayload(ExplorerAPIError):
    """Raised when a successful response carries no usable body"""
    pass


class RequestFailure(FetchFailure):
    """Raised when no usable response came back: network errors and unreadable bodies"""
    pass
