"""Shared error taxonomy for the availability and conflict engine"""

from typing import Optional


class MediaTrackError(Exception):
    """Base class for all engine errors"""

    pass


class FeedFetchError(MediaTrackError):
    """Raised when an iCal feed cannot be retrieved (network error or non-2xx status)"""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"iCal fetch failed for {url}: {reason}")


class FeedParseError(MediaTrackError):
    """Raised for a malformed DTSTART/DTEND value inside a VEVENT block"""

    pass


class InvalidGapRequest(MediaTrackError):
    """Raised when a gap search asks for fewer than the minimum stay"""

    pass


class TokenInvalid(MediaTrackError):
    """Unsubscribe token is malformed or its signature does not match"""

    pass


class TokenExpired(MediaTrackError):
    """Unsubscribe token signature is valid but the token is past its expiry"""

    pass


class NotificationError(MediaTrackError):
    """Raised when a conflict email could not be delivered"""

    pass


class PersistenceConflict(MediaTrackError):
    """Raised when the updated conflict fingerprint could not be written"""

    def __init__(self, task_id: str, reason: str):
        self.task_id = task_id
        super().__init__(f"Failed to persist conflict state for task {task_id}: {reason}")
