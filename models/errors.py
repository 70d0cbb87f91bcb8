"""
Exceptions raised by the external integrations.
"""


class SpotlightError(Exception):
    """Base class for integration failures shown to the user."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class ProfileFetchError(SpotlightError):
    """The profile service failed or was unreachable."""

    def __init__(self, message: str, user_message: str = None, status_code: int = None):
        super().__init__(message, user_message)
        self.status_code = status_code


class ProfileNotFoundError(ProfileFetchError):
    """The requested profile does not exist or is private."""


class ProfileSchemaError(SpotlightError):
    """The profile service returned data in an unexpected shape."""


class AIServiceError(SpotlightError):
    """Transport or API failure talking to the chat-completion service."""

    def __init__(self, message: str, user_message: str = None, status_code: int = None):
        super().__init__(message, user_message)
        self.status_code = status_code


class AIResponseFormatError(SpotlightError):
    """The model's reply was not a JSON object."""


class AISchemaError(SpotlightError):
    """The model's JSON did not match the declared schema."""

    def __init__(self, message: str, issues=None, user_message: str = None):
        super().__init__(message, user_message)
        self.issues = list(issues or [])


class MetaInterestError(SpotlightError):
    """An ad-interest search request failed."""
