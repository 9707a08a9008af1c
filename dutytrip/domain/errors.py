"""Domain exception hierarchy shared by services and the API layer."""


class DutyTripError(Exception):
    """Base class for all domain errors."""


class InvalidStateTransition(DutyTripError):
    """Raised when a trip state change violates the state machine."""


class InvalidCodeError(DutyTripError):
    """No pending trip matches the presented code.

    The message is deliberately generic: callers must not learn whether
    the code exists in another state.
    """

    def __init__(self) -> None:
        super().__init__("Incorrect code")


class NotActiveError(DutyTripError):
    """Completion attempted on a trip that is not currently active."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Trip {code} is not active")


class DuplicateCodeError(DutyTripError):
    """Issuance collided with an existing trip code."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Trip code {code} already exists")


class ClockSkewError(DutyTripError):
    """End timestamp precedes the start timestamp."""


class AuthenticationError(DutyTripError):
    """Credentials did not match any account."""


class DuplicateAccountError(DutyTripError):
    """An account with this username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Account {username} already exists")
