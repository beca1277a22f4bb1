"""
Error taxonomy for the spinboard client.

Every failure the client can observe while talking to the scoring authority
is raised as one of these. Only login failures reach the user; the other
call sites log and drop them (see `spinboard.client`).
"""


class SpinboardError(Exception):
    """Base class for all client-side failures."""


class AuthError(SpinboardError):
    """
    Raised when a credential is absent, invalid or expired, or when the
    authority rejects a login.
    """


class NetworkError(SpinboardError):
    """
    Raised when the scoring service cannot be reached, times out, or
    answers with a server-side (5xx) failure.
    """


class ProtocolError(SpinboardError):
    """
    Raised when a response does not have the expected shape: non-JSON
    bodies, missing keys, invalid leaderboard entries, duplicate ranks.
    """

    def __init__(self, message, payload=None):
        self.payload = payload
        super().__init__(message)
