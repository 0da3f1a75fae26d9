"""Error taxonomy for the raffle session.

Every error here is recoverable: the controller writes the message into the
session's single error slot and the HTTP layer maps ``status_code`` to the
response.
"""


class RaffleError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StorageError(RaffleError):
    """Fetching or inserting words failed in the storage backend."""
    status_code = 502


class ExhaustedError(RaffleError):
    """The draw pool is empty; the operator has to reset the raffle."""
    status_code = 409


class ValidationError(RaffleError):
    """Rejected operator input (empty participant name, empty word)."""
    status_code = 400


class InvalidStateError(RaffleError):
    """Action requested in a state that defines no transition for it."""
    status_code = 409


class UnknownParticipantError(RaffleError):
    status_code = 404
