"""Error taxonomy shared by the services and the HTTP layer.

Every error carries an HTTP status code and a message that is safe to show
to a client. The FastAPI handlers in ``kindred.main`` render them as
``{"message": ...}``.
"""

from fastapi import status


class KindredError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Something went wrong.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(KindredError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'


class SelfDeletion(KindredError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'You cannot delete your own account.'


class Unauthenticated(KindredError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Not authenticated.'


class InvalidCredentials(KindredError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Invalid email or password. Please try again.'


class Forbidden(KindredError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Admin access required.'


class NotFound(KindredError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class DuplicateEmail(KindredError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str) -> None:
        super().__init__(f'An account for {email} already exists.')


class DuplicateParticipant(KindredError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'A participant record with the same participant, guardian, and contact email already exists.'


class Unexpected(KindredError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
