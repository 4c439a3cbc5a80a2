from typing import Optional


class ServiceError(Exception):
    """Base for failures raised by the upstream clients."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class CatalogUnavailable(ServiceError):
    """The movie catalog answered with an error, nothing, or not at all."""


class IdentityError(ServiceError):
    """The identity provider rejected or failed a request."""


class CredentialError(IdentityError):
    """A classified identity failure with a message safe to show the caller."""


class RegistrationFailed(IdentityError):
    pass


class ConfigurationError(Exception):
    """A required secret is missing; the service must not start."""


class AuthenticationRejected(Exception):
    pass
