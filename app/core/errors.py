"""Domain exceptions raised by services and mapped to HTTP statuses by routers."""


class DuplicateEmailError(Exception):
    def __init__(self, message: str = "User already exists with this email"):
        super().__init__(message)


class InvalidCredentialsError(Exception):
    # Same message for unknown email and wrong password
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class TokenError(Exception):
    """Base for bearer token failures."""


class TokenExpiredError(TokenError):
    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class TokenInvalidError(TokenError):
    def __init__(self, message: str = "Token is not valid"):
        super().__init__(message)


class ProviderError(Exception):
    """A live provider call failed or returned something unusable."""


class ProviderUnsupported(ProviderError):
    """The provider does not implement the requested operation."""
