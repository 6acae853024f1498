"""Domain exceptions.

Learn: Services raise these; they never raise HTTPException. The API
perimeter (eventkeeper.api.errors) maps each class to a status code.
Authentication-stage failures (TokenMalformed, PrincipalNotFound at
request time) are absorbed by the RequestAuthenticator and never get
this far.
"""

import uuid
from typing import Any, Optional


class EventKeeperError(Exception):
    """Base class for all domain errors. `code` is a stable machine-readable tag."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PrincipalNotFound(EventKeeperError):
    code = "principal_not_found"

    def __init__(self, username: str):
        super().__init__(f"User not found with username: {username}")
        self.username = username


class InvalidCredentials(EventKeeperError):
    """Login failure. Same message for unknown user and wrong password."""

    code = "invalid_credentials"

    def __init__(self, username: str):
        super().__init__("Invalid username or password")
        self.username = username


class DuplicateIdentity(EventKeeperError):
    """Username or email already registered."""

    code = "duplicate_identity"

    def __init__(self, field: str, value: str):
        label = "Username" if field == "username" else "Email"
        super().__init__(f"{label} already exists: {value}")
        self.field = field
        self.value = value


class Unauthenticated(EventKeeperError):
    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(EventKeeperError):
    """Authenticated principal does not own the resource."""

    code = "forbidden"

    def __init__(self, resource_id: Any, principal_id: Optional[uuid.UUID]):
        super().__init__(
            f"User {principal_id} is not authorized to access resource {resource_id}"
        )
        self.resource_id = resource_id
        self.principal_id = principal_id


class ResourceNotFound(EventKeeperError):
    code = "not_found"

    def __init__(self, resource_id: Any, kind: str = "Resource"):
        super().__init__(f"{kind} not found with id: {resource_id}")
        self.resource_id = resource_id
        self.kind = kind
