"""Exception hierarchy for chirp."""


class ChirpError(Exception):
    """Base exception for all chirp errors."""


class ValidationError(ChirpError):
    """Input has the wrong shape (empty text, too long, bad username)."""


class InvalidAttachmentError(ValidationError):
    """An image attachment failed validation."""


class NotFoundError(ChirpError):
    """Referenced entity does not exist (or is not owned by the requester)."""


class ConflictError(ChirpError):
    """Relationship or entity already exists."""


class SelfReferenceError(ChirpError):
    """Operation targets the acting user where that is not allowed."""


class ForbiddenError(ChirpError):
    """Ownership or block rule violated."""


class AuthError(ChirpError):
    """No active user."""
