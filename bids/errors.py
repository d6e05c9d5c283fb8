# bids/errors.py
from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


HINTS = {
    ErrorKind.CONFIGURATION: "Go to Settings → AI Settings and add your API key.",
    ErrorKind.VALIDATION: "Fill in the missing text and try again.",
    ErrorKind.AUTHENTICATION: "Your API key was rejected. Check it in Settings → AI Settings.",
    ErrorKind.RATE_LIMIT: "The AI provider is rate limiting you or your quota is used up. Wait a bit or check your billing.",
    ErrorKind.UPSTREAM: "The AI provider had a problem. Try again later.",
    ErrorKind.INTERNAL: "Something went wrong on our side. Try again.",
}


class GenerationError(Exception):
    """A failed generation request, already classified for the caller."""

    def __init__(self, message, kind=ErrorKind.INTERNAL, status=500):
        self.message = message
        self.kind = kind
        self.status = status
        super().__init__(message)

    @property
    def hint(self):
        return HINTS[self.kind]

    def as_dict(self):
        return {"error": self.message, "kind": self.kind.value, "hint": self.hint}

    @classmethod
    def configuration(cls, message):
        return cls(message, ErrorKind.CONFIGURATION, 400)

    @classmethod
    def validation(cls, message):
        return cls(message, ErrorKind.VALIDATION, 400)


class CompletionError(Exception):
    """Raised by the LLM adapter when the provider call fails."""

    def __init__(self, message, status=None, provider="unknown"):
        self.message = message
        self.status = status
        self.provider = provider
        super().__init__(message)


def kind_for_status(status):
    if status in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status == 429:
        return ErrorKind.RATE_LIMIT
    return ErrorKind.UPSTREAM


class ConversationError(Exception):
    """A message would break the conversation log's rules."""


class ImmutableMessageError(Exception):
    """Messages are append-only; they cannot be edited or deleted one by one."""


class MarketplaceError(Exception):
    def __init__(self, message, status=500, details=None):
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)
