"""
Error taxonomy for the meeting point service.

Every failure the core can surface is a MeetingPointError subclass. The class
attributes `kind` and `retryable` let the transport layer tell caller mistakes
apart from computation and provider failures without inspecting messages.
"""

from pydantic import ValidationError

BAD_INPUT = "bad_input"
COMPUTATION_FAILED = "computation_failed"
PROVIDER_UNAVAILABLE = "provider_unavailable"


class MeetingPointError(Exception):
    """Base class for all meeting point failures"""

    kind = COMPUTATION_FAILED
    retryable = False


class EmptyOriginSet(MeetingPointError):
    """Candidate generation was asked for a meeting point of zero origins"""

    kind = BAD_INPUT

    def __init__(self):
        super().__init__("At least one origin is required to generate a meeting point")


class GeocodeNotFound(MeetingPointError):
    """An address did not resolve to any coordinate"""

    kind = BAD_INPUT

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address not found: {address}")


class RouteNotFound(MeetingPointError):
    """The provider has no route between two coordinates"""

    def __init__(self, origin, destination):
        self.origin = origin
        self.destination = destination
        super().__init__(f"No route found from ({origin}) to ({destination})")


class NoViableMeetingPoint(MeetingPointError):
    """Every candidate is unreachable from at least one origin"""

    def __init__(self, candidates_evaluated: int):
        self.candidates_evaluated = candidates_evaluated
        super().__init__(
            f"No viable meeting point: all {candidates_evaluated} candidate(s) "
            "are unreachable from at least one origin"
        )


class ConfigurationError(MeetingPointError):
    """Settings are missing or invalid (e.g. no API key in the environment)"""


class ProviderError(MeetingPointError):
    """Non-transient provider rejection (bad credentials, invalid request, malformed response)"""

    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} error: {detail}")


class ProviderTransientFailure(MeetingPointError):
    """Network error, timeout, rate limit or 5xx from a provider"""

    kind = PROVIDER_UNAVAILABLE
    retryable = True

    def __init__(self, provider: str, detail: str):
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider} temporarily unavailable: {detail}")


class MeetingPointTimeout(MeetingPointError):
    """The whole search exceeded its deadline"""

    kind = PROVIDER_UNAVAILABLE
    retryable = True

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Meeting point search timed out after {seconds:g}s")


def error_payload(exc: Exception) -> dict:
    """
    Convert a failure into the dict returned by the MCP tools.

    Args:
        exc: A MeetingPointError or a pydantic ValidationError raised while
             parsing the request

    Returns:
        Dict with {error, kind, retryable}
    """
    if isinstance(exc, ValidationError):
        messages = [error["msg"] for error in exc.errors()]
        return {"error": "; ".join(messages), "kind": BAD_INPUT, "retryable": False}
    if isinstance(exc, MeetingPointError):
        payload = {"error": str(exc), "kind": exc.kind, "retryable": exc.retryable}
        if isinstance(exc, GeocodeNotFound):
            payload["address"] = exc.address
        return payload
    raise TypeError(f"Unsupported error type: {type(exc).__name__}")
