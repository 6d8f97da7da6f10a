"""
Custom Exceptions
Error taxonomy for the resolution and trust pipeline
"""


class LearnHubError(Exception):
    """Base exception for the research core"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(LearnHubError):
    """Invalid or missing configuration"""
    pass


class SourceUnavailable(LearnHubError):
    """A single source resolver failed; the request degrades instead of failing"""

    def __init__(self, message: str, source: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.source = source


class SourceExhausted(SourceUnavailable):
    """Every video tier failed or returned nothing"""

    def __init__(self, message: str, tiers_tried: list = None, **kwargs):
        super().__init__(message, source="video", tiers_tried=list(tiers_tried or []), **kwargs)
        self.tiers_tried = list(tiers_tried or [])


class ClassificationServiceUnavailable(LearnHubError):
    """AI classification service absent, slow, or returned malformed output"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class RequestBlocked(LearnHubError):
    """Terminal safety decision for a request"""

    def __init__(self, decision, message: str = None):
        super().__init__(
            message or decision.message or "Request blocked by content policy",
            {"reason": decision.reason, "category": decision.category},
        )
        self.decision = decision


class VerificationInconclusive(LearnHubError):
    """A verification check could not produce a judgment"""

    def __init__(self, message: str, check: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.check = check


class LLMError(LearnHubError):
    """LLM call failure"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider
