"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """Required credentials or endpoints are not configured"""

    pass


class LLMAPIError(DomainException):
    """LLM provider returned an error or is unavailable"""

    pass


class ExternalServiceError(DomainException):
    """Edge function or third-party API call failed"""

    pass
