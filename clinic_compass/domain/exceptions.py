"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UnknownAnalysisKindError(DomainException):
    """Requested analysis tab is not one of the supported kinds"""

    pass


class NarrativeNotSupportedError(DomainException):
    """Analysis kind has no narrative prompt (simulator, benchmark)"""

    pass


class NarrativeServiceError(DomainException):
    """LLM completion endpoint returned an error, timed out, or produced no text"""

    pass


class ProfileNotFoundError(DomainException):
    """No clinic profile was supplied and none is stored"""

    pass
