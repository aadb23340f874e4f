"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)

This separation ensures bugs are found quickly while the system
remains robust to expected failures. Per-asset business failures are
caught by the services and recorded on the asset; contract violations
and configuration errors propagate.

Exports:
    ContractViolationError: Programming bug (wrong types, bad identifiers)
    BusinessLogicError: Base for expected runtime failures
    DatabaseError: Asset store failures
    EncodingServiceError: Transcoding service failures
    RateLimitError: Transcoding service throttled the request
    SubmissionRejectedError: Transcoding service refused the job
    MalformedResponseError: Transcoding service answered with an unusable payload
    ConfigurationError: Fatal misconfiguration
"""


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Empty or malformed identifiers handed to the output resolver
    - Enum type mismatches
    - Interface contract violations

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.

    Subclasses represent specific categories of business failures.
    """
    pass


class DatabaseError(BusinessLogicError):
    """
    Asset store operation failures.

    Examples:
        - Connection lost
        - Query timeout
        - Transaction rollback
    """
    pass


class EncodingServiceError(BusinessLogicError):
    """
    Transcoding service call failed.

    Covers network failures, request timeouts and service-side errors
    that are not one of the more specific subclasses below.
    """
    pass


class RateLimitError(EncodingServiceError):
    """
    Transcoding service rejected the call because of throttling.

    Kept distinguishable from other service errors so callers can back
    off and move on instead of treating the asset as broken.
    """
    pass


class SubmissionRejectedError(EncodingServiceError):
    """
    Transcoding service refused to create the job.

    Examples:
        - Invalid input location
        - IAM role not allowed to read the source
        - Invalid job settings
    """
    pass


class MalformedResponseError(EncodingServiceError):
    """
    Transcoding service answered without the fields we need.

    Examples:
        - create_job response without a job id
        - get_job response with an unknown status value
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - Missing required environment variables
        - Non-numeric tuning values
        - Missing MediaConvert role ARN
    """
    pass
