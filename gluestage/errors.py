"""
Error classes for gluestage.

Error handling contract:
- ConfigError: the service file cannot be turned into a deployable template
  (missing fields, no upload prefix, incomplete support file). Fail fast.
- CompileError: a resource fragment cannot be built from an otherwise valid entity.
- Transport errors from the blob store are NOT wrapped; they propagate unchanged.

Every error aborts the run. Nothing is retried and nothing already uploaded
is rolled back.
"""


class GluestageError(Exception):
    """Base exception for gluestage."""
    pass


class ConfigError(GluestageError):
    """
    Configuration error - do not retry.

    Examples:
    - Job without scriptPath or role
    - Neither scriptS3LocationPrefix nor s3Prefix set
    - SupportFiles entry missing one of its four fields
    - Unknown trigger type
    """
    pass


class CompileError(GluestageError):
    """
    Raised when a resource fragment cannot be compiled.

    Examples:
    - Compiling a job whose script has not been staged yet
    """
    pass
