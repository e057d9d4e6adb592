"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for zkmember.

These exceptions provide structured error handling for membership
commitments, circuit synthesis and proof handling. A verification that
simply fails is never an exception: verifiers return False.
"""


class ZKMemberError(Exception):
    """Base exception for zkmember errors."""

    pass


class ConfigurationError(ZKMemberError):
    """Configuration error."""

    pass


class EncodingError(ZKMemberError):
    """Malformed input bytes for a hash evaluation."""

    pass


class HashInputTooLongError(EncodingError):
    """Input exceeds the configured capacity of the hash."""

    pass


class EmptyMembershipError(ZKMemberError):
    """A membership tree was requested for zero members."""

    pass


class LeafIndexError(ZKMemberError, IndexError):
    """Authentication path requested for an index beyond the padded leaf count."""

    pass


class PathFormatError(ZKMemberError):
    """Authentication path is structurally invalid for the requested tree."""

    pass


class WitnessMissingError(ZKMemberError):
    """Circuit synthesized without the private witness needed for proving."""

    pass


class ProofGenerationError(ZKMemberError):
    """Error during proof generation."""

    pass


class CircuitTooLargeError(ZKMemberError):
    """Circuit exceeds the bounds of a universal setup."""

    pass


class DeserializationError(ZKMemberError):
    """Malformed transport bytes for a root, proof or verifying key."""

    pass
