"""
Naming helpers for CloudFormation logical ids and generated bucket names.
"""

import random
import re
import string

from gluestage.errors import ConfigError


_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")

SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
MIN_SUFFIX_LENGTH = 8


def to_resource_name(identifier: str) -> str:
    """
    Convert a job or trigger name into a CloudFormation logical id.

    The identifier is split on any non-alphanumeric character and each word
    gets its first character upper-cased; the rest of the word is kept as is,
    so an already converted name maps to itself.

        "etl1"         -> "Etl1"
        "my-etl_job"   -> "MyEtlJob"
        "MyEtlJob"     -> "MyEtlJob"

    Raises:
        ConfigError: If the identifier has no alphanumeric characters
    """
    words = [w for w in _WORD_SPLIT.split(str(identifier)) if w]
    if not words:
        raise ConfigError(f"Cannot derive a resource name from {identifier!r}")
    return "".join(w[0].upper() + w[1:] for w in words)


def random_suffix(length: int = MIN_SUFFIX_LENGTH) -> str:
    """Random lowercase alphanumeric suffix (safe inside S3 bucket names)."""
    if length < MIN_SUFFIX_LENGTH:
        raise ValueError(f"Suffix length must be at least {MIN_SUFFIX_LENGTH}, got {length}")
    return "".join(random.choice(SUFFIX_ALPHABET) for _ in range(length))
