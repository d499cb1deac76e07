"""
Name policy - normalization and validation of domain and subdomain names.
"""

from .exceptions import InvalidDomainName


def normalize_name(name: str) -> str:
    """
    Normalize a name for consistent storage, lookup and hashing.

    Applies: strip whitespace + lowercase
    """
    return name.strip().lower()


def validate_domain_name(name: str, suffix: str) -> str:
    """
    Normalize and validate a top-level domain registration name.

    Raises:
        InvalidDomainName: If the name lacks the suffix, is not a single
            non-empty label before it, or contains whitespace
    """
    normalized = normalize_name(name)
    suffix = normalize_name(suffix)
    if not normalized.endswith(suffix) or len(normalized) == len(suffix):
        raise InvalidDomainName(normalized)
    # Dotted labels are reserved for delegated subdomains
    label = normalized[: -len(suffix)]
    if "." in label or any(ch.isspace() for ch in normalized):
        raise InvalidDomainName(normalized)
    return normalized


def validate_subdomain_name(subdomain: str, parent: str) -> str:
    """
    Normalize and validate a child name, which must sit directly under parent.

    Raises:
        InvalidDomainName: If subdomain is not "<label>.<parent>"
    """
    normalized = normalize_name(subdomain)
    label, dot, rest = normalized.partition(".")
    if not label or not dot or rest != parent or any(ch.isspace() for ch in label):
        raise InvalidDomainName(normalized)
    return normalized
