"""
Directory - read-only forwarder over the domain directory's read surface.
"""

from dataclasses import dataclass

from .ports import DomainReader


@dataclass
class Directory:
    """Forwards lookups; holds no state and requires no role."""

    reader: DomainReader

    def read_owner(self, domain_name: str) -> str:
        return self.reader.read_owner(domain_name)

    def read_expiry(self, domain_name: str) -> int:
        return self.reader.read_expiry(domain_name)

    def read_content_hash(self, domain_name: str) -> str:
        return self.reader.read_content_hash(domain_name)
