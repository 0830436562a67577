"""Identity verification collaborators.

Services ask a verifier whether the caller approved the current call before
touching any record. How that approval is proven (signatures, sessions,
tokens) is the host's business.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable


class IdentityVerifier(ABC):
    """Interface for caller approval checks."""

    @abstractmethod
    def verify(self, identity: str) -> bool:
        """Return True if ``identity`` has approved the current call."""
        ...


class TrustedHostVerifier(IdentityVerifier):
    """Accept any non-empty identity; the host has already authenticated it."""

    def verify(self, identity: str) -> bool:
        return bool(identity)


class ApprovedIdentities(IdentityVerifier):
    """Accept only identities on an explicit allow list."""

    def __init__(self, identities: Iterable[str] = ()) -> None:
        self._approved = set(identities)

    def approve(self, identity: str) -> None:
        self._approved.add(identity)

    def revoke(self, identity: str) -> None:
        self._approved.discard(identity)

    def verify(self, identity: str) -> bool:
        return identity in self._approved
