"""Port interfaces for bulkrepo.

Reconcilers depend only on these protocols, never on the
concrete HTTP client, so tests can substitute fakes.
"""

from bulkrepo.ports.github import (
    AutolinkPort,
    GitHubPort,
    GitPort,
    OwnerPort,
    RepositoryPort,
    RulesetPort,
    SecurityPort,
)

__all__ = [
    "AutolinkPort",
    "GitHubPort",
    "GitPort",
    "OwnerPort",
    "RepositoryPort",
    "RulesetPort",
    "SecurityPort",
]
