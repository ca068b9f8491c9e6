"""Tests that the concrete client satisfies the port protocols."""

import inspect

import pytest

from bulkrepo.github import GitHubClient
from bulkrepo.ports import (
    AutolinkPort,
    GitPort,
    OwnerPort,
    RepositoryPort,
    RulesetPort,
    SecurityPort,
)

PORTS = [RepositoryPort, SecurityPort, GitPort, RulesetPort, AutolinkPort, OwnerPort]


def protocol_methods(port: type) -> list[str]:
    return [
        name
        for name, member in vars(port).items()
        if inspect.iscoroutinefunction(member) and not name.startswith("_")
    ]


@pytest.mark.parametrize("port", PORTS, ids=lambda p: p.__name__)
def test_client_implements_every_method(port: type) -> None:
    """Each protocol coroutine exists on GitHubClient with compatible parameters."""
    methods = protocol_methods(port)
    assert methods

    for name in methods:
        implementation = getattr(GitHubClient, name, None)
        assert implementation is not None, f"GitHubClient.{name} missing"
        assert inspect.iscoroutinefunction(implementation)

        expected = list(inspect.signature(getattr(port, name)).parameters)
        actual = list(inspect.signature(implementation).parameters)
        assert actual[: len(expected)] == expected, name
