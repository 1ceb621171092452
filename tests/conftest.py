"""Shared fixtures: graphs, mock providers and orchestrators."""

import copy

import pytest

from archflow.generation.orchestrator import Orchestrator
from tests.helpers import TWO_SERVICE_GRAPH, make_provider


@pytest.fixture
def two_service_graph():
    """Fresh copy of the API → DB graph (tests may mutate it)."""
    return copy.deepcopy(TWO_SERVICE_GRAPH)


@pytest.fixture
def provider(two_service_graph):
    """Mock provider that always answers with the two-service graph."""
    return make_provider(two_service_graph)


@pytest.fixture
def orchestrator(provider):
    """Lenient orchestrator wired to the mock provider."""
    return Orchestrator(provider=provider, strict_output=False, strict_graph=False)
