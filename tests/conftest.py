"""Pytest configuration and fixtures."""

import pytest

from reloadrouter import EventBus, Injection, InjectionConfig
from reloadrouter.reload import CandidateRegistry


@pytest.fixture
def bus() -> EventBus:
    """Create a fresh event bus for each test."""
    return EventBus()


@pytest.fixture
def registry() -> CandidateRegistry:
    """Create an empty candidate registry."""
    return CandidateRegistry()


@pytest.fixture
def injection(bus: EventBus) -> Injection:
    """Create a router bound to the test bus."""
    router = Injection(bus=bus)
    yield router
    router.close()


@pytest.fixture
def auto_injection(bus: EventBus) -> Injection:
    """Create a router with auto-registration enabled."""
    router = Injection(InjectionConfig(auto_register=True), bus=bus)
    yield router
    router.close()
