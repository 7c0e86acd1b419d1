"""Unit tests for drivers and the service registry."""

import logging
from unittest.mock import Mock

import pytest

from src.cloud.driver import Driver, DriverLookupError, MultiDriver
from src.cloud.service import Service, ServiceRegistry


class StubDriver(Driver):

    def __init__(self, supported):
        self.supported = supported
        self.dry_run = False
        self.logger = None

    def lookup(self, action, entity):
        if (action, entity) not in self.supported:
            raise DriverLookupError(f"{action} {entity}")
        return self.supported[(action, entity)]

    def set_dry_run(self, dry_run):
        self.dry_run = dry_run

    def set_logger(self, logger):
        self.logger = logger


class StubService(Service):

    def __init__(self, name):
        super().__init__(Mock(), Mock())
        self._name = name

    @property
    def name(self):
        return self._name

    def drivers(self):
        return []


class TestMultiDriver:

    def test_first_supporting_driver_wins(self):
        """Test lookup order follows driver order."""
        first_fn, second_fn = Mock(), Mock()
        driver = MultiDriver(
            StubDriver({("create", "vpc"): first_fn}),
            StubDriver({("create", "vpc"): second_fn, ("create", "bucket"): second_fn}),
        )

        assert driver.lookup("create", "vpc") is first_fn
        assert driver.lookup("create", "bucket") is second_fn

    def test_lookup_not_found(self):
        """Test lookup fails when no driver supports the pair."""
        driver = MultiDriver(StubDriver({}))

        with pytest.raises(DriverLookupError) as exc_info:
            driver.lookup("delete", "zone")

        assert "'delete zone' not found" in str(exc_info.value)
        assert driver.supports("delete", "zone") is False

    def test_settings_propagate(self):
        """Test dry-run and logger reach every driver."""
        drivers = [StubDriver({}), StubDriver({})]
        driver = MultiDriver(*drivers)
        log = logging.getLogger("test.driver")

        driver.set_dry_run(True)
        driver.set_logger(log)

        assert all(d.dry_run for d in drivers)
        assert all(d.logger is log for d in drivers)


class TestServiceRegistry:

    def test_populate_and_get(self):
        """Test services are keyed by name."""
        registry = ServiceRegistry()
        infra = StubService("infra")

        registry.populate([infra, StubService("dns")])

        assert registry.get("infra") is infra
        assert "dns" in registry
        assert registry.names() == ["infra", "dns"]

    def test_populate_replaces_previous_entries(self):
        """Test no stale entries survive repopulation."""
        registry = ServiceRegistry()
        registry.populate([StubService("infra"), StubService("legacy")])

        registry.populate([StubService("infra")])

        assert registry.names() == ["infra"]
        assert "legacy" not in registry

    def test_duplicate_names_rejected(self):
        """Test two services cannot share a name."""
        registry = ServiceRegistry()

        with pytest.raises(ValueError):
            registry.populate([StubService("infra"), StubService("infra")])

    def test_unknown_service(self):
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError):
            ServiceRegistry()["storage"]
