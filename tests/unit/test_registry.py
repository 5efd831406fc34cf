"""
Tests for the explicit driver registry.
"""
import threading

import pytest
from spannerdb.driver import SpannerDriver
from spannerdb.exceptions import ConfigurationError
from spannerdb.registry import DriverRegistry, build_registry


def test_build_registry_default():
    registry = build_registry()

    assert registry.names() == ['spanner']
    assert 'spanner' in registry
    assert isinstance(registry.get('spanner'), SpannerDriver)


def test_build_registry_twice_is_idempotent():
    """Rebuilding with equal drivers changes nothing"""
    registry = build_registry()
    build_registry(registry=registry)
    build_registry(registry=registry)

    assert len(registry) == 1


def test_register_same_driver_again():
    driver = SpannerDriver()
    registry = DriverRegistry()
    registry.register('spanner', driver)
    registry.register('spanner', driver)

    assert registry.get('spanner') is driver


def test_register_conflicting_driver():
    """A taken name cannot be silently replaced"""
    registry = DriverRegistry()
    first = SpannerDriver()
    registry.register('spanner', first)

    with pytest.raises(ConfigurationError, match='already registered'):
        registry.register('spanner', SpannerDriver(session_factory=lambda options: None))
    assert registry.get('spanner') is first


@pytest.mark.parametrize(('name', 'driver'), [
    ('', SpannerDriver()),
    (None, SpannerDriver()),
    ('spanner', None),
])
def test_register_invalid(name, driver):
    with pytest.raises(ConfigurationError):
        DriverRegistry().register(name, driver)


def test_get_unknown():
    registry = build_registry()
    with pytest.raises(ConfigurationError, match="Available: \\['spanner'\\]"):
        registry.get('postgres')


def test_open_through_registry(spanner_driver, fake_session):
    registry = build_registry({'spanner': spanner_driver})

    cn = registry.open('spanner', 'projects/p/instances/i/databases/d')

    assert cn.session is fake_session
    assert cn.get_schema('T').name == 'T'
    cn.close()


def test_concurrent_registration():
    """Concurrent registration of the same driver leaves one entry"""
    registry = DriverRegistry()
    driver = SpannerDriver()
    errors = []

    def register():
        try:
            registry.register('spanner', driver)
        except ConfigurationError as e:
            errors.append(e)

    threads = [threading.Thread(target=register) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert registry.names() == ['spanner']


if __name__ == '__main__':
    __import__('pytest').main([__file__])
