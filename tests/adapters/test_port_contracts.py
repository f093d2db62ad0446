"""Adapter contract tests: default adapters satisfy the application ports."""

from __future__ import annotations

from lib_relaxed_config.adapters.env.default import EnvironmentProvider
from lib_relaxed_config.adapters.mappers.caching import CachingPropertyMapper
from lib_relaxed_config.adapters.mappers.dotted import DottedPropertyMapper
from lib_relaxed_config.adapters.mappers.environment import EnvironmentPropertyMapper
from lib_relaxed_config.adapters.providers.mapping import LookupProvider, MapProvider
from lib_relaxed_config.application import ports


def test_providers_satisfy_provider_ports() -> None:
    assert isinstance(MapProvider({}), ports.EnumerableRawPropertyProvider)
    assert isinstance(MapProvider({}), ports.OriginTrackingProvider)
    assert isinstance(EnvironmentProvider(environ={}), ports.EnumerableRawPropertyProvider)
    assert isinstance(LookupProvider(lambda key: None), ports.RawPropertyProvider)
    assert not isinstance(LookupProvider(lambda key: None), ports.EnumerableRawPropertyProvider)


def test_mappers_satisfy_mapper_port() -> None:
    for mapper in (DottedPropertyMapper(), EnvironmentPropertyMapper(), CachingPropertyMapper(DottedPropertyMapper())):
        assert isinstance(mapper, ports.PropertyMapper)
        assert mapper.dialect in {"dotted", "environment"}
