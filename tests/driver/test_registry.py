import dataclasses

import dacite
import pytest

from stagger.driver import (
    CreatesCommSelector,
    ForcingSelector,
    InitializerSelector,
    LocalCommConfig,
    MPDATAConfig,
    NullCommConfig,
    SchemeSelector,
    UpstreamConfig,
    VelocitySelector,
)
from stagger.driver.registry import Registry
from stagger.util import ConfigurationError, LocalComm, NullComm


@pytest.fixture
def registry():
    registry = Registry()

    @registry.register("upwind")
    @dataclasses.dataclass
    class UpwindConfig:
        courant_limit: float = 1.0

    return registry


def test_from_dict(registry):
    config = registry.from_dict({"type": "upwind", "config": {"courant_limit": 0.5}})
    assert config.courant_limit == 0.5
    assert registry.names == ["upwind"]


def test_missing_config_uses_defaults(registry):
    assert registry.from_dict({"type": "upwind"}).courant_limit == 1.0


def test_missing_type_raises(registry):
    with pytest.raises(ConfigurationError, match="type is required"):
        registry.from_dict({"config": {}})


def test_unknown_type_raises(registry):
    with pytest.raises(ConfigurationError, match="unexpected type"):
        registry.from_dict({"type": "downwind"})


def test_unknown_key_raises(registry):
    with pytest.raises(dacite.UnexpectedDataError):
        registry.from_dict({"type": "upwind", "config": {"courant_limt": 0.5}})


def test_default_type():
    selector = SchemeSelector.from_dict({})
    assert selector.type == "mpdata"
    assert selector.config == MPDATAConfig()


def test_scheme_selector_builds_scheme():
    selector = SchemeSelector.from_dict({"type": "mpdata", "config": {"iord": 1}})
    scheme = selector.build()
    assert scheme.num_steps == 1
    assert isinstance(
        SchemeSelector.from_dict({"type": "upstream"}).config, UpstreamConfig
    )


def test_mpdata_without_halo_update_raises():
    selector = SchemeSelector.from_dict({"type": "mpdata", "config": {"iord": 3}})
    with pytest.raises(ConfigurationError):
        selector.build()


def test_comm_selector():
    default = CreatesCommSelector.from_dict({})
    assert isinstance(default.config, LocalCommConfig)
    assert isinstance(default.get_comm(), LocalComm)
    selector = CreatesCommSelector.from_dict(
        {"type": "null_comm", "config": {"rank": 1, "total_ranks": 6}}
    )
    assert isinstance(selector.config, NullCommConfig)
    comm = selector.get_comm()
    assert isinstance(comm, NullComm)
    assert comm.Get_rank() == 1
    assert comm.Get_size() == 6
    selector.cleanup(comm)


def test_velocity_selector():
    selector = VelocitySelector.from_dict(
        {"type": "rotation", "config": {"angular_velocity": 0.1}}
    )
    assert selector.get_velocity_source().is_constant
    diagnosed = VelocitySelector.from_dict(
        {"type": "diagnosed", "config": {"x": [{"name": "rhou"}]}}
    )
    assert diagnosed.get_velocity_source().dynamic_fields == {"rhou"}


@pytest.mark.parametrize("selector", [ForcingSelector, InitializerSelector])
def test_selectors_without_default_type(selector):
    with pytest.raises(ConfigurationError, match="type is required"):
        selector.from_dict({"config": {}})


def test_forcing_selector():
    selector = ForcingSelector.from_dict(
        {"type": "harmonic_oscillator", "config": {"fields": ["a", "b"], "omega": 2.0}}
    )
    assert set(selector.get_terms()) == {"a", "b"}
    with pytest.raises(ConfigurationError, match="two fields"):
        ForcingSelector.from_dict(
            {"type": "harmonic_oscillator", "config": {"fields": ["a"], "omega": 2.0}}
        )
