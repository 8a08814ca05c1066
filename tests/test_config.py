import pytest

from hostrecon.config import ScanConfig
from hostrecon.errors import ConfigError


def test_defaults_are_valid():
    cfg = ScanConfig().validate()
    assert cfg.banner_timeout <= cfg.connect_timeout
    assert cfg.workers >= 1


@pytest.mark.parametrize("field,value", [
    ("connect_timeout", 0),
    ("banner_timeout", -1),
    ("deadline", 0),
    ("workers", 0),
    ("max_ports", 0),
    ("banner_bytes", 0),
])
def test_rejects_non_positive(field, value):
    with pytest.raises(ConfigError):
        ScanConfig(**{field: value}).validate()


def test_banner_timeout_within_connect_timeout():
    with pytest.raises(ConfigError):
        ScanConfig(connect_timeout=0.2, banner_timeout=0.5).validate()


def test_overrides_skip_none():
    cfg = ScanConfig().with_overrides(workers=7, deadline=None)
    assert cfg.workers == 7
    assert cfg.deadline == ScanConfig().deadline


def test_lowering_connect_timeout_caps_banner_timeout():
    cfg = ScanConfig().with_overrides(connect_timeout=0.2)
    assert cfg.connect_timeout == 0.2
    assert cfg.banner_timeout == 0.2


def test_explicit_banner_timeout_is_not_capped():
    with pytest.raises(ConfigError):
        ScanConfig().with_overrides(connect_timeout=0.2, banner_timeout=0.4)
    cfg = ScanConfig().with_overrides(connect_timeout=2.0)
    assert cfg.banner_timeout == ScanConfig().banner_timeout
