import numpy as np
import pytest

from testgen3d.factory import create_default_registry
from testgen3d.registry import TextureRegistry


def test_default_registry():
    registry = create_default_registry()
    assert registry.names() == ["grid", "checker", "rchecker", "colored", "rcolored", "gamma", "gammaf"]
    assert registry.hdr_names() == ["gammaf"]
    assert registry.get("gammaf").filename == "gammaf.hdr"
    assert registry.get("checker").filename == "checker.png"


def test_entries_synthesize():
    for entry in create_default_registry().entries():
        pixels = entry.synthesize(16)
        assert pixels.shape == (16, 16, 4)
        assert pixels.dtype == (np.float32 if entry.hdr else np.uint8)


def test_duplicate_rejected():
    registry = TextureRegistry()
    registry.register("flat", lambda s: np.zeros((s, s, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        registry.register("flat", lambda s: np.ones((s, s, 4), dtype=np.uint8))


def test_unknown_name():
    with pytest.raises(KeyError):
        TextureRegistry().get("missing")
