import pytest

from testgen3d.materials import MaterialKind, random_materials
from testgen3d.rng import random_stream

TEXTURES = ["grid", "checker", "rchecker", "colored", "rcolored", "gamma"]


def test_floor_material():
    floor = random_materials(4, TEXTURES)[0]
    assert floor.name == "floor"
    assert floor.kind == MaterialKind.DIFFUSE
    assert floor.color == (1.0, 1.0, 1.0)
    assert floor.texture == "grid"


def test_random_materials_are_valid():
    materials = random_materials(64, TEXTURES, rng=random_stream(4))
    assert len(materials) == 64
    assert [m.name for m in materials[1:4]] == ["obj01", "obj02", "obj03"]
    for m in materials[1:]:
        if m.texture is not None:
            assert m.texture in TEXTURES[:5]
            assert m.color == (1.0, 1.0, 1.0)
        else:
            assert all(0.2 <= c < 0.5 for c in m.color)
        if m.kind == MaterialKind.DIFFUSE:
            assert m.roughness == 0.0
        else:
            assert 0.01 <= m.roughness < 0.26
    assert {m.kind for m in materials} == set(MaterialKind)


def test_texture_slot_limited_by_available_names():
    materials = random_materials(64, ["grid", "checker"], rng=random_stream(4))
    assert {m.texture for m in materials[1:]} <= {None, "grid", "checker"}


def test_deterministic():
    assert random_materials(16, TEXTURES, rng=random_stream(2)) == random_materials(16, TEXTURES, rng=random_stream(2))


@pytest.mark.parametrize("count, textures", [(0, TEXTURES), (4, [])])
def test_bad_arguments(count, textures):
    with pytest.raises(ValueError):
        random_materials(count, textures)
