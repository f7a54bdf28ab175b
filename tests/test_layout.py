from itertools import accumulate

import pytest

import shadergen
from shadergen import VertexAttributeDecl


def _attrs(*specs: tuple[int, str, str]) -> list[VertexAttributeDecl]:
    return [VertexAttributeDecl(loc, token, name) for loc, token, name in specs]


def test_compute_layout_position_uv() -> None:
    layout = shadergen.compute_layout(
        _attrs((0, "vec3", "position"), (1, "vec2", "uv"))
    )

    assert layout.offsets == (0, 12)
    assert layout.stride == 20


def test_compute_layout_empty() -> None:
    layout = shadergen.compute_layout([])

    assert layout.stride == 0
    assert layout.entries == ()
    assert layout.offsets == ()


@pytest.mark.parametrize(
    "tokens",
    [
        ["float"],
        ["vec4", "vec4", "vec4"],
        ["vec3", "vec3", "vec2", "float", "int", "bool"],
        ["vec2", "vec4", "vec3"],
    ],
)
def test_compute_layout_offsets_are_prefix_sums(tokens: list[str]) -> None:
    attributes = _attrs(*((i, t, f"a{i}") for i, t in enumerate(tokens)))
    sizes = [shadergen.ATTRIBUTE_TYPES[t].byte_size for t in tokens]

    layout = shadergen.compute_layout(attributes)

    assert layout.offsets == tuple([0, *accumulate(sizes)][:-1])
    assert layout.stride == sum(sizes)
    assert list(layout.offsets) == sorted(layout.offsets)


def test_compute_layout_follows_declaration_order_not_location() -> None:
    layout = shadergen.compute_layout(
        _attrs((1, "vec2", "uv"), (0, "vec3", "position"))
    )

    by_name = {entry.attribute.name: entry.offset for entry in layout.entries}
    assert by_name == {"uv": 0, "position": 8}


def test_compute_layout_unmapped_type_adds_zero_bytes() -> None:
    layout = shadergen.compute_layout(
        _attrs((0, "vec3", "position"), (1, "mat4", "instance"), (2, "vec2", "uv"))
    )

    assert layout.offsets == (0, 12, 12)
    assert layout.stride == 20
    assert layout.entries[1].mapping is shadergen.UNMAPPED_ATTRIBUTE_TYPE


def test_find_unmapped_attributes() -> None:
    attributes = _attrs((0, "vec3", "position"), (1, "mat4", "instance"))

    assert shadergen.find_unmapped_attributes(attributes) == (attributes[1],)
