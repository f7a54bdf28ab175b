import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import shadergen  # noqa: E402

BASIC_VERT = """#version 330 core

layout(location = 0) in vec3 position;
layout(location = 1) in vec2 uv;

uniform mat4 model;
uniform mat4 view;

out vec2 texCoord;

void main()
{
    texCoord = uv;
    gl_Position = vec4(position, 1.0) * model * view;
}
"""

BASIC_FRAG = """#version 330 core

in vec2 texCoord;

uniform vec4 color;
uniform PointLight pointLights[MAX_POINT_LIGHTS];

out vec4 FragColor;

void main()
{
    FragColor = color;
}
"""


@pytest.fixture
def write_pair(tmp_path: Path) -> Callable[..., shadergen.ShaderPair]:
    def _write_pair(
        base_name: str = "basic",
        vertex: str = BASIC_VERT,
        fragment: str = BASIC_FRAG,
        directory: Path | None = None,
    ) -> shadergen.ShaderPair:
        target = tmp_path if directory is None else directory
        target.mkdir(parents=True, exist_ok=True)
        vertex_path = target / f"{base_name}.vert"
        fragment_path = target / f"{base_name}.frag"
        vertex_path.write_text(vertex, encoding="utf-8")
        fragment_path.write_text(fragment, encoding="utf-8")
        return shadergen.ShaderPair(base_name, vertex_path, fragment_path)

    return _write_pair


@pytest.fixture
def make_args() -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "paths": [],
            "namespace": shadergen.DEFAULT_NAMESPACE,
            "base_class": shadergen.DEFAULT_BASE_CLASS,
            "output_dir": None,
            "strict": False,
            "check": False,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_config() -> Callable[..., shadergen.GenerateConfig]:
    def _make_config(
        *paths: Path,
        output_dir: Path | None = None,
        strict: bool = False,
        check: bool = False,
        emit: shadergen.EmitConfig = shadergen.DEFAULT_EMIT_CONFIG,
    ) -> shadergen.GenerateConfig:
        return shadergen.GenerateConfig(
            paths=tuple(paths),
            emit=emit,
            output_dir=output_dir,
            strict=strict,
            check=check,
        )

    return _make_config
