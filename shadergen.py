"""C# shader bindings generator for GLSL programs.

Scans a paired vertex/fragment shader for uniform and vertex-attribute
declarations and writes a `<Name>Shader.cs` binding class beside the pair.

Usage:
    python shadergen.py path/to/basic.vert
    python shadergen.py --check path/to/shaders
"""

import argparse
import re
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

DEFAULT_NAMESPACE = "Kotono.Graphics.Shaders"
DEFAULT_BASE_CLASS = "Shader"

VERTEX_EXTENSION = ".vert"
FRAGMENT_EXTENSION = ".frag"
SHADER_EXTENSIONS = (VERTEX_EXTENSION, FRAGMENT_EXTENSION)
GENERATED_SOURCE_EXTENSION = ".cs"

PROMPT_TEXT = "document path : "


# ===--- Errors ---=== #


VALID_ERROR_CODES = {
    "PATH_NOT_FOUND",
    "INVALID_SHADER_PATH",
    "INVALID_NAMESPACE",
    "INVALID_BASE_CLASS",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


class InvalidNameError(ValueError):
    """Shader base name cannot be turned into a binding class name."""

    def __init__(self, base_name: str):
        super().__init__(f"Cannot derive a class name from base name {base_name!r}")
        self.base_name = base_name


class UnmappedAttributeTypeError(ValueError):
    """One or more vertex attributes use a type with no size mapping."""

    def __init__(self, attributes: "Sequence[VertexAttributeDecl]"):
        described = ", ".join(f"{a.type_token} {a.name}" for a in attributes)
        super().__init__(f"Unmapped vertex attribute types: {described}")
        self.attributes = tuple(attributes)


class MissingPairedFileError(FileNotFoundError):
    """The companion .vert/.frag file of a shader does not exist."""

    def __init__(self, path: Path, missing: Path):
        super().__init__(f"Missing paired shader file for {path}: {missing}")
        self.path = path
        self.missing = missing


# ===--- CLI config contracts ---=== #


_DOTTED_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


@dataclass(frozen=True)
class EmitConfig:
    """Host-side names baked into every generated binding file.

    Attributes:
        namespace: C# namespace wrapping the generated class.
        base_class: Class the generated partial class derives from. It must
            provide the Set<Suffix>(name, value) uniform primitives and
            SetVertexAttributeData(...).
    """

    namespace: str = DEFAULT_NAMESPACE
    base_class: str = DEFAULT_BASE_CLASS


DEFAULT_EMIT_CONFIG = EmitConfig()


@dataclass(frozen=True)
class GenerateConfig:
    paths: tuple[Path, ...]
    emit: EmitConfig
    output_dir: Path | None
    strict: bool
    check: bool


def validate_shader_path(path: Path) -> Path:
    if not path.exists():
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"Shader path does not exist: {path}",
            "Pass an existing .vert/.frag file or a directory containing shader pairs.",
        )
    if path.is_dir():
        return path
    if path.suffix.lower() not in SHADER_EXTENSIONS:
        raise ConfigError(
            "INVALID_SHADER_PATH",
            f"Not a shader file: {path}",
            "Shader files must end with .vert or .frag.",
        )
    return path


def validate_namespace(namespace: str) -> str:
    if _DOTTED_IDENTIFIER_RE.match(namespace):
        return namespace
    raise ConfigError(
        "INVALID_NAMESPACE",
        f"Invalid namespace: {namespace!r}",
        "Use dotted identifiers, for example Kotono.Graphics.Shaders.",
    )


def validate_base_class(base_class: str) -> str:
    if _DOTTED_IDENTIFIER_RE.match(base_class):
        return base_class
    raise ConfigError(
        "INVALID_BASE_CLASS",
        f"Invalid base class: {base_class!r}",
        "Use a class name or a dotted qualified name, for example Shader.",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate C# bindings for GLSL shader uniforms and vertex attributes"
    )

    parser.add_argument("paths", nargs="*", type=str)
    parser.add_argument("--namespace", type=str, default=DEFAULT_NAMESPACE)
    parser.add_argument("--base-class", type=str, default=DEFAULT_BASE_CLASS)
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--strict", action="store_true", default=False)
    parser.add_argument("--check", action="store_true", default=False)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def clean_document_path(raw: str) -> str:
    """Strip the quotes a shell or file manager adds around dragged paths."""
    return raw.replace('"', "").strip()


def prompt_document_path(read: Callable[[str], str] | None = None) -> str:
    if read is None:
        read = input
    try:
        raw = read(PROMPT_TEXT)
    except EOFError:
        return ""
    return clean_document_path(raw)


def validate_config(args: argparse.Namespace) -> GenerateConfig:
    paths = tuple(validate_shader_path(Path(raw)) for raw in args.paths)
    emit = EmitConfig(
        namespace=validate_namespace(args.namespace),
        base_class=validate_base_class(args.base_class),
    )
    return GenerateConfig(
        paths=paths,
        emit=emit,
        output_dir=args.output_dir,
        strict=bool(args.strict),
        check=bool(args.check),
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig:
    return validate_config(parse_args(argv))


# ===--- Type registry ---=== #


class UniformTypeMapping(NamedTuple):
    host_type_name: str
    accessor_suffix: str


class AttributeTypeMapping(NamedTuple):
    component_count: int
    byte_size: int
    pointer_format_tag: str


UNIFORM_TYPES: dict[str, UniformTypeMapping] = {
    "int": UniformTypeMapping("int", "Int"),
    "float": UniformTypeMapping("float", "Float"),
    "bool": UniformTypeMapping("bool", "Bool"),
    "vec3": UniformTypeMapping("global::Kotono.Utils.Coordinates.Vector", "Vector"),
    "vec4": UniformTypeMapping("global::Kotono.Utils.Color", "Color"),
    "mat4": UniformTypeMapping("global::OpenTK.Mathematics.Matrix4", "Matrix4"),
    "Material": UniformTypeMapping("global::Kotono.Graphics.Material", "Material"),
    "DirectionalLight": UniformTypeMapping(
        "global::Kotono.Graphics.Objects.Lights.DirectionalLight", "DirectionalLight"
    ),
    "PointLight": UniformTypeMapping(
        "global::Kotono.Graphics.Objects.Lights.PointLight", "PointLight"
    ),
}

# int and bool are uploaded as 4-byte ints, every float type as 4-byte floats.
ATTRIBUTE_TYPES: dict[str, AttributeTypeMapping] = {
    "int": AttributeTypeMapping(1, 4, "int"),
    "bool": AttributeTypeMapping(1, 4, "int"),
    "float": AttributeTypeMapping(1, 4, "float"),
    "vec2": AttributeTypeMapping(2, 8, "float"),
    "vec3": AttributeTypeMapping(3, 12, "float"),
    "vec4": AttributeTypeMapping(4, 16, "float"),
}

UNMAPPED_ATTRIBUTE_TYPE = AttributeTypeMapping(0, 0, "")
"""Stand-in for attribute types missing from ATTRIBUTE_TYPES.

Contributes nothing to the stride, so every later offset in the same
interface is shifted. Generated files from existing shaders depend on this,
so it is reported as a warning instead of being rejected."""


def resolve_uniform_type(type_token: str) -> UniformTypeMapping:
    """Map a GLSL uniform type to its C# type and Set<Suffix> primitive.

    Unknown tokens pass through unchanged in both fields, which lets shaders
    use host-defined struct types that share the GLSL type name.
    """
    mapping = UNIFORM_TYPES.get(type_token)
    if mapping is None:
        return UniformTypeMapping(type_token, type_token)
    return mapping


def resolve_attribute_type(type_token: str) -> AttributeTypeMapping | None:
    return ATTRIBUTE_TYPES.get(type_token)


def attribute_type_or_unmapped(type_token: str) -> AttributeTypeMapping:
    mapping = resolve_attribute_type(type_token)
    if mapping is None:
        return UNMAPPED_ATTRIBUTE_TYPE
    return mapping


# ===--- Declarations ---=== #


@dataclass(frozen=True)
class UniformDecl:
    type_token: str
    name: str
    is_array: bool = False


@dataclass(frozen=True)
class VertexAttributeDecl:
    location: int
    type_token: str
    name: str


class ScanResult(NamedTuple):
    uniforms: tuple[UniformDecl, ...]
    attributes: tuple[VertexAttributeDecl, ...]


# ===--- Declaration scanner ---=== #

# Both patterns run over raw text: comments, #if branches and string
# contents are not excluded, so a commented-out declaration is still found.
_UNIFORM_RE = re.compile(
    r"uniform\s+(?P<type>\w+)\s+(?P<name>\w+)(?P<array>\[(?P<size>\w*)\])?;"
)
_ATTRIBUTE_RE = re.compile(
    r"layout\s*\(\s*location\s*=\s*(?P<location>\d+)\s*\)"
    r"\s+in\s+(?P<type>\w+)\s+(?P<name>\w+);"
)


def scan_uniforms(source: str) -> tuple[UniformDecl, ...]:
    return tuple(
        UniformDecl(
            type_token=match.group("type"),
            name=match.group("name"),
            is_array=match.group("array") is not None,
        )
        for match in _UNIFORM_RE.finditer(source)
    )


def scan_attributes(source: str) -> tuple[VertexAttributeDecl, ...]:
    return tuple(
        VertexAttributeDecl(
            location=int(match.group("location")),
            type_token=match.group("type"),
            name=match.group("name"),
        )
        for match in _ATTRIBUTE_RE.finditer(source)
    )


def scan(source: str) -> ScanResult:
    """Extract uniform and vertex-attribute declarations from shader text.

    The text is normally a vertex shader followed by its fragment shader.
    Declarations are returned in source order per kind; nothing is
    deduplicated and unmatched text is ignored, so this never fails.

    Args:
        source: Raw GLSL source, possibly several stages concatenated.

    Returns:
        ScanResult of (uniforms, attributes).
    """
    return ScanResult(scan_uniforms(source), scan_attributes(source))


# ===--- Vertex layout ---=== #


@dataclass(frozen=True)
class LayoutEntry:
    attribute: VertexAttributeDecl
    mapping: AttributeTypeMapping
    offset: int


@dataclass(frozen=True)
class VertexLayout:
    """Tightly packed vertex record layout.

    Attributes:
        stride: Sum of the byte sizes of every attribute.
        entries: One entry per attribute, in declaration order.
    """

    stride: int
    entries: tuple[LayoutEntry, ...]

    @property
    def offsets(self) -> tuple[int, ...]:
        return tuple(entry.offset for entry in self.entries)


def compute_layout(attributes: Iterable[VertexAttributeDecl]) -> VertexLayout:
    """Compute stride and per-attribute offsets in declaration order.

    Offsets are running byte totals taken before each attribute. The
    `location` value plays no part: a shader declaring location 1 before
    location 0 gets location 1 at offset 0. No alignment padding is added.

    Args:
        attributes: Vertex attributes in the order they were declared.

    Returns:
        VertexLayout whose first offset (if any) is 0.
    """
    entries: list[LayoutEntry] = []
    offset = 0
    for attribute in attributes:
        mapping = attribute_type_or_unmapped(attribute.type_token)
        entries.append(LayoutEntry(attribute=attribute, mapping=mapping, offset=offset))
        offset += mapping.byte_size
    return VertexLayout(stride=offset, entries=tuple(entries))


def find_unmapped_attributes(
    attributes: Iterable[VertexAttributeDecl],
) -> tuple[VertexAttributeDecl, ...]:
    return tuple(a for a in attributes if resolve_attribute_type(a.type_token) is None)


# ===--- Interface model ---=== #


@dataclass(frozen=True)
class ShaderInterface:
    """Everything the emitter needs to know about one shader pair.

    Attributes:
        class_name: Generated C# class name, e.g. "BasicShader".
        base_name: File stem shared by the .vert/.frag pair, e.g. "basic".
            Passed verbatim to the base constructor.
        uniforms: Uniform declarations in scan order.
        attributes: Vertex attribute declarations in scan order.
    """

    class_name: str
    base_name: str
    uniforms: tuple[UniformDecl, ...]
    attributes: tuple[VertexAttributeDecl, ...]


def capitalize_first(name: str) -> str:
    # Only the first character changes; "pointLights" -> "PointLights".
    return name[:1].upper() + name[1:]


def class_name_for(base_name: str) -> str:
    if not base_name:
        raise InvalidNameError(base_name)
    class_name = capitalize_first(base_name) + "Shader"
    if not class_name.isidentifier():
        raise InvalidNameError(base_name)
    return class_name


def build_interface(
    base_name: str,
    uniforms: Iterable[UniformDecl],
    attributes: Iterable[VertexAttributeDecl],
) -> ShaderInterface:
    """Assemble a ShaderInterface from scanner output.

    Duplicated uniform names or attribute locations are kept as-is; see
    collect_diagnostics for reporting them.

    Raises:
        InvalidNameError: If base_name is empty or does not capitalize into
            a valid class identifier.
    """
    return ShaderInterface(
        class_name=class_name_for(base_name),
        base_name=base_name,
        uniforms=tuple(uniforms),
        attributes=tuple(attributes),
    )


def _duplicates(values: Iterable[object]) -> tuple:
    seen: set = set()
    repeated: list = []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return tuple(repeated)


def find_duplicate_uniform_names(uniforms: Iterable[UniformDecl]) -> tuple[str, ...]:
    return _duplicates(u.name for u in uniforms)


def find_duplicate_locations(
    attributes: Iterable[VertexAttributeDecl],
) -> tuple[int, ...]:
    return _duplicates(a.location for a in attributes)


def collect_diagnostics(interface: ShaderInterface) -> tuple[str, ...]:
    """Return human-readable warnings for a built interface.

    Covers the cases that still produce output but probably not the
    intended one: unmapped attribute types (zero-size in the layout),
    repeated uniform names and repeated attribute locations.
    """
    messages: list[str] = []
    for attribute in find_unmapped_attributes(interface.attributes):
        messages.append(
            f"{interface.class_name}: vertex attribute '{attribute.name}' has "
            f"unmapped type '{attribute.type_token}'; it adds 0 bytes to the stride"
        )
    for name in find_duplicate_uniform_names(interface.uniforms):
        messages.append(f"{interface.class_name}: uniform '{name}' is declared more than once")
    for location in find_duplicate_locations(interface.attributes):
        messages.append(
            f"{interface.class_name}: attribute location {location} is used more than once"
        )
    return tuple(messages)


def check_attribute_types(interface: ShaderInterface) -> None:
    unmapped = find_unmapped_attributes(interface.attributes)
    if unmapped:
        raise UnmappedAttributeTypeError(unmapped)


# ===--- Binding emitter ---=== #

BANNER = (
    "// This file is auto-generated and any change will be overwritten on the next update."
)
POINTER_TYPE_PREFIX = "global::OpenTK.Graphics.OpenGL4.VertexAttribPointerType."
UNMAPPED_POINTER_TYPE = "default(global::OpenTK.Graphics.OpenGL4.VertexAttribPointerType)"
AGGREGATE_ATTRIBUTE_SETTER = "SetVertexAttributesData"

_CLASS_INDENT = " " * 4
_MEMBER_INDENT = " " * 8
_BODY_INDENT = " " * 12

SECTION_BANNER = "banner"
SECTION_SINGLETON = "singleton"
SECTION_ATTRIBUTE_SETTERS = "attribute_setters"
SECTION_AGGREGATE_ATTRIBUTE_SETTER = "aggregate_attribute_setter"
SECTION_UNIFORM_SETTERS = "uniform_setters"

EMIT_SECTION_ORDER: tuple[str, ...] = (
    SECTION_BANNER,
    SECTION_SINGLETON,
    SECTION_ATTRIBUTE_SETTERS,
    SECTION_AGGREGATE_ATTRIBUTE_SETTER,
    SECTION_UNIFORM_SETTERS,
)
"""Order of sections in a generated file.

Generated files are diffed between runs, so this order is part of the
output format and must not follow dict or call order."""


def attribute_setter_name(attribute: VertexAttributeDecl) -> str:
    return f"Set{capitalize_first(attribute.name)}Attribute"


def uniform_setter_name(uniform: UniformDecl) -> str:
    return f"Set{capitalize_first(uniform.name)}"


def format_array_element_names(name: str, length: int) -> list[str]:
    """Uniform names an array setter forwards to for a `length`-element array."""
    return [f"{name}[{index}]" for index in range(length)]


def format_banner() -> list[str]:
    return [BANNER, ""]


def format_singleton_block(interface: ShaderInterface, config: EmitConfig) -> list[str]:
    """Return the namespace/class opening and the lazy singleton members.

    Output format:
        namespace <namespace>
        {
            internal partial class <ClassName> : <base_class>
            {
                private <ClassName>() : base("<base_name>") { }

                private static readonly global::System.Lazy<<ClassName>> _instance = new(() => new());

                internal static <ClassName> Instance => _instance.Value;

    The class and namespace are closed by emit() after the last section.
    """
    name = interface.class_name
    return [
        f"namespace {config.namespace}",
        "{",
        f"{_CLASS_INDENT}internal partial class {name} : {config.base_class}",
        f"{_CLASS_INDENT}{{",
        f'{_MEMBER_INDENT}private {name}() : base("{interface.base_name}") {{ }}',
        "",
        f"{_MEMBER_INDENT}private static readonly global::System.Lazy<{name}> "
        "_instance = new(() => new());",
        "",
        f"{_MEMBER_INDENT}internal static {name} Instance => _instance.Value;",
    ]


def format_pointer_type(mapping: AttributeTypeMapping) -> str:
    # Unmapped types have no format tag; the enum's zero value keeps the call compilable.
    if not mapping.pointer_format_tag:
        return UNMAPPED_POINTER_TYPE
    return POINTER_TYPE_PREFIX + capitalize_first(mapping.pointer_format_tag)


def format_attribute_setter(entry: LayoutEntry, stride: int) -> str:
    pointer_type = format_pointer_type(entry.mapping)
    return (
        f"{_MEMBER_INDENT}internal void {attribute_setter_name(entry.attribute)}() => "
        f"SetVertexAttributeData({entry.attribute.location}, "
        f"{entry.mapping.component_count}, {pointer_type}, {stride}, {entry.offset});"
    )


def format_attribute_setters(layout: VertexLayout) -> list[str]:
    lines: list[str] = []
    for entry in layout.entries:
        lines.append("")
        lines.append(format_attribute_setter(entry, layout.stride))
    return lines


def format_aggregate_attribute_setter(layout: VertexLayout) -> list[str]:
    if not layout.entries:
        return []
    lines = [
        "",
        f"{_MEMBER_INDENT}internal void {AGGREGATE_ATTRIBUTE_SETTER}()",
        f"{_MEMBER_INDENT}{{",
    ]
    for entry in layout.entries:
        lines.append(f"{_BODY_INDENT}{attribute_setter_name(entry.attribute)}();")
    lines.append(f"{_MEMBER_INDENT}}}")
    return lines


def format_uniform_setter(uniform: UniformDecl) -> str:
    """Render one uniform setter.

    Output format:
        non-array:
            internal void SetModel(<host> model) => Set<Suffix>("model", model);
        array:
            internal void SetColors(<host>[] colors) { for (int i = 0; i < colors.Length; i++) Set<Suffix>($"colors[{i}]", colors[i]); }
    """
    mapping = resolve_uniform_type(uniform.type_token)
    setter = uniform_setter_name(uniform)
    name = uniform.name
    primitive = f"Set{mapping.accessor_suffix}"
    if uniform.is_array:
        return (
            f"{_MEMBER_INDENT}internal void {setter}({mapping.host_type_name}[] {name}) "
            f"{{ for (int i = 0; i < {name}.Length; i++) "
            f'{primitive}($"{name}[{{i}}]", {name}[i]); }}'
        )
    return (
        f"{_MEMBER_INDENT}internal void {setter}({mapping.host_type_name} {name}) => "
        f'{primitive}("{name}", {name});'
    )


def format_uniform_setters(uniforms: Iterable[UniformDecl]) -> list[str]:
    lines: list[str] = []
    for uniform in uniforms:
        lines.append("")
        lines.append(format_uniform_setter(uniform))
    return lines


def render_sections(
    interface: ShaderInterface, config: EmitConfig = DEFAULT_EMIT_CONFIG
) -> dict[str, list[str]]:
    layout = compute_layout(interface.attributes)
    return {
        SECTION_BANNER: format_banner(),
        SECTION_SINGLETON: format_singleton_block(interface, config),
        SECTION_ATTRIBUTE_SETTERS: format_attribute_setters(layout),
        SECTION_AGGREGATE_ATTRIBUTE_SETTER: format_aggregate_attribute_setter(layout),
        SECTION_UNIFORM_SETTERS: format_uniform_setters(interface.uniforms),
    }


def emit(interface: ShaderInterface, config: EmitConfig = DEFAULT_EMIT_CONFIG) -> str:
    """Render the complete C# binding source for a ShaderInterface.

    File structure:
        <banner>
                                    <- blank line
        <namespace + class opening + singleton members>
        <per-attribute setters>     <- omitted when there are no attributes
        <aggregate attribute setter> <- omitted when there are no attributes
        <uniform setters>
        <class + namespace closing>
                                    <- trailing newline

    Every member is preceded by a blank line. The result depends only on
    the arguments, so identical input gives byte-identical output.

    Args:
        interface: Shader interface from build_interface.
        config: Namespace and base class for the generated class.

    Returns:
        Generated source with exactly one trailing newline.
    """
    sections = render_sections(interface, config)
    parts: list[str] = []
    for section in EMIT_SECTION_ORDER:
        parts.extend(sections[section])
    parts.append(f"{_CLASS_INDENT}}}")
    parts.append("}")
    return "\n".join(parts) + "\n"


# ===--- Shader pair I/O ---=== #


@dataclass(frozen=True)
class ShaderPair:
    base_name: str
    vertex_path: Path
    fragment_path: Path

    @property
    def directory(self) -> Path:
        return self.vertex_path.parent


def resolve_shader_pair(path: Path) -> ShaderPair:
    """Locate both halves of the shader pair that `path` belongs to.

    Either half may be given; the extension is compared case-insensitively
    and the partner shares the file stem.

    Raises:
        ValueError: If path is not a .vert or .frag file.
        MissingPairedFileError: If the partner file does not exist.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == VERTEX_EXTENSION:
        vertex_path, fragment_path = path, path.with_suffix(FRAGMENT_EXTENSION)
        partner = fragment_path
    elif suffix == FRAGMENT_EXTENSION:
        vertex_path, fragment_path = path.with_suffix(VERTEX_EXTENSION), path
        partner = vertex_path
    else:
        raise ValueError(f"Not a shader file: {path}")

    if not partner.exists():
        raise MissingPairedFileError(path, partner)
    return ShaderPair(base_name=path.stem, vertex_path=vertex_path, fragment_path=fragment_path)


@dataclass(frozen=True)
class PairFailure:
    path: Path
    reason: str


def discover_shader_pairs(
    directory: Path,
) -> tuple[tuple[ShaderPair, ...], tuple[PairFailure, ...]]:
    """Find every shader pair below directory, recursively.

    Each (folder, stem) is visited once regardless of which halves exist.
    Lone halves are reported as failures rather than raised so that the
    rest of the tree is still processed.

    Returns:
        (pairs, failures), both sorted by path.
    """
    pairs: list[ShaderPair] = []
    failures: list[PairFailure] = []
    seen: set[tuple[Path, str]] = set()
    for path in sorted(Path(directory).rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SHADER_EXTENSIONS:
            continue
        key = (path.parent, path.stem)
        if key in seen:
            continue
        seen.add(key)
        try:
            pairs.append(resolve_shader_pair(path))
        except MissingPairedFileError as err:
            failures.append(PairFailure(path=path, reason=str(err)))
    return tuple(pairs), tuple(failures)


def collect_shader_pairs(
    paths: Iterable[Path],
) -> tuple[tuple[ShaderPair, ...], tuple[PairFailure, ...]]:
    """Resolve files and directories into shader pairs, each pair once.

    A pair named twice (both halves, or a file inside a named directory)
    is kept at its first position.
    """
    pairs: list[ShaderPair] = []
    failures: list[PairFailure] = []
    seen: set[tuple[Path, str]] = set()

    def _add(pair: ShaderPair) -> None:
        key = (pair.directory.resolve(), pair.base_name)
        if key not in seen:
            seen.add(key)
            pairs.append(pair)

    for path in paths:
        if path.is_dir():
            found, missing = discover_shader_pairs(path)
            for pair in found:
                _add(pair)
            failures.extend(missing)
            continue
        try:
            _add(resolve_shader_pair(path))
        except MissingPairedFileError as err:
            failures.append(PairFailure(path=path, reason=str(err)))
    return tuple(pairs), tuple(failures)


def read_pair_source(pair: ShaderPair) -> str:
    # Vertex first so attributes and vertex-stage uniforms lead.
    vertex = pair.vertex_path.read_text(encoding="utf-8")
    fragment = pair.fragment_path.read_text(encoding="utf-8")
    return vertex + fragment


def output_filename(interface: ShaderInterface) -> str:
    return interface.class_name + GENERATED_SOURCE_EXTENSION


# ===--- Writer ---=== #


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single generated file.

    Attributes:
        filename: Filename written, e.g. "BasicShader.cs".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


def write_binding(output_dir: Path, filename: str, content: str) -> FileWriteResult:
    """Write one generated binding file, creating output_dir if needed.

    Raises:
        OSError: Propagated directly if the filesystem write fails.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / filename
    file_path.write_text(content, encoding="utf-8", newline="\n")
    resolved = file_path.resolve()
    return FileWriteResult(
        filename=filename,
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(resolved.read_bytes()),
    )


def is_stale(path: Path, content: str) -> bool:
    # Byte comparison, so an existing file in another encoding is just stale.
    if not path.exists():
        return True
    return path.read_bytes() != content.encode("utf-8")


# ===--- Pipeline ---=== #


@dataclass(frozen=True)
class PairResult:
    """Outcome of generating (or checking) one shader pair.

    Attributes:
        pair: The shader pair processed.
        interface: Interface built from the pair's combined source.
        layout: Vertex layout the attribute setters were rendered with.
        output_path: Where the binding file lives (or would live).
        written: Write result; None in check mode.
        stale: True when, in check mode, the file on disk differs from
            the fresh output. Always False outside check mode.
        warnings: Diagnostics from collect_diagnostics.
    """

    pair: ShaderPair
    interface: ShaderInterface
    layout: VertexLayout
    output_path: Path
    written: FileWriteResult | None
    stale: bool
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class RunResult:
    results: tuple[PairResult, ...]
    failures: tuple[PairFailure, ...]
    check: bool = False

    @property
    def stale(self) -> tuple[PairResult, ...]:
        return tuple(r for r in self.results if r.stale)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.stale


def planned_output_path(pair: ShaderPair, config: GenerateConfig) -> Path:
    """Binding file path for a pair, known before its shaders are read.

    Raises:
        InvalidNameError: The pair's base name is not usable as a class name.
    """
    output_dir = config.output_dir if config.output_dir is not None else pair.directory
    return Path(output_dir) / (class_name_for(pair.base_name) + GENERATED_SOURCE_EXTENSION)


def generate_for_pair(pair: ShaderPair, config: GenerateConfig) -> PairResult:
    """Scan, model, render and write (or check) the bindings for one pair.

    Raises:
        OSError: A shader file could not be read or the output written.
        UnicodeDecodeError: A shader file is not valid UTF-8.
        InvalidNameError: The pair's base name is not usable as a class name.
        UnmappedAttributeTypeError: In strict mode, for unmapped attribute types.
    """
    uniforms, attributes = scan(read_pair_source(pair))
    interface = build_interface(pair.base_name, uniforms, attributes)
    if config.strict:
        check_attribute_types(interface)

    content = emit(interface, config.emit)
    output_path = planned_output_path(pair, config)

    written = None
    stale = False
    if config.check:
        stale = is_stale(output_path, content)
    else:
        written = write_binding(output_path.parent, output_path.name, content)

    return PairResult(
        pair=pair,
        interface=interface,
        layout=compute_layout(interface.attributes),
        output_path=output_path,
        written=written,
        stale=stale,
        warnings=collect_diagnostics(interface),
    )


def run_generate(config: GenerateConfig) -> RunResult:
    """Process every shader pair named by config, one at a time.

    A failing pair is reported and recorded in RunResult.failures; the
    remaining pairs are still processed. A pair whose binding file would
    land on a path already produced in this run (same stem under one
    --output-dir) fails instead of overwriting the earlier file.
    """
    pairs, missing = collect_shader_pairs(config.paths)
    failures: list[PairFailure] = list(missing)
    for failure in missing:
        print(f"Error: {failure.reason}", file=sys.stderr)

    results: list[PairResult] = []
    claimed: dict[Path, ShaderPair] = {}
    for pair in pairs:
        print(f"Scanning: {pair.vertex_path}")
        try:
            output_path = planned_output_path(pair, config).resolve()
            if output_path in claimed:
                reason = (
                    f"Output {output_path} is already generated from "
                    f"{claimed[output_path].vertex_path}"
                )
                print(f"Error: {reason}", file=sys.stderr)
                failures.append(PairFailure(path=pair.vertex_path, reason=reason))
                continue
            claimed[output_path] = pair
            result = generate_for_pair(pair, config)
        except (
            OSError,
            UnicodeDecodeError,
            InvalidNameError,
            UnmappedAttributeTypeError,
        ) as err:
            print(f"Error: {err}", file=sys.stderr)
            failures.append(PairFailure(path=pair.vertex_path, reason=str(err)))
            continue

        for warning in result.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        print(
            f"  Found: {len(result.interface.uniforms)} uniforms, "
            f"{len(result.interface.attributes)} attributes "
            f"(stride {result.layout.stride})"
        )
        if result.written is not None:
            print(f"  Written: {result.written.path} ({result.written.line_count} lines)")
        elif result.stale:
            print(f"  Stale: {result.output_path}")
        else:
            print(f"  Up to date: {result.output_path}")
        results.append(result)

    return RunResult(results=tuple(results), failures=tuple(failures), check=config.check)


# ===--- Summary report ---=== #


def format_run_summary(result: RunResult) -> str:
    """Render the end-of-run console report.

    Heading is "Shader bindings generated:" or, in check mode,
    "Shader bindings checked:". The file list shows written files with
    line counts (generate) or stale files (check). Failures are listed
    last when present. Returns a string with exactly one trailing newline.
    """
    heading = "Shader bindings checked:" if result.check else "Shader bindings generated:"
    lines: list[str] = [heading, ""]
    lines.append(f"  Pairs:      {len(result.results) + len(result.failures)}")
    if result.check:
        lines.append(f"  Stale:      {len(result.stale)}")
    else:
        lines.append(f"  Written:    {len(result.results)}")
    lines.append(f"  Failed:     {len(result.failures)}")

    if result.check and result.stale:
        lines.append("")
        lines.append("  Stale files:")
        for pair_result in result.stale:
            lines.append(f"    {pair_result.output_path}")
    elif not result.check and result.results:
        lines.append("")
        lines.append("  Files written:")
        for pair_result in result.results:
            written = pair_result.written
            if written is None:
                continue
            lines.append(f"    {written.filename:<28} {written.line_count:>6,} lines")

    if result.failures:
        lines.append("")
        lines.append("  Failures:")
        for failure in result.failures:
            lines.append(f"    {failure.path}: {failure.reason}")

    lines.append("")
    return "\n".join(lines)


def print_run_summary(result: RunResult) -> None:
    print(format_run_summary(result), end="")


# ===--- Main ---=== #


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    if not args.paths:
        document_path = prompt_document_path()
        if not document_path:
            return
        args.paths = [document_path]

    try:
        config = validate_config(args)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    result = run_generate(config)
    print_run_summary(result)
    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
