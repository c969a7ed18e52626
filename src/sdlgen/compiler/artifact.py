# Copyright 2026 sdlgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of the classified type graph.

The graph manifest is written next to the generated sources as compact JSON
so that other tools can inspect projections and resolver bindings without
re-parsing the schema. The format is versioned so future schema changes can
be detected.
"""

from __future__ import annotations

import json
from collections.abc import Collection
from pathlib import Path
from typing import Any

from sdlgen.model.declarations import (
    ConstValue,
    DeprecatedDirective,
    EnumValueDecl,
    InputValueDecl,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    ObjectValueField,
    Projection,
    ServerDirective,
    TypeKind,
    TypeRef,
    ValueKind,
)
from sdlgen.model.graph import ClassifiedField, FieldResolver, ResolverModule, TypeDefinition, TypeGraph
from sdlgen.model.source import SourceSpan

# ###############
# Public Interface
# ###############

MANIFEST_FORMAT_VERSION = "1"
MANIFEST_FILENAME = "schema-graph.json"


def serialize_graph(graph: TypeGraph, *, exclude: Collection[str] = ()) -> str:
    """Serialize a classified graph to a compact JSON string.

    Types are written in name order. Types named in *exclude* (typically
    those blocked by errors) are left out.
    """
    types = [_type_to_dict(t) for t in graph.sorted_types() if t.name not in exclude]
    return json.dumps({"v": MANIFEST_FORMAT_VERSION, "types": types}, separators=(",", ":"), sort_keys=True)


def deserialize_graph(data: str) -> TypeGraph:
    """Deserialize a classified graph from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize_graph`.

    Returns:
        The reconstructed :class:`TypeGraph`. Directive applications that only
        feed classification are not stored; the computed projections are.

    Raises:
        ValueError: If the manifest format version is not recognised.
    """
    obj = json.loads(data)
    version = obj.get("v")
    if version != MANIFEST_FORMAT_VERSION:
        raise ValueError(f"Unsupported manifest format version: {version!r}")
    types = [_type_from_dict(t) for t in obj.get("types", [])]
    return TypeGraph(types={t.name: t for t in types})


def write_manifest(graph: TypeGraph, path: Path, *, exclude: Collection[str] = ()) -> None:
    """Write the graph manifest to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_graph(graph, exclude=exclude), encoding="utf-8")


def read_manifest(path: Path) -> TypeGraph:
    """Read and deserialize a graph manifest from *path*."""
    return deserialize_graph(path.read_text(encoding="utf-8"))


# ################
# Implementation
# ################


def _span_to_list(span: SourceSpan) -> list[Any]:
    return [span.file, span.start_line, span.start_column, span.end_line, span.end_column]


def _span_from_list(obj: list[Any]) -> SourceSpan:
    file, start_line, start_column, end_line, end_column = obj
    return SourceSpan(
        file=file,
        start_line=start_line,
        start_column=start_column,
        end_line=end_line,
        end_column=end_column,
    )


def _type_to_dict(type_def: TypeDefinition) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": type_def.name,
        "kind": type_def.kind.value,
        "span": _span_to_list(type_def.span),
        "nameSpan": _span_to_list(type_def.name_span),
    }
    if type_def.description is not None:
        d["description"] = type_def.description
    if type_def.extension_spans:
        d["extensions"] = [_span_to_list(s) for s in type_def.extension_spans]
    if type_def.kind is TypeKind.ENUM:
        d["values"] = [_enum_value_to_dict(v) for v in type_def.values]
        return d
    d["interfaces"] = [_type_ref_to_dict(i) for i in type_def.interfaces]
    d["resolvers"] = [_module_to_dict(m) for m in type_def.resolver_modules]
    d["fields"] = [_field_to_dict(f) for f in type_def.classified_fields()]
    return d


def _type_from_dict(obj: dict[str, Any]) -> TypeDefinition:
    modules = [_module_from_dict(m) for m in obj.get("resolvers", [])]
    by_path = {m.path: m for m in modules}
    fields = [_field_from_dict(f, by_path) for f in obj.get("fields", [])]
    interfaces = [_type_ref_from_dict(i) for i in obj.get("interfaces", [])]
    return TypeDefinition(
        name=obj["name"],
        kind=TypeKind(obj["kind"]),
        description=obj.get("description"),
        span=_span_from_list(obj["span"]),
        name_span=_span_from_list(obj["nameSpan"]),
        extension_spans=[_span_from_list(s) for s in obj.get("extensions", [])],
        interfaces=[i for i in interfaces if isinstance(i, NamedTypeRef)],
        fields=fields,
        values=[_enum_value_from_dict(v) for v in obj.get("values", [])],
        resolver_modules=modules,
        resolver_bindings={f.name: f.resolver for f in fields if f.resolver is not None},
    )


def _enum_value_to_dict(value: EnumValueDecl) -> dict[str, Any]:
    d: dict[str, Any] = {"name": value.name, "span": _span_to_list(value.span)}
    if value.server_value is not None:
        d["server"] = value.server_value
    if value.description is not None:
        d["description"] = value.description
    if value.deprecated is not None:
        d["deprecated"] = _deprecated_to_dict(value.deprecated)
    return d


def _enum_value_from_dict(obj: dict[str, Any]) -> EnumValueDecl:
    span = _span_from_list(obj["span"])
    directives: list[Any] = []
    if "server" in obj:
        directives.append(ServerDirective(value=obj["server"], span=span))
    if "deprecated" in obj:
        directives.append(_deprecated_from_dict(obj["deprecated"]))
    return EnumValueDecl(name=obj["name"], description=obj.get("description"), directives=directives, span=span)


def _deprecated_to_dict(directive: DeprecatedDirective) -> dict[str, Any]:
    d: dict[str, Any] = {"span": _span_to_list(directive.span)}
    if directive.reason is not None:
        d["reason"] = directive.reason
    return d


def _deprecated_from_dict(obj: dict[str, Any]) -> DeprecatedDirective:
    return DeprecatedDirective(reason=obj.get("reason"), span=_span_from_list(obj["span"]))


def _module_to_dict(module: ResolverModule) -> dict[str, Any]:
    return {
        "file": module.file,
        "path": module.path,
        "interface": module.interface_name,
        "span": _span_to_list(module.span),
    }


def _module_from_dict(obj: dict[str, Any]) -> ResolverModule:
    return ResolverModule(
        file=obj["file"],
        path=obj["path"],
        interface_name=obj["interface"],
        span=_span_from_list(obj["span"]),
    )


def _field_to_dict(f: ClassifiedField) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": f.name,
        "type": _type_ref_to_dict(f.type_ref),
        "projection": f.projection.value,
        "resolved": f.resolved,
        "span": _span_to_list(f.span),
    }
    if f.arguments:
        d["args"] = [_argument_to_dict(a) for a in f.arguments]
    if f.description is not None:
        d["description"] = f.description
    if f.deprecated is not None:
        d["deprecated"] = _deprecated_to_dict(f.deprecated)
    if f.resolver is not None:
        d["resolver"] = {
            "module": f.resolver.module.path,
            "function": f.resolver.function,
            "span": _span_to_list(f.resolver.span),
        }
    elif f.resolve_span is not None:
        d["resolveSpan"] = _span_to_list(f.resolve_span)
    return d


def _field_from_dict(obj: dict[str, Any], modules: dict[str, ResolverModule]) -> ClassifiedField:
    resolver: FieldResolver | None = None
    resolve_span: SourceSpan | None = None
    if "resolver" in obj:
        r = obj["resolver"]
        resolve_span = _span_from_list(r["span"])
        resolver = FieldResolver(module=modules[r["module"]], function=r["function"], span=resolve_span)
    elif "resolveSpan" in obj:
        resolve_span = _span_from_list(obj["resolveSpan"])
    return ClassifiedField(
        name=obj["name"],
        type_ref=_type_ref_from_dict(obj["type"]),
        arguments=[_argument_from_dict(a) for a in obj.get("args", [])],
        description=obj.get("description"),
        deprecated=_deprecated_from_dict(obj["deprecated"]) if "deprecated" in obj else None,
        resolver=resolver,
        resolve_span=resolve_span,
        span=_span_from_list(obj["span"]),
        projection=Projection(obj["projection"]),
        resolved=obj["resolved"],
    )


def _argument_to_dict(arg: InputValueDecl) -> dict[str, Any]:
    d: dict[str, Any] = {"name": arg.name, "type": _type_ref_to_dict(arg.type_ref), "span": _span_to_list(arg.span)}
    if arg.default_value is not None:
        d["default"] = _value_to_dict(arg.default_value)
    if arg.description is not None:
        d["description"] = arg.description
    return d


def _argument_from_dict(obj: dict[str, Any]) -> InputValueDecl:
    return InputValueDecl(
        name=obj["name"],
        type_ref=_type_ref_from_dict(obj["type"]),
        default_value=_value_from_dict(obj["default"]) if "default" in obj else None,
        description=obj.get("description"),
        span=_span_from_list(obj["span"]),
    )


def _value_to_dict(value: ConstValue) -> dict[str, Any]:
    d: dict[str, Any] = {"k": value.kind.value, "s": _span_to_list(value.span)}
    if value.kind is ValueKind.LIST:
        d["i"] = [_value_to_dict(item) for item in value.items]
    elif value.kind is ValueKind.OBJECT:
        d["f"] = [{"n": f.name, "v": _value_to_dict(f.value)} for f in value.fields]
    else:
        d["t"] = value.text
    return d


def _value_from_dict(obj: dict[str, Any]) -> ConstValue:
    return ConstValue(
        kind=ValueKind(obj["k"]),
        span=_span_from_list(obj["s"]),
        text=obj.get("t", ""),
        items=[_value_from_dict(i) for i in obj.get("i", [])],
        fields=[ObjectValueField(name=f["n"], value=_value_from_dict(f["v"])) for f in obj.get("f", [])],
    )


def _type_ref_to_dict(type_ref: TypeRef) -> dict[str, Any]:
    """Encode a TypeRef as a tagged dict with compact keys."""
    if isinstance(type_ref, ListTypeRef):
        return {"k": "list", "i": _type_ref_to_dict(type_ref.of_type), "s": _span_to_list(type_ref.span)}
    if isinstance(type_ref, NonNullTypeRef):
        return {"k": "non_null", "i": _type_ref_to_dict(type_ref.of_type), "s": _span_to_list(type_ref.span)}
    # NamedTypeRef is the only remaining variant.
    assert isinstance(type_ref, NamedTypeRef)
    return {"k": "named", "n": type_ref.name, "s": _span_to_list(type_ref.span)}


def _type_ref_from_dict(obj: dict[str, Any]) -> TypeRef:
    """Decode a TypeRef from a tagged dict."""
    kind = obj["k"]
    span = _span_from_list(obj["s"])
    if kind == "list":
        return ListTypeRef(of_type=_type_ref_from_dict(obj["i"]), span=span)
    if kind == "non_null":
        return NonNullTypeRef(of_type=_type_ref_from_dict(obj["i"]), span=span)
    if kind == "named":
        return NamedTypeRef(name=obj["n"], span=span)
    raise ValueError(f"Unknown type ref kind: {kind!r}")
