#!/usr/bin/env python3
"""
loader.py

Reads a module definition from JSON into the in-memory model.

Only the document's shape is checked here. Whether every reference points
into the typespace is left to whoever produced the document; the
generator degrades unknown references to placeholder names.
"""
import json
from pathlib import Path

from .moduledef import (
    ModuleDef,
    ModuleDefError,
    Typespace,
    TypeDef,
    TableDef,
    ReducerDef,
    ScopedTypeName,
    TypeUse,
    Primitive,
    Array,
    Option,
    String,
    Unit,
    Ref,
    Reserved,
    ProductTypeDef,
    SumTypeDef,
    PlainEnumTypeDef,
    PRIMITIVE_KINDS,
    RESERVED_KINDS,
)


def load_module(path: str | Path) -> ModuleDef:
    src = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(src)
    except json.JSONDecodeError as e:
        raise ModuleDefError(f"Invalid JSON: {e.msg}", f"{path}:{e.lineno}:{e.colno}") from e
    return parse_module(data)


def parse_module(data) -> ModuleDef:
    if not isinstance(data, dict):
        raise ModuleDefError("Module definition must be an object", "$")

    typespace = Typespace([
        parse_type_def(d, f"$.typespace[{i}]")
        for i, d in enumerate(_list(data, "typespace", "$"))
    ])
    types = [
        parse_named_type(d, f"$.types[{i}]")
        for i, d in enumerate(_list(data, "types", "$"))
    ]
    tables = [
        parse_table(d, f"$.tables[{i}]")
        for i, d in enumerate(_list(data, "tables", "$"))
    ]
    reducers = [
        parse_reducer(d, f"$.reducers[{i}]")
        for i, d in enumerate(_list(data, "reducers", "$"))
    ]
    return ModuleDef(typespace, types, tables, reducers)


def parse_type_use(data, pos: str) -> TypeUse:
    if isinstance(data, str):
        if data in PRIMITIVE_KINDS:
            return Primitive(data)
        if data == "string":
            return String()
        if data == "unit":
            return Unit()
        if data in RESERVED_KINDS:
            return Reserved(data)
        raise ModuleDefError(f"Unknown type '{data}'", pos)

    if isinstance(data, dict) and len(data) == 1:
        (kind, arg), = data.items()
        if kind == "array":
            return Array(parse_type_use(arg, f"{pos}.array"))
        if kind == "option":
            return Option(parse_type_use(arg, f"{pos}.option"))
        if kind == "ref":
            return Ref(_index(arg, f"{pos}.ref"))
        raise ModuleDefError(f"Unknown type constructor '{kind}'", pos)

    raise ModuleDefError(f"Expected a type, got {data!r}", pos)


def parse_type_def(data, pos: str):
    if not isinstance(data, dict) or len(data) != 1:
        raise ModuleDefError("Expected one of 'product', 'sum' or 'enum'", pos)
    (kind, body), = data.items()
    if kind == "product":
        return ProductTypeDef(_members(body, f"{pos}.product"))
    if kind == "sum":
        variants = _members(body, f"{pos}.sum")
        try:
            return SumTypeDef(variants)
        except ModuleDefError as e:
            raise ModuleDefError(e.message, f"{pos}.sum") from e
    if kind == "enum":
        if not isinstance(body, list) or not all(isinstance(v, str) for v in body):
            raise ModuleDefError("Enum variants must be a list of names", f"{pos}.enum")
        try:
            return PlainEnumTypeDef(body)
        except ModuleDefError as e:
            raise ModuleDefError(e.message, f"{pos}.enum") from e
    raise ModuleDefError(f"Unknown type definition '{kind}'", pos)


def parse_named_type(data, pos: str) -> TypeDef:
    name = _name(data, pos)
    scope = data.get("scope", [])
    if not isinstance(scope, list) or not all(isinstance(s, str) for s in scope):
        raise ModuleDefError("'scope' must be a list of names", f"{pos}.scope")
    return TypeDef(ScopedTypeName(tuple(scope), name), _index(data.get("ref"), f"{pos}.ref"))


def parse_table(data, pos: str) -> TableDef:
    name = _name(data, pos)
    return TableDef(name, _index(data.get("ref"), f"{pos}.ref"))


def parse_reducer(data, pos: str) -> ReducerDef:
    name = _name(data, pos)
    return ReducerDef(name, _members(data.get("params", []), f"{pos}.params"))


def _list(data: dict, key: str, pos: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ModuleDefError(f"'{key}' must be a list", f"{pos}.{key}")
    return value


def _name(data, pos: str) -> str:
    if not isinstance(data, dict):
        raise ModuleDefError("Expected an object", pos)
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ModuleDefError("Missing 'name'", pos)
    return name


def _index(value, pos: str) -> int:
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ModuleDefError(f"Expected a type reference index, got {value!r}", pos)
    return value


def _members(data, pos: str) -> list[tuple[str, TypeUse]]:
    if not isinstance(data, list):
        raise ModuleDefError("Expected a list of [name, type] pairs", pos)
    members = []
    for i, member in enumerate(data):
        if not (isinstance(member, list) and len(member) == 2 and isinstance(member[0], str)):
            raise ModuleDefError("Expected a [name, type] pair", f"{pos}[{i}]")
        members.append((member[0], parse_type_use(member[1], f"{pos}[{i}][1]")))
    return members
