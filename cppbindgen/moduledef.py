"""
moduledef.py

In-memory description of a data module: the typespace of algebraic type
definitions, the type uses that appear in fields and arguments, and the
entities (named types, tables, reducers) that each become one generated file.
"""

PRIMITIVE_KINDS = (
    "bool",
    "i8", "u8",
    "i16", "u16",
    "i32", "u32",
    "i64", "u64",
    "i128", "u128",
    "i256", "u256",
    "f32", "f64",
)

# Special SATS types without a C++ rendering yet
RESERVED_KINDS = (
    "identity",
    "connection_id",
    "timestamp",
    "time_duration",
    "schedule_at",
    "never",
)

# Plain enum ordinals and sum tags are written as a single u8 on the wire
MAX_ENUM_VARIANTS = 256


class ModuleDefError(Exception):
    def __init__(self, message, pos=None):
        super().__init__(message)
        self.message = message
        self.pos     = pos

    def __str__(self):
        if self.pos:
            return f"{self.pos}: {self.message}"
        return self.message


# ---
# Type uses
# ---

class TypeUse:
    """Base for every shape a type can take at a use site."""

    def __eq__(self, other):
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self):
        return hash((type(self).__name__, str(self)))


class Primitive(TypeUse):
    def __init__(self, kind: str):
        if kind not in PRIMITIVE_KINDS:
            raise ModuleDefError(f"Unknown primitive kind '{kind}'")
        self.kind = kind

    def __str__(self):
        return self.kind


class Array(TypeUse):
    def __init__(self, elem: TypeUse):
        self.elem = elem

    def __str__(self):
        return f"array<{self.elem}>"


class Option(TypeUse):
    def __init__(self, inner: TypeUse):
        self.inner = inner

    def __str__(self):
        return f"option<{self.inner}>"


class String(TypeUse):
    def __str__(self):
        return "string"


class Unit(TypeUse):
    def __str__(self):
        return "unit"


class Ref(TypeUse):
    def __init__(self, ref: int):
        self.ref = ref

    def __str__(self):
        return f"ref({self.ref})"


class Reserved(TypeUse):
    """A shape the model can carry but no backend renders."""

    def __init__(self, kind: str):
        self.kind = kind

    def __str__(self):
        return f"reserved({self.kind})"


# ---
# Type definitions
# ---

class ProductTypeDef:
    def __init__(self, elements: list[tuple[str, TypeUse]]):
        self.elements = list(elements)   # [(field name, type use), …] in wire order

    def __str__(self):
        fs = ", ".join(f"{n}: {t}" for n, t in self.elements)
        return f"product {{ {fs} }}"


class SumTypeDef:
    def __init__(self, variants: list[tuple[str, TypeUse]]):
        if len(variants) > MAX_ENUM_VARIANTS:
            raise ModuleDefError(
                f"Sum type has {len(variants)} variants, "
                f"at most {MAX_ENUM_VARIANTS} fit in a u8 tag"
            )
        self.variants = list(variants)   # [(variant name, payload), …], index = tag

    def __str__(self):
        vs = " | ".join(f"{n}({t})" for n, t in self.variants)
        return f"sum {{ {vs} }}"


class PlainEnumTypeDef:
    def __init__(self, variants: list[str]):
        if len(variants) > MAX_ENUM_VARIANTS:
            raise ModuleDefError(
                f"Plain enum has {len(variants)} variants, "
                f"at most {MAX_ENUM_VARIANTS} fit in a u8 tag"
            )
        self.variants = list(variants)

    def __str__(self):
        return f"enum {{ {', '.join(self.variants)} }}"


# ---
# Entities
# ---

class ScopedTypeName:
    def __init__(self, scope: tuple[str, ...], name: str):
        self.scope = tuple(scope)
        self._name = name

    def name(self) -> str:
        return self._name

    def __eq__(self, other):
        return (
            isinstance(other, ScopedTypeName)
            and self.scope == other.scope
            and self._name == other._name
        )

    def __hash__(self):
        return hash((self.scope, self._name))

    def __str__(self):
        return "::".join(self.scope + (self._name,))


class TypeDef:
    def __init__(self, name: ScopedTypeName, ty: int):
        self.name = name
        self.ty = ty                     # index into the typespace

    def __str__(self):
        return f"type {self.name} = ref({self.ty})"


class TableDef:
    def __init__(self, name: str, product_type_ref: int):
        self.name = name
        self.product_type_ref = product_type_ref

    def __str__(self):
        return f"table {self.name} of ref({self.product_type_ref})"


class ReducerDef:
    def __init__(self, name: str, params: list[tuple[str, TypeUse]]):
        self.name = name
        self.params = list(params)       # [(arg name, type use), …]

    def __str__(self):
        ps = ", ".join(f"{n}: {t}" for n, t in self.params)
        return f"reducer {self.name}({ps})"


class Typespace:
    def __init__(self, types: list):
        self.types = list(types)

    def get(self, ref: int):
        if 0 <= ref < len(self.types):
            return self.types[ref]
        return None

    def __getitem__(self, ref: int):
        return self.types[ref]

    def __len__(self):
        return len(self.types)


class ModuleDef:
    """
    A fully resolved module. Built once upstream and never mutated while
    bindings are generated from it.
    """

    def __init__(self, typespace: Typespace, types: list[TypeDef],
                 tables: list[TableDef] | None = None,
                 reducers: list[ReducerDef] | None = None):
        self._typespace = typespace
        self._types = list(types)
        self._tables = list(tables or [])
        self._reducers = list(reducers or [])

    def typespace_for_generate(self) -> Typespace:
        return self._typespace

    def types(self) -> list[TypeDef]:
        return list(self._types)

    def tables(self) -> list[TableDef]:
        return list(self._tables)

    def reducers(self) -> list[ReducerDef]:
        return list(self._reducers)

    def __str__(self):
        entities = self._types + self._tables + self._reducers
        return f"Module[{', '.join(str(e) for e in entities)}]"
