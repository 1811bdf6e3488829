from .config import CodegenConfig
from .deps import collect_dependencies
from .moduledef import (
    ModuleDef,
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
    ProductTypeDef,
    SumTypeDef,
    PlainEnumTypeDef,
    MAX_ENUM_VARIANTS,
)
from .resolver import TypeResolver

CPP_PRIMITIVES = {
    "bool": "bool",
    "i8":   "int8_t",
    "u8":   "uint8_t",
    "i16":  "int16_t",
    "u16":  "uint16_t",
    "i32":  "int32_t",
    "u32":  "uint32_t",
    "i64":  "int64_t",
    "u64":  "uint64_t",
    "i128": "SpacetimeDb::Types::int128_t_placeholder",
    "u128": "SpacetimeDb::Types::uint128_t_placeholder",
    "i256": "SpacetimeDb::sdk::i256_placeholder",
    "u256": "SpacetimeDb::sdk::u256_placeholder",
    "f32":  "float",
    "f64":  "double",
}

STANDARD_INCLUDES = (
    "cstdint",
    "string",
    "vector",
    "optional",
    "memory",
    "variant",
    "utility",
    "stdexcept",
)

UNHANDLED_TYPE = "/* unhandled type */"


class CodeGen:
    """
    Emits one C++ header per entity. Every gen_* call starts a fresh
    buffer, so a CodeGen can be reused across all entities of a module.
    """

    def __init__(self, module: ModuleDef, config: CodegenConfig):
        self.module = module
        self.config = config
        self.resolver = TypeResolver(module)
        self.typespace = module.typespace_for_generate()
        self.out: list[str] = []

    def emit(self, line: str = ""):
        self.out.append(line)

    def _finish(self) -> str:
        text = "\n".join(self.out) + "\n"
        self.out = []
        return text

    # ---
    # File names
    # ---

    def type_filename(self, type_name: ScopedTypeName) -> str:
        return f"{self.config.types_dir}/{type_name.name()}.g.h"

    def table_filename(self, table: TableDef) -> str:
        return f"{self.config.types_dir}/{table.name}.g.h"

    def reducer_filename(self, reducer: ReducerDef) -> str:
        return f"{self.config.types_dir}/{reducer.name}.g.h"

    # ---
    # Entities
    # ---

    def gen_type(self, typ: TypeDef) -> str:
        type_name = typ.name.name()
        definition = self.typespace[typ.ty]

        if isinstance(definition, ProductTypeDef):
            deps = collect_dependencies(self.resolver, definition.elements, exclude=type_name)
        elif isinstance(definition, SumTypeDef):
            deps = collect_dependencies(self.resolver, definition.variants, exclude=type_name)
        else:
            deps = []

        self.write_header_comment()
        self.write_includes(deps)
        self.write_namespace_begin()

        if isinstance(definition, ProductTypeDef):
            self.write_product_type(type_name, definition)
            self.write_namespace_end()
        elif isinstance(definition, SumTypeDef):
            self.write_sum_type(type_name, definition)
            self.write_namespace_end()
        elif isinstance(definition, PlainEnumTypeDef):
            self.write_plain_enum(type_name, definition)
            self.write_namespace_end()
            # free functions live in the runtime namespace, after ours is closed
            self.write_plain_enum_serialization(type_name, definition)
        else:
            raise TypeError(f"Unknown type definition {definition!r} for '{type_name}'")

        return self._finish()

    def gen_table(self, table: TableDef) -> str:
        row_type = Ref(table.product_type_ref)
        members: list[tuple[str, TypeUse]] = [("row", row_type)]
        row_def = self.typespace.get(table.product_type_ref)
        if isinstance(row_def, ProductTypeDef):
            members += row_def.elements
        deps = collect_dependencies(self.resolver, members)

        self.write_header_comment()
        self.write_includes(deps)
        self.write_namespace_begin()
        self.emit(f"// Table definition for {table.name}")
        self.emit(f"// Row type: {self.cpp_type(row_type)}")
        self.emit("// INCOMPLETE: opaque handle until table accessors are generated")
        self.emit(f"using TableDef_{table.name} = void*;")
        self.emit()
        self.write_namespace_end()
        return self._finish()

    def gen_reducer(self, reducer: ReducerDef) -> str:
        deps = collect_dependencies(self.resolver, reducer.params)

        self.write_header_comment()
        self.write_includes(deps)
        self.write_namespace_begin()
        self.emit(f"// Reducer definition for {reducer.name}")
        for pname, ptype in reducer.params:
            self.emit(f"//   {self.cpp_type(ptype)} {pname}")
        self.emit("// INCOMPLETE: opaque handle until reducer argument types are generated")
        self.emit(f"using ReducerDef_{reducer.name} = void*;")
        self.emit()
        self.write_namespace_end()
        return self._finish()

    # ---
    # Boilerplate
    # ---

    def write_header_comment(self):
        self.emit("// THIS FILE IS AUTOMATICALLY GENERATED BY CPPBINDGEN. EDITS TO THIS FILE")
        self.emit("// WILL NOT BE SAVED. DO NOT HAND-EDIT; MODIFY THE MODULE DEFINITION INSTEAD.")
        self.emit()
        self.emit("// This was generated using cppbindgen.")
        self.emit()

    def write_includes(self, deps: list[str]):
        self.emit("#pragma once")
        self.emit()
        for header in STANDARD_INCLUDES:
            self.emit(f"#include <{header}>")
        self.emit(f'#include "{self.config.runtime_header}"')
        for dep in deps:
            self.emit(f'#include "{dep}.g.h"')
        self.emit()

    def write_namespace_begin(self):
        self.emit(f"namespace {self.config.namespace} {{")
        self.emit()

    def write_namespace_end(self):
        self.emit(f"}} // namespace {self.config.namespace}")

    # ---
    # Type uses
    # ---

    def cpp_type(self, typ: TypeUse) -> str:
        if isinstance(typ, Primitive):
            return CPP_PRIMITIVES[typ.kind]
        if isinstance(typ, Array):
            return f"std::vector<{self.cpp_type(typ.elem)}>"
        if isinstance(typ, Option):
            return f"std::optional<{self.cpp_type(typ.inner)}>"
        if isinstance(typ, String):
            return "std::string"
        if isinstance(typ, Unit):
            return "std::monostate"
        if isinstance(typ, Ref):
            return self.resolver.resolve(typ.ref)
        # reserved shapes: fail at C++ compile time rather than here
        return UNHANDLED_TYPE

    # ---
    # Shapes
    # ---

    def write_serialization_decls(self):
        rt = self.config.runtime_namespace
        self.emit("    // BSATN serialization support")
        self.emit(f"    void bsatn_serialize({rt}::Writer& writer) const;")
        self.emit(f"    void bsatn_deserialize({rt}::Reader& reader);")

    def write_product_type(self, type_name: str, product: ProductTypeDef):
        rt = self.config.runtime_namespace
        self.emit(f"struct {type_name} {{")
        for field_name, field_type in product.elements:
            self.emit(f"    {self.cpp_type(field_type)} {field_name};")
        self.emit()

        self.emit(f"    {type_name}() = default;")
        self.emit()

        # parameters and initializers both follow wire order
        if product.elements:
            params = ", ".join(
                f"{self.cpp_type(field_type)} {field_name}"
                for field_name, field_type in product.elements
            )
            inits = ", ".join(
                f"{field_name}({field_name})" for field_name, _ in product.elements
            )
            self.emit(f"    {type_name}({params})")
            self.emit(f"        : {inits} {{}}")
            self.emit()

        self.write_serialization_decls()
        self.emit()
        self.emit("    // Static factory method for BSATN deserialization")
        self.emit(f"    static {type_name} from_bsatn({rt}::Reader& reader) {{")
        self.emit(f"        {type_name} result;")
        self.emit("        result.bsatn_deserialize(reader);")
        self.emit("        return result;")
        self.emit("    }")
        self.emit("};")
        self.emit()

    def write_sum_type(self, type_name: str, sum_def: SumTypeDef):
        self.emit(f"class {type_name} {{")
        self.emit("public:")
        self.emit("    enum class Tag : uint8_t {")
        for i, (variant_name, _) in enumerate(sum_def.variants):
            self.emit(f"        {variant_name} = {i},")
        self.emit("    };")
        self.emit()

        # alternative index == wire tag
        payloads = ", ".join(self.cpp_type(payload) for _, payload in sum_def.variants)
        self.emit(f"    using Storage = std::variant<{payloads or 'std::monostate'}>;")
        self.emit()
        self.emit(f"    {type_name}() = default;")
        self.emit()

        for i, (variant_name, payload) in enumerate(sum_def.variants):
            # a member function cannot share its class's name
            factory = f"make_{variant_name}" if variant_name == type_name else variant_name
            if isinstance(payload, Unit):
                self.emit(f"    static {type_name} {factory}() {{")
                self.emit(f"        {type_name} result;")
                self.emit(f"        result.value_.template emplace<{i}>();")
            else:
                self.emit(f"    static {type_name} {factory}({self.cpp_type(payload)} value) {{")
                self.emit(f"        {type_name} result;")
                self.emit(f"        result.value_.template emplace<{i}>(std::move(value));")
            self.emit("        return result;")
            self.emit("    }")
            self.emit()

        self.emit("    Tag get_tag() const { return static_cast<Tag>(value_.index()); }")
        self.emit("    const Storage& value() const { return value_; }")
        self.emit()
        self.write_serialization_decls()
        self.emit()
        self.emit("private:")
        self.emit("    Storage value_;")
        self.emit("};")
        self.emit()

    def write_plain_enum(self, type_name: str, plain_enum: PlainEnumTypeDef):
        self.emit(f"enum class {type_name} : uint8_t {{")
        for i, variant in enumerate(plain_enum.variants):
            self.emit(f"    {variant} = {i},")
        self.emit("};")
        self.emit()

    def write_plain_enum_serialization(self, type_name: str, plain_enum: PlainEnumTypeDef):
        qualified = f"{self.config.namespace}::{type_name}"
        count = len(plain_enum.variants)
        self.emit()
        self.emit(f"// BSATN serialization for {type_name}")
        self.emit(f"namespace {self.config.runtime_namespace} {{")
        self.emit(f"    inline void serialize(Writer& w, const {qualified}& value) {{")
        self.emit("        w.write_u8(static_cast<uint8_t>(value));")
        self.emit("    }")
        self.emit()
        self.emit("    template<>")
        self.emit(f"    inline {qualified} deserialize<{qualified}>(Reader& r) {{")
        self.emit("        uint8_t tag = r.read_u8();")
        if count < MAX_ENUM_VARIANTS:
            self.emit(f"        if (tag >= {count}) {{")
            self.emit(f'            throw std::out_of_range("invalid {type_name} tag");')
            self.emit("        }")
        self.emit(f"        return static_cast<{qualified}>(tag);")
        self.emit("    }")
        self.emit(f"}} // namespace {self.config.runtime_namespace}")
