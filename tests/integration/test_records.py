import pytest
from bindgen_test import header, lines, entity_includes, record_module

point = record_module("Point", [["x", "i32"], ["y", "i32"]])


def test_point_declaration():
    out = lines(header(point, "Point"))
    start = out.index("struct Point {")
    assert out[start + 1] == "    int32_t x;"
    assert out[start + 2] == "    int32_t y;"
    assert "    Point() = default;" in out
    assert "    Point(int32_t x, int32_t y)" in out
    assert "        : x(x), y(y) {}" in out
    assert "    void bsatn_serialize(SpacetimeDb::bsatn::Writer& writer) const;" in out
    assert "    void bsatn_deserialize(SpacetimeDb::bsatn::Reader& reader);" in out


def test_point_has_only_standard_includes():
    text = header(point, "Point")
    assert entity_includes(text) == []
    assert '#include "spacetimedb/bsatn/bsatn.h"' in text
    assert "#include <cstdint>" in text


def test_from_bsatn_factory_deserializes_into_default():
    text = header(point, "Point")
    assert (
        "    static Point from_bsatn(SpacetimeDb::bsatn::Reader& reader) {\n"
        "        Point result;\n"
        "        result.bsatn_deserialize(reader);\n"
        "        return result;\n"
        "    }"
    ) in text


def test_empty_record_has_no_value_constructor():
    out = lines(header(record_module("Empty", []), "Empty"))
    assert "    Empty() = default;" in out
    assert not any(l.startswith("    Empty(") for l in out)


# field order must survive regardless of field type
def test_field_order_is_preserved():
    fields = [["zeta", "string"], ["alpha", "u8"], ["mid", {"array": "f64"}], ["beta", "bool"]]
    out = lines(header(record_module("Mixed", fields), "Mixed"))
    start = out.index("struct Mixed {")
    assert out[start + 1:start + 5] == [
        "    std::string zeta;",
        "    uint8_t alpha;",
        "    std::vector<double> mid;",
        "    bool beta;",
    ]
    assert "    Mixed(std::string zeta, uint8_t alpha, std::vector<double> mid, bool beta)" in out
    assert "        : zeta(zeta), alpha(alpha), mid(mid), beta(beta) {}" in out


# --- type-use rendering: (field type, expected C++ type)
type_cases = [
("bool", "bool"),
("i8", "int8_t"),
("u16", "uint16_t"),
("i64", "int64_t"),
("u64", "uint64_t"),
("f32", "float"),
("f64", "double"),
("u128", "SpacetimeDb::Types::uint128_t_placeholder"),
("i256", "SpacetimeDb::sdk::i256_placeholder"),
("string", "std::string"),
({"array": "u8"}, "std::vector<uint8_t>"),
({"option": "string"}, "std::optional<std::string>"),
({"array": {"option": "i32"}}, "std::vector<std::optional<int32_t>>"),
("identity", "/* unhandled type */"),
("schedule_at", "/* unhandled type */"),
]

@pytest.mark.parametrize("field_type,expected", type_cases)
def test_field_type_rendering(field_type, expected):
    out = lines(header(record_module("Holder", [["value", field_type]]), "Holder"))
    assert f"    {expected} value;" in out


def test_named_reference_renders_declared_name():
    module = record_module(
        "Line", [["start", {"ref": 1}], ["end", {"ref": 1}]],
        extra_typespace=[{"product": [["x", "i32"]]}],
        extra_types=[{"name": "Point", "ref": 1}],
    )
    out = lines(header(module, "Line"))
    assert "    Point start;" in out
    assert "    Point end;" in out
    assert entity_includes("\n".join(out)) == ["Point"]


def test_anonymous_reference_renders_placeholder():
    module = record_module(
        "Outer", [["inner", {"ref": 1}], ["tag", {"ref": 2}], ["choice", {"ref": 3}]],
        extra_typespace=[
            {"product": [["x", "i32"]]},
            {"enum": ["A", "B"]},
            {"sum": [["a", "unit"]]},
        ],
    )
    out = lines(header(module, "Outer"))
    assert "    ProductType_1 inner;" in out
    assert "    PlainEnum_2 tag;" in out
    assert "    SumType_3 choice;" in out


def test_dangling_reference_renders_typeref_placeholder():
    out = lines(header(record_module("Broken", [["lost", {"ref": 42}]]), "Broken"))
    assert "    TypeRef_42 lost;" in out
    assert entity_includes("\n".join(out)) == []


def test_self_reference_does_not_include_itself():
    module = record_module("Node", [["children", {"array": {"ref": 0}}]])
    text = header(module, "Node")
    assert "    std::vector<Node> children;" in text
    assert entity_includes(text) == []
