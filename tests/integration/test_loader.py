import pytest

from cppbindgen.loader import load_module, parse_module, parse_type_use
from cppbindgen.moduledef import (
    ModuleDefError, Primitive, Array, Option, String, Unit, Ref, Reserved,
    ProductTypeDef, SumTypeDef, PlainEnumTypeDef, ScopedTypeName,
)


# --- success cases: (json type, expected type use)
ok_cases = [
("i32", Primitive("i32")),
("string", String()),
("unit", Unit()),
("timestamp", Reserved("timestamp")),
({"ref": 3}, Ref(3)),
({"array": {"option": "bool"}}, Array(Option(Primitive("bool")))),
]

@pytest.mark.parametrize("data,expected", ok_cases)
def test_type_uses_ok(data, expected):
    assert parse_type_use(data, "$") == expected


def test_module_catalogs_keep_declaration_order():
    module = parse_module({
        "typespace": [
            {"product": [["b", "u8"], ["a", "u8"]]},
            {"sum": [["x", "unit"]]},
            {"enum": ["One", "Two"]},
        ],
        "types": [
            {"name": "Rec", "scope": ["outer", "inner"], "ref": 0},
            {"name": "Choice", "ref": 1},
        ],
        "tables": [{"name": "recs", "ref": 0}],
        "reducers": [{"name": "go", "params": [["n", "u32"]]}],
    })
    typespace = module.typespace_for_generate()
    assert isinstance(typespace[0], ProductTypeDef)
    assert [n for n, _ in typespace[0].elements] == ["b", "a"]
    assert isinstance(typespace[1], SumTypeDef)
    assert isinstance(typespace[2], PlainEnumTypeDef)
    assert typespace.get(3) is None

    types = module.types()
    assert types[0].name == ScopedTypeName(("outer", "inner"), "Rec")
    assert str(types[0].name) == "outer::inner::Rec"
    assert [t.name.name() for t in types] == ["Rec", "Choice"]
    assert [t.name for t in module.tables()] == ["recs"]
    assert module.reducers()[0].params == [("n", Primitive("u32"))]


def test_missing_catalogs_default_to_empty():
    module = parse_module({})
    assert module.types() == []
    assert module.tables() == []
    assert module.reducers() == []


def test_load_module_from_file(tmp_path):
    path = tmp_path / "module.json"
    path.write_text('{"typespace": [{"enum": ["A"]}], "types": [{"name": "E", "ref": 0}]}', encoding="utf-8")
    module = load_module(path)
    assert module.types()[0].name.name() == "E"


def test_load_module_reports_bad_json(tmp_path):
    path = tmp_path / "module.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ModuleDefError) as exc:
        load_module(path)
    assert "Invalid JSON" in str(exc.value)


# --- error cases: (document, expected position, substring of message)
err_cases = [
([], "$", "must be an object"),
({"typespace": {}}, "$.typespace", "must be a list"),
({"typespace": [{"record": []}]}, "$.typespace[0]", "Unknown type definition 'record'"),
({"typespace": [{"product": [["x"]]}]}, "$.typespace[0].product[0]", "[name, type] pair"),
({"typespace": [{"product": [["x", "int"]]}]}, "$.typespace[0].product[0][1]", "Unknown type 'int'"),
({"typespace": [{"sum": [["x", {"map": "u8"}]]}]}, "$.typespace[0].sum[0][1]", "Unknown type constructor 'map'"),
({"typespace": [{"product": [["x", {"ref": -1}]]}]}, "$.typespace[0].product[0][1].ref", "type reference index"),
({"typespace": [{"enum": ["A", 1]}]}, "$.typespace[0].enum", "list of names"),
({"types": [{"ref": 0}]}, "$.types[0]", "Missing 'name'"),
({"types": [{"name": "T", "ref": True}]}, "$.types[0].ref", "type reference index"),
({"types": [{"name": "T", "scope": "a", "ref": 0}]}, "$.types[0].scope", "list of names"),
({"tables": [{"name": "t"}]}, "$.tables[0].ref", "type reference index"),
({"reducers": [{"name": "r", "params": {}}]}, "$.reducers[0].params", "[name, type] pairs"),
]

@pytest.mark.parametrize("data,pos,needle", err_cases)
def test_loader_errors(data, pos, needle):
    with pytest.raises(ModuleDefError) as exc:
        parse_module(data)
    assert exc.value.pos == pos
    assert needle in str(exc.value)
