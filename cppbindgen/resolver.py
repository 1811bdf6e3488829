"""
resolver.py

Maps type references to the C++ name used at their use sites.
"""
from .moduledef import ModuleDef, ProductTypeDef, SumTypeDef, PlainEnumTypeDef

# Prefixes of the names synthesized for references that no named type claims
PLACEHOLDER_PREFIXES = ("ProductType_", "SumType_", "PlainEnum_", "TypeRef_")


def is_placeholder(name: str) -> bool:
    return name.startswith(PLACEHOLDER_PREFIXES)


class TypeResolver:
    """
    Resolves references against one module. The ref -> name table is
    built once; when several named types share a reference the first one
    declared wins.
    """

    def __init__(self, module: ModuleDef):
        self.module = module
        self.typespace = module.typespace_for_generate()
        self.names: dict[int, str] = {}
        for typ in module.types():
            self.names.setdefault(typ.ty, typ.name.name())

    def resolve(self, ref: int) -> str:
        name = self.names.get(ref)
        if name is not None:
            return name

        definition = self.typespace.get(ref)
        if isinstance(definition, ProductTypeDef):
            return f"ProductType_{ref}"
        if isinstance(definition, SumTypeDef):
            return f"SumType_{ref}"
        if isinstance(definition, PlainEnumTypeDef):
            return f"PlainEnum_{ref}"
        return f"TypeRef_{ref}"
