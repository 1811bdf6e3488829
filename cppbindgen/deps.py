"""
deps.py

Collects the other generated headers an entity must include. Only the
entity's own fields are walked: a header that includes Q.g.h gets Q's own
includes through the preprocessor, so dependencies of dependencies are
never listed.
"""
from .moduledef import Array, Option, Ref, TypeUse
from .resolver import TypeResolver, is_placeholder


def collect_type_dependencies(resolver: TypeResolver, typ: TypeUse, deps: set[str]) -> None:
    if isinstance(typ, Array):
        collect_type_dependencies(resolver, typ.elem, deps)
    elif isinstance(typ, Option):
        collect_type_dependencies(resolver, typ.inner, deps)
    elif isinstance(typ, Ref):
        name = resolver.resolve(typ.ref)
        # anonymous shapes have no header of their own
        if not is_placeholder(name):
            deps.add(name)
    # primitives, strings, unit and reserved shapes need no include


def collect_dependencies(resolver: TypeResolver, members: list[tuple[str, TypeUse]],
                         exclude: str | None = None) -> list[str]:
    """
    Return the sorted, deduplicated names referenced by `members`, a list of
    (name, type use) pairs: record fields, union variants or reducer params.
    `exclude` drops the entity's own name so a self-referencing type does
    not include itself.
    """
    deps: set[str] = set()
    for _, member_type in members:
        collect_type_dependencies(resolver, member_type, deps)
    deps.discard(exclude)
    return sorted(deps)
