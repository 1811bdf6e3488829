import os
import shutil
import tempfile
from pathlib import Path
import logging

from .codegen_cpp import CodeGen
from .config import CodegenConfig
from .loader import load_module
from .moduledef import ModuleDef


class CodegenError(Exception):
    pass


def generate(module: ModuleDef, config: CodegenConfig) -> dict[str, str]:
    """
    Generate one header per named type, table and reducer, in module order.
    Returns {relative path: text}. Two entities landing on the same path,
    compared case-insensitively, is an error, never a silent overwrite.
    """
    gen = CodeGen(module, config)
    files: dict[str, str] = {}
    # keyed by casefolded path: Person.g.h and person.g.h collide on
    # case-insensitive filesystems
    owners: dict[str, tuple[str, str]] = {}

    def add(path: str, owner: str, code: str):
        key = path.casefold()
        if key in owners:
            first_path, first_owner = owners[key]
            raise CodegenError(
                f"Output path '{path}' of {owner} clashes with '{first_path}' of {first_owner}"
            )
        files[path] = code
        owners[key] = (path, owner)

    for typ in module.types():
        add(gen.type_filename(typ.name), f"type '{typ.name}'", gen.gen_type(typ))
    for table in module.tables():
        add(gen.table_filename(table), f"table '{table.name}'", gen.gen_table(table))
    for reducer in module.reducers():
        add(gen.reducer_filename(reducer), f"reducer '{reducer.name}'", gen.gen_reducer(reducer))

    return files


def regenerate(out_dir: str | Path, files: dict[str, str]) -> None:
    """
    Replace `out_dir` with exactly `files`. Anything already inside
    `out_dir` is removed, including hand-written files.

    The new tree is written to a sibling staging directory and swapped in
    only once complete; if writing fails the previous tree is left as is.
    """
    out = Path(out_dir)
    if out.exists() and not out.is_dir():
        raise NotADirectoryError(f"Output path is not a directory: {out}")
    out.parent.mkdir(parents=True, exist_ok=True)

    staging = Path(tempfile.mkdtemp(prefix=f".{out.name}.", dir=out.parent))
    try:
        for rel_path, code in files.items():
            target = staging / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(code, encoding="utf-8")
    except OSError:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if out.exists():
        backup = Path(tempfile.mkdtemp(prefix=f".{out.name}.old.", dir=out.parent))
        os.rmdir(backup)
        os.rename(out, backup)
        try:
            os.rename(staging, out)
        except OSError:
            os.rename(backup, out)
            shutil.rmtree(staging, ignore_errors=True)
            raise
        logging.debug(f"Swapped {staging} into {out}")
        shutil.rmtree(backup, ignore_errors=True)
        if backup.exists():
            logging.warning(f"Could not remove previous output tree {backup}")
    else:
        os.rename(staging, out)

    for rel_path in files:
        logging.info(f"Generated {out / rel_path}")


def compile_file(module_path: str | Path, out_dir: str | Path, config: CodegenConfig) -> dict[str, str]:
    """
    Read a module definition, generate its bindings and regenerate `out_dir`.
    """
    module = load_module(module_path)
    files = generate(module, config)
    regenerate(out_dir, files)
    return files
