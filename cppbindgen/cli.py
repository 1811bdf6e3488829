import sys
import argparse
import logging

from .compiler import CodegenError, compile_file, generate
from .config import CodegenConfig, DEFAULT_RUNTIME_HEADER, DEFAULT_RUNTIME_NAMESPACE
from .loader import load_module
from .moduledef import ModuleDefError


def show_module(module_path: str, config: CodegenConfig, max_lines: int = 100):
    files = generate(load_module(module_path), config)
    for filename, content in files.items():
        print(f"=== {filename} ===")
        lines = content.splitlines()
        for i, line in enumerate(lines[:max_lines]):
            print(f"{i + 1:3}: {line}")
        if len(lines) > max_lines:
            print(f"... ({len(lines) - max_lines} more lines)")
        print()


def _add_config_args(p: argparse.ArgumentParser):
    p.add_argument("--namespace", required=True,
                   help="C++ namespace wrapping every generated declaration")
    p.add_argument("--runtime-header", default=DEFAULT_RUNTIME_HEADER,
                   help="Header providing the BSATN Writer/Reader")
    p.add_argument("--runtime-namespace", default=DEFAULT_RUNTIME_NAMESPACE,
                   help="Namespace of the BSATN Writer/Reader")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="cppbindgen")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="If set, show full Python traceback on errors"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every generated file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen_p = subparsers.add_parser("generate", help="Regenerate C++ headers from a module definition")
    gen_p.add_argument("module", help="Module definition (.json)")
    gen_p.add_argument("out_dir", help="Output directory, deleted and recreated")
    _add_config_args(gen_p)

    show_p = subparsers.add_parser("show", help="Print generated headers without writing them")
    show_p.add_argument("module", help="Module definition (.json)")
    show_p.add_argument("--max-lines", type=int, default=100, help="Lines shown per file")
    _add_config_args(show_p)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    config = CodegenConfig(
        args.namespace,
        runtime_header=args.runtime_header,
        runtime_namespace=args.runtime_namespace,
    )

    try:
        if args.command == "generate":
            files = compile_file(args.module, args.out_dir, config)
            print(f"Generated {len(files)} files in {args.out_dir}")
        elif args.command == "show":
            show_module(args.module, config, args.max_lines)

    except (ModuleDefError, CodegenError) as e:
        if args.debug:
            raise
        print(f"{args.module}: {e}", file=sys.stderr)
        sys.exit(1)

    except OSError as e:
        if args.debug:
            raise
        logging.error(f"Filesystem error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
