from __future__ import annotations

import argparse
import importlib
import json
import sys
from collections.abc import Sequence
from typing import TextIO

from interface_factory.config.loader import ConfigError, load_settings, settings_from_env
from interface_factory.contracts.inspector import TypeIsNotAnInterface, UnsupportedMemberError
from interface_factory.factory import InterfaceObjectFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="interface-factory")
    parser.add_argument("--config")
    commands = parser.add_subparsers(dest="command", required=True)
    describe = commands.add_parser("describe", help="print the resolved contract of an interface as JSON")
    describe.add_argument("target", help="module.path:QualifiedName")
    describe.add_argument("--indent", type=int, default=2)
    return parser


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    return build_parser().parse_args(list(argv))


def load_target(target: str) -> object:
    # "package.module:Outer.Inner" -> the named attribute of the imported module.
    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"Target must look like 'module.path:Name', got {target!r}")
    value: object = importlib.import_module(module_name)
    for part in qualname.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as exc:
            raise ValueError(f"{module_name} has no attribute path {qualname!r}") from exc
    return value


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    args = parse_args(list(argv) if argv is not None else sys.argv[1:])
    try:
        settings = load_settings(args.config) if args.config else settings_from_env()
        factory = InterfaceObjectFactory(settings)
        contract = factory.describe(load_target(args.target))
    except (ConfigError, TypeIsNotAnInterface, UnsupportedMemberError, ImportError, ValueError) as exc:
        print(f"error: {exc}", file=err)
        return 2
    print(json.dumps(contract.to_dict(), indent=args.indent), file=out)
    return 0
