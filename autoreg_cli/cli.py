"""Import registration modules, then list or batch-initialize their entries."""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

import yaml

from autoreg_core import __version__
from autoreg_core.config import RegistrySettings, load_settings
from autoreg_core.errors import ConfigError
from autoreg_core.logs import configure_logging
from autoreg_core.registry import BatchReport, Registry, default_registry

FORMATS = ("text", "json", "yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoreg",
        description="Inspect and initialize AutoRegister registrations.",
    )
    parser.add_argument("--version", action="version", version=f"autoreg v{__version__}")
    parser.add_argument("--config", help="settings file (defaults to the user config dir)")
    parser.add_argument("--log-level", dest="log_level", help="diagnostic level, e.g. INFO")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="reject instances that do not match the requested type",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-m",
        "--module",
        action="append",
        default=[],
        help="module to import for its registrations (repeatable)",
    )
    common.add_argument(
        "--path",
        action="append",
        default=[],
        help="directory prepended to sys.path while importing (repeatable)",
    )
    common.add_argument("--format", default="text", choices=FORMATS, help="output format")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    list_cmd = subparsers.add_parser(
        "list", parents=[common], help="list registrations without building them"
    )
    list_cmd.set_defaults(func=_handle_list)

    init_cmd = subparsers.add_parser(
        "init", parents=[common], help="create and initialize registrations by priority"
    )
    init_cmd.add_argument(
        "--max-priority",
        type=int,
        dest="max_priority",
        help="highest priority to include (default from settings)",
    )
    init_cmd.add_argument(
        "--at-priority",
        type=int,
        dest="at_priority",
        help="only run the entries registered at this exact priority",
    )
    init_cmd.set_defaults(func=_handle_init)

    return parser


def main(argv: Sequence[str] | None = None, *, registry: Registry | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings(
            args.config,
            overrides={
                "log_level": args.log_level,
                "strict_types": args.strict,
                "modules": args.module or None,
                "max_priority": getattr(args, "max_priority", None),
            },
        )
    except ConfigError as exc:
        print(f"[autoreg] error: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    target = registry if registry is not None else default_registry(settings)
    failed = _import_modules(settings.modules, [Path(p) for p in args.path])
    if failed:
        return 1
    return func(args, target, settings)


@contextmanager
def _extra_sys_path(paths: Sequence[Path]) -> Iterator[None]:
    added: list[str] = []
    for path in paths:
        entry = str(path.resolve())
        if entry not in sys.path:
            sys.path.insert(0, entry)
            added.append(entry)
    try:
        yield
    finally:
        for entry in added:
            if entry in sys.path:
                sys.path.remove(entry)


def _import_modules(modules: Sequence[str], paths: Sequence[Path]) -> list[str]:
    failed: list[str] = []
    with _extra_sys_path(paths):
        for module in modules:
            try:
                importlib.import_module(module)
            except Exception as exc:
                print(f"[autoreg] error: unable to import {module}: {exc}", file=sys.stderr)
                failed.append(module)
    return failed


def _handle_list(args: argparse.Namespace, registry: Registry, _: RegistrySettings) -> int:
    if args.format == "text":
        registry.dump_entries(sys.stdout)
        return 0
    _emit({"entries": [info.to_dict() for info in registry.entries()]}, args.format)
    return 0


def _handle_init(args: argparse.Namespace, registry: Registry, settings: RegistrySettings) -> int:
    if args.at_priority is not None:
        report = registry.execute_inits_at_priority(args.at_priority)
    else:
        report = registry.execute_prior_inits(settings.max_priority)

    if args.format == "text":
        _print_report(report)
        registry.dump_instances(sys.stdout)
    else:
        _emit(
            {
                "report": report.to_dict(),
                "entries": [info.to_dict() for info in registry.entries()],
            },
            args.format,
        )
    return 0 if report.ok else 1


def _print_report(report: BatchReport) -> None:
    scope = "==" if report.exact else "<="
    print(
        f"[autoreg:init] priority{scope}{report.priority} "
        f"created={len(report.created)} initialized={len(report.initialized)} "
        f"failed={len(report.failed)}"
    )
    for key in report.failed:
        print(f"[autoreg:init] failed {key}")


def _emit(payload: dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2))
    else:
        print(yaml.safe_dump(payload, sort_keys=False), end="")
