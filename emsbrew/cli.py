"""Command line interface: ``emsbrew install``."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from emsbrew.core.config import load_settings
from emsbrew.core.errors import InstallError, MissingDependencyError, UnknownFormulaError
from emsbrew.core.formula import FormulaRegistry
from emsbrew.core.install import FormulaInstaller
from emsbrew.core.observability import configure_logging

_log = logging.getLogger("emsbrew.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="emsbrew")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("install", help="Build and install openEMS")
    p.add_argument("--formula", help="Formula version tag (default: newest)")
    grp = p.add_mutually_exclusive_group()
    grp.add_argument("--with-python", dest="python", action="store_true", default=None,
                     help="Also build the python bindings")
    grp.add_argument("--without-python", dest="python", action="store_false",
                     help="Skip the python bindings")
    p.add_argument("--prefix", type=Path)
    p.add_argument("--source-dir", type=Path)
    p.add_argument("--jobs", "-j", type=int)
    p.add_argument("--sdk-root", type=Path)
    p.add_argument("--cxx-std")
    p.add_argument("--python-exe", dest="python_exe")
    p.add_argument("--state-dir", type=Path)
    p.add_argument("--formula-dir", type=Path, help="Extra formula files (json/yaml)")
    p.add_argument("--config", type=Path, help="Settings file (json/yaml)")
    p.add_argument("--dry-run", action="store_true", help="Print the install plan and exit")
    p.add_argument("-v", "--verbose", action="store_true")

    return parser


def _options(args: argparse.Namespace) -> Dict[str, bool]:
    if args.python is None:
        return {}
    return {"python": bool(args.python)}


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        settings = load_settings(
            args.config,
            overrides={
                "prefix": args.prefix,
                "source_dir": args.source_dir,
                "jobs": args.jobs,
                "sdk_root": args.sdk_root,
                "cxx_std": args.cxx_std,
                "python": args.python_exe,
                "state_dir": args.state_dir,
                "formula": args.formula,
            },
        )
        formula = FormulaRegistry(args.formula_dir).require(settings.formula)
    except (FileNotFoundError, ValidationError, UnknownFormulaError) as exc:
        _log.error("%s", exc)
        return EXIT_USAGE

    installer = FormulaInstaller(formula, settings)

    try:
        if args.dry_run:
            plan = installer.plan(_options(args))
            print(json.dumps(plan.to_dict(), indent=2))
            return EXIT_OK
        result = installer.install(_options(args))
    except ValueError as exc:
        _log.error("%s", exc)
        return EXIT_USAGE
    except MissingDependencyError as exc:
        _log.error("%s", exc)
        return EXIT_USAGE
    except InstallError as exc:
        _log.error("%s", exc)
        return EXIT_FAILED

    _log.info("%s@%s installed into %s", result.formula, result.version_tag, result.prefix)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
