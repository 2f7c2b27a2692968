# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line entry point: `excgen SOURCE... [options]`.

Reads each Python source, generates `<stem>_dispatch.py` for modules that
contain dispatch targets, and reports diagnostics. Exit codes: 0 when no error
diagnostic was produced, 1 otherwise, 2 for configuration problems.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from excgen.config import GeneratorConfig, load_config_json
from excgen.core.diagnostics import has_errors
from excgen.core.errors import ConfigError
from excgen.driver import ModuleResult, generate_paths, output_path_for, write_outputs


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="excgen", description="Generate exception dispatch for @exception_handler classes")
	p.add_argument("source", type=Path, nargs="+", help="Path(s) to Python source file(s)")
	p.add_argument("-o", "--output-dir", type=Path, default=None, help="Write generated modules here (default: next to each source)")
	p.add_argument(
		"-M",
		"--module-root",
		dest="module_roots",
		action="append",
		type=Path,
		default=[],
		help="Import root directory (repeatable); module names are inferred from file paths under these roots",
	)
	p.add_argument("--config", type=Path, default=None, help="Path to an excgen JSON config file")
	p.add_argument("-j", "--jobs", type=int, default=None, help="Number of modules to analyse in parallel")
	p.add_argument("--no-resolve-imports", dest="resolve_imports", action="store_false", default=None, help="Treat imported names as opaque instead of importing their modules")
	p.add_argument("--check", action="store_true", help="Report diagnostics without writing files")
	p.add_argument("--stdout", action="store_true", help="Print generated modules instead of writing files")
	p.add_argument("--json", action="store_true", help="Emit diagnostics and outputs as JSON")
	p.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (repeatable)")
	return p


def _load_config(args: argparse.Namespace) -> GeneratorConfig:
	config = load_config_json(args.config) if args.config is not None else GeneratorConfig()
	if args.jobs is not None and args.jobs < 1:
		raise ConfigError(reason_code="invalid-value", message="--jobs must be a positive integer", key="jobs")
	if args.stdout and args.json:
		raise ConfigError(reason_code="invalid-value", message="--stdout cannot be combined with --json", key="stdout")
	return config.with_overrides(jobs=args.jobs, resolve_imports=args.resolve_imports)


def _print_human(results: List[ModuleResult]) -> None:
	for result in results:
		for diag in result.all_diagnostics:
			print(diag.format_human(), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)
	logging.basicConfig(
		level=logging.WARNING - 10 * min(args.verbose, 2),
		format="%(levelname)s %(name)s: %(message)s",
		stream=sys.stderr,
	)

	try:
		config = _load_config(args)
	except ConfigError as err:
		if args.json:
			print(json.dumps({"exit_code": 2, "error": err.to_dict(), "diagnostics": [], "outputs": []}))
		else:
			print(f"excgen: error: {err.format_human()}", file=sys.stderr)
		return 2

	results = generate_paths(args.source, config=config, roots=args.module_roots)
	diagnostics = [d for result in results for d in result.all_diagnostics]
	exit_code = 1 if has_errors(diagnostics) else 0

	outputs: List[dict[str, Any]] = []
	if args.stdout:
		for result in results:
			text = result.render()
			if text is not None:
				sys.stdout.write(text)
	elif not args.check:
		for result in results:
			for path in write_outputs([result], config, args.output_dir):
				outputs.append({"module": result.module_name, "path": str(path), "classes": [a.class_name for a in result.artifacts]})
	else:
		for result in results:
			if result.artifacts:
				path = output_path_for(result, config, args.output_dir)
				outputs.append({"module": result.module_name, "path": str(path), "classes": [a.class_name for a in result.artifacts]})

	if args.json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": [d.to_dict() for d in diagnostics], "outputs": outputs}))
	else:
		_print_human(results)
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
