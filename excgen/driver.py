# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generation driver.

Orchestrates one module at a time:

source -> AstSymbolProvider (classes, methods)
       -> structural checks (partial / nested)
       -> classify -> build plans (one per entry point)
       -> render

Every class ends in a `ClassOutcome` carrying either plans plus generated code
or diagnostics. Class-scoped failures (structure, extraction) never abort the
module, and module-scoped failures (unreadable or unparsable source) never
abort a batch. Modules share no state, so `generate_paths` runs them in
parallel threads and only collects results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from excgen.checker.classify import classify
from excgen.checker.structure import check_container, check_entry_bodies
from excgen.config import GeneratorConfig
from excgen.core.descriptors import ClassDecl
from excgen.core.diagnostics import EXTRACTION_FAILED, PARSE_FAILED, Diagnostic, has_errors
from excgen.core.errors import ExtractionError
from excgen.core.span import Span
from excgen.core.types_core import TypeTable
from excgen.plan import DispatchPlan, build_class_plans
from excgen.render import GeneratedArtifact, render_class, render_module
from excgen.symbols import AstSymbolProvider
from excgen.type_oracle import TableTypeOracle
from excgen.types_protocol import SymbolProvider, TypeOracle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassOutcome:
	"""Result of analysing one target class: plans and code, or diagnostics."""

	class_name: str
	plans: Tuple[DispatchPlan, ...] = ()
	diagnostics: Tuple[Diagnostic, ...] = ()
	artifact: Optional[GeneratedArtifact] = None

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


@dataclass(frozen=True)
class ModuleResult:
	module_name: str
	path: Optional[Path]
	outcomes: Tuple[ClassOutcome, ...] = ()
	# Module-scoped diagnostics (parse/io).
	diagnostics: Tuple[Diagnostic, ...] = ()

	@property
	def artifacts(self) -> List[GeneratedArtifact]:
		return [o.artifact for o in self.outcomes if o.artifact is not None]

	@property
	def all_diagnostics(self) -> List[Diagnostic]:
		out = list(self.diagnostics)
		for outcome in self.outcomes:
			out.extend(outcome.diagnostics)
		return out

	@property
	def ok(self) -> bool:
		return not has_errors(self.all_diagnostics)

	def render(self) -> Optional[str]:
		"""Return the generated module text, or None when nothing was generated."""
		artifacts = self.artifacts
		if not artifacts:
			return None
		return render_module(self.module_name, artifacts, source_name=self.path.name if self.path else None)


def analyze_class(
	provider: SymbolProvider,
	cls: ClassDecl,
	oracle: TypeOracle,
	table: TypeTable,
	config: GeneratorConfig,
) -> ClassOutcome:
	"""Analyse one target class; never raises for class-scoped conditions."""
	structural = check_container(cls, config)
	if structural:
		logger.debug("%s.%s: skipped by structural check %s", cls.module, cls.name, structural[0].code)
		return ClassOutcome(class_name=cls.name, diagnostics=tuple(structural))

	try:
		methods = provider.methods(cls)
	except ExtractionError as err:
		logger.debug("%s.%s: extraction failed: %s", cls.module, cls.name, err.message)
		diag = Diagnostic(
			message=f"cannot generate dispatch for class '{cls.name}': {err.message}",
			code=EXTRACTION_FAILED,
			phase="extract",
			severity="error",
			span=err.span if err.span.line is not None else cls.span,
		)
		return ClassOutcome(class_name=cls.name, diagnostics=(diag,))

	notices = check_entry_bodies(cls, methods)
	roles = classify(methods, oracle)
	plans = build_class_plans(roles.entry_points, roles.specifics, roles.fallbacks, oracle)
	for plan in plans:
		logger.debug(
			"%s.%s.%s: %d specific handler(s), fallback=%s",
			cls.module,
			cls.name,
			plan.entry.name,
			len(plan.specifics),
			plan.fallback.handler.name if plan.fallback else None,
		)
	artifact = render_class(cls.module, cls.name, plans, table)
	return ClassOutcome(class_name=cls.name, plans=plans, diagnostics=tuple(notices), artifact=artifact)


def generate_module(
	source: str,
	*,
	module_name: str,
	path: Optional[Path] = None,
	config: Optional[GeneratorConfig] = None,
) -> ModuleResult:
	"""Analyse one module's source text."""
	config = config or GeneratorConfig()
	table = TypeTable()
	file = str(path) if path is not None else None
	try:
		provider = AstSymbolProvider.from_source(
			source,
			path=file,
			module_name=module_name,
			table=table,
			config=config,
			is_package=path is not None and path.name == "__init__.py",
		)
	except SyntaxError as err:
		diag = Diagnostic(
			message=f"cannot parse module '{module_name}': {err.msg}",
			code=PARSE_FAILED,
			phase="parse",
			span=Span(file=file, line=err.lineno, column=err.offset),
		)
		return ModuleResult(module_name=module_name, path=path, diagnostics=(diag,))
	except ValueError as err:
		diag = Diagnostic(message=f"cannot parse module '{module_name}': {err}", code=PARSE_FAILED, phase="parse", span=Span(file=file))
		return ModuleResult(module_name=module_name, path=path, diagnostics=(diag,))

	oracle = TableTypeOracle(table)
	outcomes = tuple(analyze_class(provider, cls, oracle, table, config) for cls in provider.classes())
	for outcome in outcomes:
		for diag in outcome.diagnostics:
			logger.warning("%s: %s: %s", module_name, outcome.class_name, diag.message)
	return ModuleResult(module_name=module_name, path=path, outcomes=outcomes)


def module_name_for(path: Path, roots: Sequence[Path] = ()) -> str:
	"""
	Infer a dotted module name for `path`.

	With roots, the name is the path relative to the first root containing it
	(`pkg/sub/mod.py` -> `pkg.sub.mod`, `pkg/__init__.py` -> `pkg`). Without a
	matching root the file stem is used.
	"""
	resolved = path.resolve()
	for root in roots:
		try:
			rel = resolved.relative_to(root.resolve())
		except ValueError:
			continue
		parts = list(rel.with_suffix("").parts)
		if parts and parts[-1] == "__init__":
			parts.pop()
		if parts:
			return ".".join(parts)
	return path.stem


def generate_file(path: Path, *, module_name: str, config: Optional[GeneratorConfig] = None) -> ModuleResult:
	try:
		source = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		diag = Diagnostic(
			message=f"cannot read module '{module_name}': {err}",
			code=PARSE_FAILED,
			phase="io",
			span=Span(file=str(path)),
		)
		return ModuleResult(module_name=module_name, path=path, diagnostics=(diag,))
	return generate_module(source, module_name=module_name, path=path, config=config)


def generate_paths(
	paths: Iterable[Path],
	*,
	config: Optional[GeneratorConfig] = None,
	roots: Sequence[Path] = (),
) -> List[ModuleResult]:
	"""Generate every module in `paths`; results come back in input order."""
	config = config or GeneratorConfig()
	items = [(path, module_name_for(path, roots)) for path in paths]
	if config.jobs <= 1 or len(items) <= 1:
		return [generate_file(path, module_name=name, config=config) for path, name in items]
	with ThreadPoolExecutor(max_workers=config.jobs) as executor:
		futures = [executor.submit(generate_file, path, module_name=name, config=config) for path, name in items]
		return [future.result() for future in futures]


def output_path_for(result: ModuleResult, config: GeneratorConfig, out_dir: Optional[Path] = None) -> Path:
	"""`<stem><suffix>.py` next to the source, or inside `out_dir`."""
	if result.path is not None and result.path.name != "__init__.py":
		stem = result.path.stem
	else:
		stem = result.module_name.rpartition(".")[2]
	name = f"{stem}{config.output_suffix}.py"
	if out_dir is not None:
		return out_dir / name
	if result.path is not None:
		return result.path.with_name(name)
	return Path(name)


def write_outputs(results: Iterable[ModuleResult], config: GeneratorConfig, out_dir: Optional[Path] = None) -> List[Path]:
	"""Write generated modules; modules without artifacts produce no file."""
	written: List[Path] = []
	for result in results:
		text = result.render()
		if text is None:
			continue
		target = output_path_for(result, config, out_dir)
		target.parent.mkdir(parents=True, exist_ok=True)
		target.write_text(text, encoding="utf-8")
		logger.info("wrote %s", target)
		written.append(target)
	return written


__all__ = [
	"ClassOutcome",
	"ModuleResult",
	"analyze_class",
	"generate_module",
	"generate_file",
	"generate_paths",
	"module_name_for",
	"output_path_for",
	"write_outputs",
]
