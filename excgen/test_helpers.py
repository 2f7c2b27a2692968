# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Optional, Tuple

from excgen.checker.classify import Classification, classify
from excgen.config import GeneratorConfig
from excgen.core.descriptors import ClassDecl, MethodDecl, MethodDescriptor
from excgen.core.types_core import TypeTable
from excgen.plan import DispatchPlan, build_class_plans
from excgen.symbols import AstSymbolProvider
from excgen.type_oracle import TableTypeOracle

MARKER_IMPORTS = """\
from excgen.annotations import (
	Partial,
	exception_handler,
	fallback_exception_handler,
	general_exception_handler,
	handles_exception,
)
"""

# Entry point, two specific handlers (one implicit, one explicit multi-type)
# and a fallback.
SCENARIO_SOURCE = MARKER_IMPORTS + """

@exception_handler
class Handler(Partial):
	@general_exception_handler
	def handle(self, ex: Exception, message: str) -> int: ...

	@handles_exception
	def handle_single(self, ex: KeyError, message: str) -> int:
		return 1

	@handles_exception(AttributeError, ArithmeticError)
	def handle_multiple(self, ex: Exception) -> int:
		return 2

	@fallback_exception_handler
	def handle_fallback(self, ex: Exception) -> int:
		return 3
"""


@dataclass
class AnalyzedModule:
	"""Provider + table + oracle for one source snippet (tests only)."""

	provider: AstSymbolProvider
	table: TypeTable
	oracle: TableTypeOracle

	def class_decl(self, name: str) -> ClassDecl:
		for cls in self.provider.classes():
			if cls.name == name:
				return cls
		raise AssertionError(f"no marked class {name!r}")

	def methods(self, class_name: str) -> list[MethodDecl]:
		return list(self.provider.methods(self.class_decl(class_name)))

	def classify(self, class_name: str) -> Classification:
		return classify(self.methods(class_name), self.oracle)

	def descriptor(self, class_name: str, method_name: str) -> MethodDescriptor:
		roles = self.classify(class_name)
		for desc in (*roles.entry_points, *roles.specifics, *roles.fallbacks):
			if desc.name == method_name:
				return desc
		raise AssertionError(f"{class_name}.{method_name} has no role")

	def plans(self, class_name: str) -> Tuple[DispatchPlan, ...]:
		roles = self.classify(class_name)
		return build_class_plans(roles.entry_points, roles.specifics, roles.fallbacks, self.oracle)

	def builtin(self, name: str) -> int:
		ty = self.table.ensure_builtin(name)
		assert ty is not None, name
		return ty


def analyze_source(source: str, module_name: str = "m", config: Optional[GeneratorConfig] = None) -> AnalyzedModule:
	table = TypeTable()
	provider = AstSymbolProvider.from_source(
		textwrap.dedent(source),
		path=f"{module_name}.py",
		module_name=module_name,
		table=table,
		config=config or GeneratorConfig(),
	)
	return AnalyzedModule(provider=provider, table=table, oracle=TableTypeOracle(table))


def handler_class(body: str, *, name: str = "Handler", bases: str = "Partial") -> str:
	"""Wrap a tab-indented class body into a marked class with marker imports."""
	return MARKER_IMPORTS + f"\n\n@exception_handler\nclass {name}({bases}):\n" + textwrap.indent(textwrap.dedent(body), "\t")


__all__ = ["MARKER_IMPORTS", "SCENARIO_SOURCE", "AnalyzedModule", "analyze_source", "handler_class"]
