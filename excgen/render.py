# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Python source renderer for dispatch plans.

For every entry point the renderer emits a function with the entry's signature
and installs it on the class with `excgen.annotations.install_dispatch`. The
body follows the plan literally:

	def _dispatch_Handler_handle(self, ex, message):
		if isinstance(ex, KeyError):
			return self.handle_single(ex, message)
		if isinstance(ex, (AttributeError, ArithmeticError)):
			return self.handle_multiple(ex)
		return self.handle_fallback(ex)

Without a fallback the last statement is `raise ex`: an unmatched exception
propagates, it is never suppressed and no default result is made up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from excgen.core.descriptors import MethodDescriptor, MethodKind
from excgen.core.types_core import TypeId, TypeKind, TypeTable
from excgen.plan import DispatchEntry, DispatchPlan

SOURCE_ALIAS = "_src"


@dataclass(frozen=True)
class GeneratedArtifact:
	"""Generated source for one target class."""

	class_name: str
	hint_name: str
	text: str


def mangle(class_name: str, attr: str) -> str:
	"""Apply private name mangling the way the compiler would inside `class_name`."""
	if attr.startswith("__") and not attr.endswith("__"):
		stripped = class_name.lstrip("_")
		if stripped:
			return f"_{stripped}{attr}"
	return attr


def type_expr(table: TypeTable, ty: TypeId, alias: str = SOURCE_ALIAS) -> str:
	"""Spell `ty` for the generated module (builtins bare, others via the source module)."""
	td = table.get(ty)
	if td.is_builtin:
		return td.name
	if td.source_expr:
		return f"{alias}.{td.source_expr}"
	raise ValueError(f"type {td.name!r} has no spelling in the analysed module")


def _isinstance_target(table: TypeTable, types: Sequence[TypeId]) -> str:
	exprs = [type_expr(table, ty) for ty in types]
	if len(exprs) == 1:
		return exprs[0]
	return "(" + ", ".join(exprs) + ")"


def dispatch_function_name(class_name: str, entry_name: str) -> str:
	return f"_dispatch_{class_name}_{entry_name}"


def _call(class_name: str, entry: MethodDescriptor, target: DispatchEntry) -> str:
	handler = target.handler
	attr = mangle(class_name, handler.name)
	if entry.kind is MethodKind.STATIC:
		owner = f"{SOURCE_ALIAS}.{class_name}"
	else:
		owner = entry.receiver
	args = ", ".join(binding.entry_param for binding in target.arguments)
	call = f"{owner}.{attr}({args})"
	return f"await {call}" if handler.is_async else call


def render_plan(class_name: str, plan: DispatchPlan, table: TypeTable) -> List[str]:
	entry = plan.entry
	fn_name = dispatch_function_name(class_name, entry.name)
	params: List[str] = []
	if entry.kind is not MethodKind.STATIC and entry.receiver:
		params.append(entry.receiver)
	params.extend(p.name for p in entry.params)
	exc = entry.params[0].name
	is_void = table.get(entry.return_type).kind is TypeKind.NONE

	lines = [f"{'async ' if entry.is_async else ''}def {fn_name}({', '.join(params)}):"]
	for target in plan.specifics:
		call = _call(class_name, entry, target)
		lines.append(f"\tif isinstance({exc}, {_isinstance_target(table, target.exception_types)}):")
		if is_void:
			lines.append(f"\t\t{call}")
			lines.append("\t\treturn")
		else:
			lines.append(f"\t\treturn {call}")
	if plan.fallback is not None:
		call = _call(class_name, entry, plan.fallback)
		lines.append(f"\t{call}" if is_void else f"\treturn {call}")
	else:
		lines.append(f"\traise {exc}")
	lines.append("")
	lines.append("")
	lines.append(f'install_dispatch({SOURCE_ALIAS}.{class_name}, "{mangle(class_name, entry.name)}", {fn_name})')
	return lines


def render_class(module_name: str, class_name: str, plans: Iterable[DispatchPlan], table: TypeTable) -> Optional[GeneratedArtifact]:
	"""Render every plan of a class; None when the class has no entry points."""
	blocks = ["\n".join(render_plan(class_name, plan, table)) for plan in plans]
	if not blocks:
		return None
	return GeneratedArtifact(
		class_name=class_name,
		hint_name=f"{module_name}.{class_name}",
		text="\n\n\n".join(blocks),
	)


def render_module(module_name: str, artifacts: Sequence[GeneratedArtifact], *, source_name: Optional[str] = None) -> str:
	origin = f" from {source_name}" if source_name else ""
	header = [
		f"# Generated by excgen{origin}; do not edit.",
		f'"""Exception dispatch for ``{module_name}``."""',
		"",
		f"import {module_name} as {SOURCE_ALIAS}",
		"from excgen.annotations import install_dispatch",
	]
	body = "\n\n\n".join(artifact.text for artifact in artifacts)
	return "\n".join(header) + "\n\n\n" + body + "\n"


__all__ = [
	"SOURCE_ALIAS",
	"GeneratedArtifact",
	"mangle",
	"type_expr",
	"dispatch_function_name",
	"render_plan",
	"render_class",
	"render_module",
]
