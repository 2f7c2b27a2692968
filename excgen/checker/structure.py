# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural gates on target classes.

These run before any handler analysis. A class that fails either gate gets one
diagnostic and no generated code; other classes are unaffected. Entry points
with a body are only reported, since they never receive generated code.
"""

from __future__ import annotations

from typing import List, Sequence

from excgen.config import GeneratorConfig
from excgen.core.descriptors import ClassDecl, MethodDecl, MethodRole
from excgen.core.diagnostics import NESTED_CLASS, REQUIRES_PARTIAL, UNSYNTHESIZED_ENTRY, Diagnostic


def check_container(cls: ClassDecl, config: GeneratorConfig) -> List[Diagnostic]:
	"""
	Validate a target class:

	- it must derive from the partial marker base, so generated members may be
	  installed on it (warning);
	- it must be declared at module level (error).

	The partial check runs first; at most one diagnostic is returned.
	"""
	if not cls.is_partial:
		return [
			Diagnostic(
				message=f"target class '{cls.name}' must derive from {config.partial_base}",
				code=REQUIRES_PARTIAL,
				phase="structure",
				severity="warning",
				span=cls.span,
			)
		]
	if cls.is_nested:
		return [
			Diagnostic(
				message=f"target class '{cls.name}' may not be nested",
				code=NESTED_CLASS,
				phase="structure",
				severity="error",
				span=cls.span,
			)
		]
	return []


def check_entry_bodies(cls: ClassDecl, methods: Sequence[MethodDecl]) -> List[Diagnostic]:
	"""Warn about entry-point markers on methods that already have a body."""
	return [
		Diagnostic(
			message=f"entry point '{cls.name}.{decl.name}' has a body; only declaration-only methods are generated",
			code=UNSYNTHESIZED_ENTRY,
			phase="classify",
			severity="warning",
			span=decl.span if decl.span.line is not None else cls.span,
			notes=("replace the body with `...` to have the dispatch generated",),
		)
		for decl in methods
		if MethodRole.ENTRY_POINT in decl.markers and not decl.is_stub
	]


__all__ = ["check_container", "check_entry_bodies"]
