# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Handler classification.

Partitions the marked methods of one class into entry points, specific
handlers and fallback handlers. The role is assigned once here; later stages
match on `MethodDescriptor.role`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from excgen.core.descriptors import MethodDecl, MethodDescriptor, MethodRole
from excgen.types_protocol import TypeOracle


@dataclass(frozen=True)
class Classification:
	"""Disjoint role buckets, each in declaration order."""

	entry_points: Tuple[MethodDescriptor, ...] = ()
	specifics: Tuple[MethodDescriptor, ...] = ()
	fallbacks: Tuple[MethodDescriptor, ...] = ()


def _has_handler_shape(decl: MethodDecl, oracle: TypeOracle) -> bool:
	"""At least one parameter, and parameter 0 is an exception type."""
	return len(decl.params) > 0 and oracle.is_exception_type(decl.params[0].type)


def role_of(decl: MethodDecl, oracle: TypeOracle) -> Optional[MethodRole]:
	"""
	Return the role of `decl`, or None when it does not qualify for any.

	Markers are checked in the order entry point, specific, fallback; a method
	carrying several markers takes the first role it qualifies for.
	"""
	if not _has_handler_shape(decl, oracle):
		return None
	if MethodRole.ENTRY_POINT in decl.markers and decl.is_stub:
		return MethodRole.ENTRY_POINT
	if MethodRole.SPECIFIC in decl.markers:
		return MethodRole.SPECIFIC
	if MethodRole.FALLBACK in decl.markers:
		return MethodRole.FALLBACK
	return None


def classify(methods: Iterable[MethodDecl], oracle: TypeOracle) -> Classification:
	entry_points: list[MethodDescriptor] = []
	specifics: list[MethodDescriptor] = []
	fallbacks: list[MethodDescriptor] = []
	buckets = {
		MethodRole.ENTRY_POINT: entry_points,
		MethodRole.SPECIFIC: specifics,
		MethodRole.FALLBACK: fallbacks,
	}
	for decl in sorted(methods, key=lambda m: m.order):
		role = role_of(decl, oracle)
		if role is not None:
			buckets[role].append(MethodDescriptor.from_decl(decl, role))
	return Classification(
		entry_points=tuple(entry_points),
		specifics=tuple(specifics),
		fallbacks=tuple(fallbacks),
	)


__all__ = ["Classification", "classify", "role_of"]
