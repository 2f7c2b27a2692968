# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dispatch plan construction.

A DispatchPlan is the only artifact handed to a renderer. Its semantics are
fixed here, not in the renderer:

- specific entries keep the declaration order of their handlers; the
  synthesized body tests them sequentially and the first match wins (no
  best-match selection, no reordering by specificity);
- at most one fallback is kept: the first valid one in declaration order;
- with no fallback, an exception matching no specific entry propagates.

Overlapping exception sets between specific entries are not reported; they are
resolved by declaration order like any other match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from excgen.checker.compat import is_valid_fallback, is_valid_handler
from excgen.checker.exception_sets import ExceptionTypeSet, resolve_exception_types
from excgen.core.descriptors import MethodDescriptor, MethodRole
from excgen.types_protocol import TypeOracle


@dataclass(frozen=True)
class ArgumentBinding:
	"""Binds one handler parameter to the entry parameter at the same position."""

	handler_param: str
	entry_index: int
	entry_param: str


@dataclass(frozen=True)
class DispatchEntry:
	handler: MethodDescriptor
	# Empty for the fallback, which services anything still unmatched.
	exception_types: ExceptionTypeSet
	arguments: Tuple[ArgumentBinding, ...]


@dataclass(frozen=True)
class DispatchPlan:
	entry: MethodDescriptor
	specifics: Tuple[DispatchEntry, ...]
	fallback: Optional[DispatchEntry] = None


def project_arguments(entry: MethodDescriptor, handler: MethodDescriptor) -> Tuple[ArgumentBinding, ...]:
	"""
	Bind the handler's parameters to the entry's, by position.

	Position 0 is the exception value. Entry parameters beyond the handler's
	count are not passed.
	"""
	if handler.param_count > entry.param_count:
		raise ValueError(f"handler {handler.name!r} takes more parameters than entry point {entry.name!r}")
	return tuple(
		ArgumentBinding(handler_param=param.name, entry_index=i, entry_param=entry.params[i].name)
		for i, param in enumerate(handler.params)
	)


def build_plan(
	entry: MethodDescriptor,
	specifics: Iterable[MethodDescriptor],
	fallbacks: Iterable[MethodDescriptor],
	oracle: TypeOracle,
) -> DispatchPlan:
	if entry.role is not MethodRole.ENTRY_POINT:
		raise ValueError(f"{entry.name!r} is not an entry point")

	matched: list[DispatchEntry] = []
	for candidate in sorted(specifics, key=lambda m: m.order):
		if not is_valid_handler(entry, candidate, oracle):
			continue
		matched.append(
			DispatchEntry(
				handler=candidate,
				exception_types=resolve_exception_types(candidate),
				arguments=project_arguments(entry, candidate),
			)
		)

	fallback: Optional[DispatchEntry] = None
	for candidate in sorted(fallbacks, key=lambda m: m.order):
		if is_valid_fallback(entry, candidate, oracle):
			fallback = DispatchEntry(handler=candidate, exception_types=(), arguments=project_arguments(entry, candidate))
			break

	return DispatchPlan(entry=entry, specifics=tuple(matched), fallback=fallback)


def build_class_plans(
	entry_points: Sequence[MethodDescriptor],
	specifics: Sequence[MethodDescriptor],
	fallbacks: Sequence[MethodDescriptor],
	oracle: TypeOracle,
) -> Tuple[DispatchPlan, ...]:
	"""Build one plan per entry point, in entry declaration order."""
	return tuple(
		build_plan(entry, specifics, fallbacks, oracle)
		for entry in sorted(entry_points, key=lambda m: m.order)
	)


__all__ = [
	"ArgumentBinding",
	"DispatchEntry",
	"DispatchPlan",
	"project_arguments",
	"build_plan",
	"build_class_plans",
]
