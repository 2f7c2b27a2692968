# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import Tuple

from excgen.core.descriptors import MethodDescriptor, MethodRole
from excgen.core.types_core import TypeId

ExceptionTypeSet = Tuple[TypeId, ...]


def resolve_exception_types(handler: MethodDescriptor) -> ExceptionTypeSet:
	"""
	Return the ordered, non-empty set of exception types `handler` services.

	The marker's type arguments are used in the order given (duplicates keep
	their first position). Without reference arguments the set is the
	handler's own parameter 0 type. The provider has already dropped literal
	arguments; references it could not resolve arrive as opaque types and make
	the handler incompatible with every entry point.
	"""
	if handler.role is not MethodRole.SPECIFIC:
		raise ValueError(f"exception types requested for non-specific handler {handler.name!r}")
	types: list[TypeId] = []
	for ty in handler.type_args:
		if ty not in types:
			types.append(ty)
	if not types:
		types.append(handler.params[0].type)
	return tuple(types)


__all__ = ["ExceptionTypeSet", "resolve_exception_types"]
