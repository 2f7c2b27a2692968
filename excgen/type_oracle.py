# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
TypeTable-backed implementation of the `TypeOracle` protocol.

Convertibility follows Python's assignability as a static checker would see
it: nominal subclassing, `object` as the top class, `Any` compatible both
ways, unions member-wise. Return types are compared exactly (identical, or
both `None`); covariant widening is not attempted.
"""

from __future__ import annotations

from excgen.core.descriptors import MethodDescriptor, MethodKind
from excgen.core.types_core import TypeId, TypeKind, TypeTable
from excgen.types_protocol import TypeOracle


class TableTypeOracle(TypeOracle):
	"""Answers compatibility questions from a populated TypeTable."""

	def __init__(self, table: TypeTable) -> None:
		self._table = table
		self._base_exception = table.ensure_builtin("BaseException")

	@property
	def table(self) -> TypeTable:
		return self._table

	def is_convertible(self, src: TypeId, dst: TypeId) -> bool:
		if src == dst:
			return True
		s = self._table.get(src)
		d = self._table.get(dst)
		if s.kind is TypeKind.ANY or d.kind is TypeKind.ANY:
			return True
		if s.kind is TypeKind.UNION:
			return all(self.is_convertible(member, dst) for member in s.param_types)
		if d.kind is TypeKind.UNION:
			return any(self.is_convertible(src, member) for member in d.param_types)
		if self._table.is_object(dst):
			return True
		if s.kind is TypeKind.CLASS and d.kind is TypeKind.CLASS:
			return dst in self._table.ancestry(src)
		if s.kind is TypeKind.GENERIC and s.origin is not None:
			if d.kind is TypeKind.CLASS:
				return self.is_convertible(s.origin, dst)
			if d.kind is TypeKind.GENERIC and d.origin is not None:
				return s.param_types == d.param_types and self.is_convertible(s.origin, d.origin)
		# None, opaque names and mismatched shapes only match themselves.
		return False

	def has_common_return(self, a: TypeId, b: TypeId) -> bool:
		if a == b:
			return True
		return self._is_void(a) and self._is_void(b)

	def is_exception_type(self, ty: TypeId) -> bool:
		if self._base_exception is None:
			return False
		td = self._table.get(ty)
		return td.kind is TypeKind.CLASS and self._base_exception in self._table.ancestry(ty)

	def is_callable_from(self, entry: MethodDescriptor, candidate: MethodDescriptor) -> bool:
		# A coroutine handler can only be awaited from a coroutine entry point.
		if candidate.is_async and not entry.is_async:
			return False
		if entry.kind is MethodKind.INSTANCE:
			return True
		if entry.kind is MethodKind.CLASS:
			return candidate.kind in (MethodKind.CLASS, MethodKind.STATIC)
		return candidate.kind is MethodKind.STATIC

	def display(self, ty: TypeId) -> str:
		return self._table.display(ty)

	def _is_void(self, ty: TypeId) -> bool:
		return self._table.get(ty).kind is TypeKind.NONE


__all__ = ["TableTypeOracle"]
