# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal type core shared by the symbol provider and the compatibility oracle.

TypeIds are opaque ints indexing into a TypeTable. TypeKind keeps the universe
small: nominal classes (builtin, module-local or imported), parameterised
generics, unions, `None`, `Any` and opaque names that could not be resolved.
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Dict, Iterable, Optional, Tuple


TypeId = int  # opaque handle into the TypeTable


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	CLASS = auto()
	GENERIC = auto()
	UNION = auto()
	NONE = auto()
	ANY = auto()
	OPAQUE = auto()


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	# Union members or generic arguments.
	param_types: Tuple[TypeId, ...] = ()
	# Direct base classes (TypeKind.CLASS only).
	bases: Tuple[TypeId, ...] = ()
	# Unparameterised origin of a TypeKind.GENERIC.
	origin: Optional[TypeId] = None
	# Defining module ("builtins" for builtins, None when unknown).
	module: Optional[str] = None
	# How the analysed module spells this type (e.g. "errors.Timeout").
	source_expr: Optional[str] = None

	@property
	def is_builtin(self) -> bool:
		return self.kind is TypeKind.CLASS and self.module == "builtins"


class TypeTable:
	"""
	Simple type table that owns TypeIds.

	Builtin classes are registered on demand from the interpreter's own class
	hierarchy; module classes are declared first and get their bases once every
	class of the module is known, so forward references between classes work.
	"""

	def __init__(self) -> None:
		self._defs: Dict[TypeId, TypeDef] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"
		self._by_key: Dict[tuple, TypeId] = {}
		self._ancestry_cache: Dict[TypeId, frozenset[TypeId]] = {}

	def ensure_any(self) -> TypeId:
		"""Return a stable Any TypeId, creating it once."""
		return self._ensure_key(("any",), lambda: TypeDef(kind=TypeKind.ANY, name="Any"))

	def ensure_none(self) -> TypeId:
		"""Return a stable None (no value produced) TypeId, creating it once."""
		return self._ensure_key(("none",), lambda: TypeDef(kind=TypeKind.NONE, name="None"))

	def ensure_object(self) -> TypeId:
		"""Return the root `object` class."""
		return self.ensure_runtime_class(object)

	def ensure_builtin(self, name: str) -> TypeId | None:
		"""Return the builtin class called `name`, or None when there is none."""
		value = getattr(builtins, name, None)
		if not isinstance(value, type):
			return None
		return self.ensure_runtime_class(value)

	def ensure_runtime_class(self, cls: type, source_expr: str | None = None) -> TypeId:
		"""
		Register a class object known to the interpreter (builtin or imported).

		Bases are registered recursively so ancestry queries never need the
		interpreter again. `source_expr` records how the analysed module refers
		to the class; builtins are always referenced by bare name.
		"""
		module = getattr(cls, "__module__", None)
		qualname = getattr(cls, "__qualname__", cls.__name__)
		key = ("class", module, qualname)
		if module == "builtins":
			source_expr = None
		existing = self._by_key.get(key)
		if existing is not None:
			if source_expr is not None and self._defs[existing].source_expr is None:
				self._defs[existing] = replace(self._defs[existing], source_expr=source_expr)
			return existing
		name = qualname if module == "builtins" else f"{module}.{qualname}"
		ty = self._add(key, TypeDef(kind=TypeKind.CLASS, name=name, module=module, source_expr=source_expr))
		bases = tuple(self.ensure_runtime_class(base) for base in cls.__bases__)
		self._defs[ty] = replace(self._defs[ty], bases=bases)
		return ty

	def declare_class(self, module: str, name: str, source_expr: str | None = None) -> TypeId:
		"""Declare a module-local class; bases are filled in by `set_bases`."""
		key = ("class", module, name)
		existing = self._by_key.get(key)
		if existing is not None:
			return existing
		return self._add(
			key,
			TypeDef(kind=TypeKind.CLASS, name=f"{module}.{name}", module=module, source_expr=source_expr or name),
		)

	def set_bases(self, ty: TypeId, bases: Iterable[TypeId]) -> None:
		"""Install the direct bases of a declared class (object when empty)."""
		td = self._defs[ty]
		if td.kind is not TypeKind.CLASS:
			raise TypeError(f"set_bases called on non-class type {td.name!r}")
		resolved = tuple(bases) or (self.ensure_object(),)
		self._defs[ty] = replace(td, bases=resolved)
		self._ancestry_cache.clear()

	def new_opaque(self, name: str, source_expr: str | None = None) -> TypeId:
		"""Register a name that could not be resolved; it only equals itself."""
		return self._ensure_key(
			("opaque", name),
			lambda: TypeDef(kind=TypeKind.OPAQUE, name=name, source_expr=source_expr or name),
		)

	def new_union(self, members: Iterable[TypeId]) -> TypeId:
		"""
		Register `A | B | ...`.

		Nested unions are flattened and duplicates dropped (first occurrence
		wins); a single remaining member is returned as-is.
		"""
		flat: list[TypeId] = []
		for member in members:
			td = self._defs[member]
			for inner in td.param_types if td.kind is TypeKind.UNION else (member,):
				if inner not in flat:
					flat.append(inner)
		if len(flat) == 1:
			return flat[0]
		params = tuple(flat)
		return self._ensure_key(
			("union", params),
			lambda: TypeDef(kind=TypeKind.UNION, name=" | ".join(self.display(t) for t in params), param_types=params),
		)

	def new_generic(self, origin: TypeId, args: Iterable[TypeId]) -> TypeId:
		"""Register a parameterised type such as `list[str]`."""
		params = tuple(args)
		origin_name = self.display(origin)

		def make() -> TypeDef:
			inner = ", ".join(self.display(t) for t in params)
			return TypeDef(kind=TypeKind.GENERIC, name=f"{origin_name}[{inner}]", param_types=params, origin=origin)

		return self._ensure_key(("generic", origin, params), make)

	def get(self, ty: TypeId) -> TypeDef:
		"""Fetch the TypeDef for a given TypeId."""
		return self._defs[ty]

	def display(self, ty: TypeId) -> str:
		return self._defs[ty].name

	def is_object(self, ty: TypeId) -> bool:
		td = self._defs[ty]
		return td.is_builtin and td.name == "object"

	def ancestry(self, ty: TypeId) -> frozenset[TypeId]:
		"""Return `ty` plus every class reachable through its bases."""
		cached = self._ancestry_cache.get(ty)
		if cached is not None:
			return cached
		seen: set[TypeId] = set()
		stack = [ty]
		while stack:
			cur = stack.pop()
			if cur in seen:
				continue
			seen.add(cur)
			stack.extend(self._defs[cur].bases)
		result = frozenset(seen)
		self._ancestry_cache[ty] = result
		return result

	def _ensure_key(self, key: tuple, make) -> TypeId:
		existing = self._by_key.get(key)
		if existing is not None:
			return existing
		return self._add(key, make())

	def _add(self, key: tuple, td: TypeDef) -> TypeId:
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = td
		self._by_key[key] = ty_id
		self._ancestry_cache.clear()
		return ty_id


__all__ = ["TypeId", "TypeKind", "TypeDef", "TypeTable"]
