# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration descriptors exchanged between the symbol provider and the checker.

`MethodDecl` is what a provider reports for a marked method (no role yet);
`MethodDescriptor` is the same declaration after the classifier assigned its
role once. Downstream code matches on `MethodDescriptor.role` and never looks at
marker presence again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, FrozenSet, Optional, Tuple

from .span import Span
from .types_core import TypeId


class MethodKind(Enum):
	"""Receiver shape of a method."""

	INSTANCE = auto()
	CLASS = auto()
	STATIC = auto()


class MethodRole(Enum):
	"""Closed set of handler roles (also used to report which markers a method carries)."""

	ENTRY_POINT = auto()
	SPECIFIC = auto()
	FALLBACK = auto()


@dataclass(frozen=True)
class Param:
	"""A positional parameter after the receiver."""

	name: str
	type: TypeId


@dataclass(frozen=True)
class MethodDecl:
	"""Provider-side description of a marked method."""

	name: str
	params: Tuple[Param, ...]
	return_type: TypeId
	is_stub: bool
	order: int  # declaration index within the class body
	kind: MethodKind = MethodKind.INSTANCE
	is_async: bool = False
	receiver: Optional[str] = None  # "self"/"cls"; None for static methods
	markers: FrozenSet[MethodRole] = frozenset()
	# Type arguments given to the per-exception marker, in source order.
	type_args: Tuple[TypeId, ...] = ()
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class MethodDescriptor:
	"""A method with its role assigned by the classifier."""

	role: MethodRole
	name: str
	params: Tuple[Param, ...]
	return_type: TypeId
	is_stub: bool
	order: int
	kind: MethodKind = MethodKind.INSTANCE
	is_async: bool = False
	receiver: Optional[str] = None
	type_args: Tuple[TypeId, ...] = ()
	span: Span = field(default_factory=Span)

	@classmethod
	def from_decl(cls, decl: MethodDecl, role: MethodRole) -> "MethodDescriptor":
		return cls(
			role=role,
			name=decl.name,
			params=decl.params,
			return_type=decl.return_type,
			is_stub=decl.is_stub,
			order=decl.order,
			kind=decl.kind,
			is_async=decl.is_async,
			receiver=decl.receiver,
			type_args=decl.type_args,
			span=decl.span,
		)

	@property
	def param_count(self) -> int:
		return len(self.params)


@dataclass(frozen=True)
class ClassDecl:
	"""Provider-side description of a class carrying the container marker."""

	name: str
	module: str
	is_partial: bool
	is_nested: bool
	span: Span = field(default_factory=Span)
	# Provider-private handle (e.g. the `ast.ClassDef`); not part of identity.
	handle: Any = field(default=None, compare=False, repr=False)


__all__ = ["MethodKind", "MethodRole", "Param", "MethodDecl", "MethodDescriptor", "ClassDecl"]
