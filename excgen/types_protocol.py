# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Narrow host interfaces the analysis core depends on.

The classifier, compatibility analyzer and plan builder never look at source
code or interpreter objects directly. They see the host through two protocols:
a `SymbolProvider` that reports marked classes and their methods, and a
`TypeOracle` that answers convertibility/callability questions over opaque
TypeId handles. `excgen.symbols` and `excgen.type_oracle` provide the Python
source implementations; any other host (a language server, a hand-written type
table in tests) can satisfy the same protocols.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from excgen.core.descriptors import ClassDecl, MethodDecl, MethodDescriptor
from excgen.core.types_core import TypeId


class SymbolProvider(Protocol):
	"""Discovery of marked classes and their marked methods."""

	def classes(self) -> Sequence[ClassDecl]:
		"""Return classes carrying the container marker, in source order."""
		...

	def methods(self, cls: ClassDecl) -> Sequence[MethodDecl]:
		"""
		Return the marked methods of `cls` in declaration order.

		Raises `ExtractionError` when a marked method cannot be described.
		"""
		...


class TypeOracle(Protocol):
	"""
	Pure type-compatibility answers over TypeIds.

	Implementations must be functions of their arguments only (reentrant, no
	mutation) so classes can be analysed in parallel.
	"""

	def is_convertible(self, src: TypeId, dst: TypeId) -> bool:
		"""Return True if a value of `src` may be used where `dst` is expected."""
		...

	def has_common_return(self, a: TypeId, b: TypeId) -> bool:
		"""Return True if both return types are identical or both produce no value."""
		...

	def is_exception_type(self, ty: TypeId) -> bool:
		"""Return True if `ty` is in the throwable hierarchy."""
		...

	def is_callable_from(self, entry: MethodDescriptor, candidate: MethodDescriptor) -> bool:
		"""Return True if code synthesized for `entry` may invoke `candidate`."""
		...

	def display(self, ty: TypeId) -> str:
		...
