# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Runtime markers read by the generator.

The decorators are no-ops at runtime: they return their target unchanged and
exist so the generator can find them in source. Example:

	from excgen.annotations import (
		Partial,
		exception_handler,
		fallback_exception_handler,
		general_exception_handler,
		handles_exception,
	)

	@exception_handler
	class Handler(Partial):
		@general_exception_handler
		def handle(self, ex: Exception, message: str) -> int: ...

		@handles_exception
		def handle_missing(self, ex: KeyError, message: str) -> int:
			return 404

		@handles_exception(AttributeError, ArithmeticError)
		def handle_bug(self, ex: Exception) -> int:
			return 500

		@fallback_exception_handler
		def handle_other(self, ex: Exception) -> int:
			return 1

Importing the generated module (`<module>_dispatch` by default) installs the
synthesized `handle` on `Handler` through `install_dispatch`.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class Partial:
	"""Base class marking a target class as open to generated members."""

	__slots__ = ()


def exception_handler(cls: Optional[T] = None) -> Any:
	"""Mark a class as a dispatch target. Usable bare or called with no arguments."""
	if cls is None:
		return lambda target: target
	return cls


def general_exception_handler(fn: T) -> T:
	"""Mark a declaration-only method as the entry point to synthesize."""
	return fn


def fallback_exception_handler(fn: T) -> T:
	"""Mark a method that handles anything no specific handler matched."""
	return fn


def handles_exception(*exception_types: Any) -> Any:
	"""
	Mark a method as the handler for specific exception types.

	Without arguments (bare or called) the handler services the type of its
	exception parameter; with arguments it services exactly those types.
	"""
	if len(exception_types) == 1 and callable(exception_types[0]) and not isinstance(exception_types[0], type):
		return exception_types[0]

	def mark(fn: T) -> T:
		return fn

	return mark


def install_dispatch(cls: type, name: str, impl: Callable[..., Any]) -> None:
	"""
	Replace the declaration-only `cls.<name>` with the generated `impl`.

	The stub's metadata and parameter defaults carry over, and the installed
	function keeps the stub's staticmethod/classmethod wrapping.
	"""
	try:
		stub = cls.__dict__[name]
	except KeyError:
		raise AttributeError(f"{cls.__qualname__} has no entry point {name!r}") from None
	wrapper: Optional[Callable[[Any], Any]] = None
	if isinstance(stub, (staticmethod, classmethod)):
		wrapper = type(stub)
		stub = stub.__func__
	functools.update_wrapper(impl, stub)
	impl.__defaults__ = getattr(stub, "__defaults__", None)  # type: ignore[attr-defined]
	impl.__kwdefaults__ = getattr(stub, "__kwdefaults__", None)  # type: ignore[attr-defined]
	setattr(cls, name, wrapper(impl) if wrapper is not None else impl)


__all__ = [
	"Partial",
	"exception_handler",
	"general_exception_handler",
	"fallback_exception_handler",
	"handles_exception",
	"install_dispatch",
]
