# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compatibility analysis between an entry point and a candidate handler.

Both predicates are total: every (entry, candidate) pair yields True or False.
Parameter convertibility runs in the entry -> candidate direction because the
synthesized body passes the entry's arguments into the candidate.
"""

from __future__ import annotations

from excgen.checker.exception_sets import resolve_exception_types
from excgen.core.descriptors import MethodDescriptor
from excgen.types_protocol import TypeOracle


def _shares_call_shape(entry: MethodDescriptor, candidate: MethodDescriptor, oracle: TypeOracle) -> bool:
	"""Return type, callability and arity checks common to both roles."""
	if not oracle.has_common_return(entry.return_type, candidate.return_type):
		return False
	if not oracle.is_callable_from(entry, candidate):
		return False
	return candidate.param_count <= entry.param_count


def _params_accept(entry: MethodDescriptor, candidate: MethodDescriptor, oracle: TypeOracle, start: int) -> bool:
	for i in range(start, candidate.param_count):
		if not oracle.is_convertible(entry.params[i].type, candidate.params[i].type):
			return False
	return True


def is_valid_handler(entry: MethodDescriptor, candidate: MethodDescriptor, oracle: TypeOracle) -> bool:
	"""
	Return True if the specific handler `candidate` may serve `entry`.

	Every exception type the candidate claims must be convertible to the
	entry's exception parameter; one unrelated type rejects the candidate
	outright. Parameter 0 itself is not compared: it is bound to the narrowed
	exception value.
	"""
	if not _shares_call_shape(entry, candidate, oracle):
		return False
	exc_param = entry.params[0].type
	if not all(oracle.is_convertible(ty, exc_param) for ty in resolve_exception_types(candidate)):
		return False
	return _params_accept(entry, candidate, oracle, start=1)


def is_valid_fallback(entry: MethodDescriptor, candidate: MethodDescriptor, oracle: TypeOracle) -> bool:
	"""
	Return True if the fallback handler `candidate` may serve `entry`.

	Position 0 is included: a fallback receives whatever the entry's own
	exception parameter declares.
	"""
	if not _shares_call_shape(entry, candidate, oracle):
		return False
	return _params_accept(entry, candidate, oracle, start=0)


__all__ = ["is_valid_handler", "is_valid_fallback"]
