# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from excgen.checker.compat import is_valid_fallback, is_valid_handler
from excgen.core.descriptors import MethodRole
from excgen.test_helpers import SCENARIO_SOURCE, AnalyzedModule, analyze_source, handler_class


def _module(body: str) -> AnalyzedModule:
	return analyze_source(handler_class(body))


def _valid(mod: AnalyzedModule, entry: str, candidate: str) -> bool:
	e = mod.descriptor("Handler", entry)
	c = mod.descriptor("Handler", candidate)
	if c.role is MethodRole.FALLBACK:
		return is_valid_fallback(e, c, mod.oracle)
	return is_valid_handler(e, c, mod.oracle)


def test_scenario_handlers_are_valid() -> None:
	mod = analyze_source(SCENARIO_SOURCE)
	assert _valid(mod, "handle", "handle_single")
	assert _valid(mod, "handle", "handle_multiple")
	assert _valid(mod, "handle", "handle_fallback")


@pytest.mark.parametrize("extra", [0, 1, 2, 3])
def test_handlers_with_more_parameters_than_entry_are_excluded(extra: int) -> None:
	handler_params = "".join(f", a{i}: str" for i in range(1 + extra))
	mod = _module(
		f"""
		@general_exception_handler
		def entry(self, ex: Exception, a0: str) -> None: ...

		@handles_exception
		def specific(self, ex: KeyError{handler_params}) -> None:
			pass

		@fallback_exception_handler
		def other(self, ex: Exception{handler_params}) -> None:
			pass
		"""
	)
	expected = extra == 0
	assert _valid(mod, "entry", "specific") is expected
	assert _valid(mod, "entry", "other") is expected


def test_return_types_must_match() -> None:
	mod = _module(
		"""
		@general_exception_handler
		def entry(self, ex: Exception) -> int: ...

		@handles_exception
		def returns_bool(self, ex: KeyError) -> bool:
			return True

		@handles_exception
		def returns_nothing(self, ex: KeyError) -> None:
			pass

		@handles_exception
		def returns_int(self, ex: KeyError) -> int:
			return 0
		"""
	)
	assert not _valid(mod, "entry", "returns_bool")
	assert not _valid(mod, "entry", "returns_nothing")
	assert _valid(mod, "entry", "returns_int")


def test_every_claimed_type_must_convert_to_entry_exception() -> None:
	mod = _module(
		"""
		@general_exception_handler
		def entry(self, ex: LookupError) -> None: ...

		@handles_exception(KeyError, ZeroDivisionError)
		def mixed(self, ex: Exception) -> None:
			pass

		@handles_exception(KeyError, IndexError)
		def lookups(self, ex: Exception) -> None:
			pass

		@handles_exception
		def too_wide(self, ex: Exception) -> None:
			pass
		"""
	)
	assert not _valid(mod, "entry", "mixed")
	assert _valid(mod, "entry", "lookups")
	assert not _valid(mod, "entry", "too_wide")


def test_extra_parameters_are_contravariant() -> None:
	mod = _module(
		"""
		@general_exception_handler
		def entry(self, ex: Exception, payload: bool) -> None: ...

		@handles_exception
		def wider(self, ex: KeyError, payload: int) -> None:
			pass

		@handles_exception
		def unrelated(self, ex: KeyError, payload: str) -> None:
			pass

		@handles_exception
		def untyped(self, ex: KeyError, payload) -> None:
			pass
		"""
	)
	assert _valid(mod, "entry", "wider")
	assert not _valid(mod, "entry", "unrelated")
	assert _valid(mod, "entry", "untyped")


def test_fallback_checks_exception_position() -> None:
	mod = _module(
		"""
		@general_exception_handler
		def entry(self, ex: Exception) -> None: ...

		@fallback_exception_handler
		def narrow(self, ex: KeyError) -> None:
			pass

		@fallback_exception_handler
		def wide(self, ex: BaseException) -> None:
			pass
		"""
	)
	assert not _valid(mod, "entry", "narrow")
	assert _valid(mod, "entry", "wide")


def test_receiver_kinds_limit_candidates() -> None:
	mod = _module(
		"""
		@staticmethod
		@general_exception_handler
		def static_entry(ex: Exception) -> None: ...

		@classmethod
		@general_exception_handler
		def class_entry(cls, ex: Exception) -> None: ...

		@handles_exception
		def on_instance(self, ex: KeyError) -> None:
			pass

		@classmethod
		@handles_exception
		def on_class(cls, ex: KeyError) -> None:
			pass

		@staticmethod
		@handles_exception
		def on_static(ex: KeyError) -> None:
			pass
		"""
	)
	assert not _valid(mod, "static_entry", "on_instance")
	assert not _valid(mod, "static_entry", "on_class")
	assert _valid(mod, "static_entry", "on_static")
	assert not _valid(mod, "class_entry", "on_instance")
	assert _valid(mod, "class_entry", "on_class")
	assert _valid(mod, "class_entry", "on_static")


def test_async_handler_needs_async_entry() -> None:
	mod = _module(
		"""
		@general_exception_handler
		def sync_entry(self, ex: Exception) -> None: ...

		@general_exception_handler
		async def async_entry(self, ex: Exception) -> None: ...

		@handles_exception
		async def on_key(self, ex: KeyError) -> None:
			pass
		"""
	)
	assert not _valid(mod, "sync_entry", "on_key")
	assert _valid(mod, "async_entry", "on_key")
