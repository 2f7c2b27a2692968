# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from excgen.config import GeneratorConfig
from excgen.core.diagnostics import EXTRACTION_FAILED, NESTED_CLASS, PARSE_FAILED, REQUIRES_PARTIAL, UNSYNTHESIZED_ENTRY
from excgen.driver import (
	generate_file,
	generate_module,
	generate_paths,
	module_name_for,
	output_path_for,
	write_outputs,
)
from excgen.test_helpers import MARKER_IMPORTS, SCENARIO_SOURCE, handler_class


def _write_file(path: Path, content: str) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(content, encoding="utf-8")
	return path


def test_scenario_module_generates_one_artifact() -> None:
	result = generate_module(SCENARIO_SOURCE, module_name="app.handlers")
	assert result.ok
	assert result.all_diagnostics == []
	assert [a.class_name for a in result.artifacts] == ["Handler"]
	(outcome,) = result.outcomes
	assert outcome.plans[0].entry.name == "handle"
	text = result.render()
	assert text is not None and "import app.handlers as _src" in text


def test_class_without_partial_base_gets_one_warning_and_no_code() -> None:
	source = handler_class(
		"""
		@general_exception_handler
		def handle(self, ex: Exception) -> None: ...
		""",
		bases="object",
	)
	result = generate_module(source, module_name="m")
	(diag,) = result.all_diagnostics
	assert diag.code == REQUIRES_PARTIAL
	assert diag.severity == "warning"
	assert "'Handler'" in diag.message
	assert result.artifacts == []
	assert result.ok
	assert result.render() is None


def test_nested_class_gets_one_error_and_no_code() -> None:
	source = MARKER_IMPORTS + textwrap.dedent(
		"""
		class Outer:
			@exception_handler
			class Inner(Partial):
				@general_exception_handler
				def handle(self, ex: Exception) -> None: ...
		"""
	)
	result = generate_module(source, module_name="m")
	(diag,) = result.all_diagnostics
	assert diag.code == NESTED_CLASS
	assert diag.is_error
	assert diag.span.line is not None
	assert result.artifacts == []
	assert not result.ok


def test_extraction_failure_is_isolated_to_its_class() -> None:
	source = (
		handler_class(
			"""
			@general_exception_handler
			def handle(self, ex: Exception, *rest) -> None: ...
			""",
			name="Broken",
		)
		+ "\n\n"
		+ textwrap.dedent(
			"""
			@exception_handler
			class Working(Partial):
				@general_exception_handler
				def handle(self, ex: Exception) -> None: ...

				@handles_exception
				def on_key(self, ex: KeyError) -> None:
					pass
			"""
		)
	)
	result = generate_module(source, module_name="m", path=Path("m.py"))
	(diag,) = result.all_diagnostics
	assert diag.code == EXTRACTION_FAILED
	assert diag.phase == "extract"
	assert "'Broken'" in diag.message
	assert diag.span.file == "m.py"
	assert [a.class_name for a in result.artifacts] == ["Working"]
	broken, working = result.outcomes
	assert not broken.ok and broken.artifact is None
	assert working.ok and len(working.plans) == 1


def test_class_without_entry_points_produces_no_artifact() -> None:
	source = handler_class(
		"""
		@handles_exception
		def on_key(self, ex: KeyError) -> None:
			pass
		"""
	)
	result = generate_module(source, module_name="m")
	assert result.ok
	(outcome,) = result.outcomes
	assert outcome.plans == ()
	assert result.artifacts == []


def test_entry_point_with_body_is_reported_not_generated() -> None:
	source = handler_class(
		"""
		@general_exception_handler
		def handle(self, ex: Exception) -> None:
			pass

		@handles_exception
		def on_key(self, ex: KeyError) -> None:
			pass
		"""
	)
	result = generate_module(source, module_name="m", path=Path("m.py"))
	(diag,) = result.all_diagnostics
	assert diag.code == UNSYNTHESIZED_ENTRY
	assert diag.severity == "warning"
	assert "'Handler.handle'" in diag.message
	assert diag.span.file == "m.py" and diag.span.line is not None
	assert result.ok
	assert result.artifacts == []
	assert result.render() is None


def test_syntax_error_is_a_module_diagnostic() -> None:
	result = generate_module("class Broken(:\n", module_name="m", path=Path("m.py"))
	(diag,) = result.all_diagnostics
	assert diag.code == PARSE_FAILED
	assert diag.phase == "parse"
	assert diag.span.file == "m.py"
	assert diag.span.line == 1
	assert result.outcomes == ()


def test_unreadable_file_is_a_module_diagnostic(tmp_path: Path) -> None:
	result = generate_file(tmp_path / "missing.py", module_name="missing")
	(diag,) = result.all_diagnostics
	assert diag.code == PARSE_FAILED
	assert diag.phase == "io"
	assert not result.ok


def test_generation_is_deterministic() -> None:
	first = generate_module(SCENARIO_SOURCE, module_name="m").render()
	second = generate_module(SCENARIO_SOURCE, module_name="m").render()
	assert first == second


def test_module_name_for(tmp_path: Path) -> None:
	root = tmp_path / "src"
	mod = _write_file(root / "pkg" / "sub" / "mod.py", "")
	init = _write_file(root / "pkg" / "__init__.py", "")
	assert module_name_for(mod, [root]) == "pkg.sub.mod"
	assert module_name_for(init, [root]) == "pkg"
	assert module_name_for(mod, [tmp_path / "elsewhere", root]) == "pkg.sub.mod"
	assert module_name_for(mod) == "mod"


def test_relative_imports_resolve_inside_packages(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	root = tmp_path / "src"
	_write_file(root / "excgen_relpkg" / "__init__.py", "")
	_write_file(root / "excgen_relpkg" / "errors.py", "class Missing(LookupError):\n\tpass\n")
	path = _write_file(
		root / "excgen_relpkg" / "api.py",
		"from .errors import Missing\n"
		+ handler_class(
			"""
			@general_exception_handler
			def handle(self, ex: Exception) -> None: ...

			@handles_exception
			def on_missing(self, ex: Missing) -> None:
				pass
			"""
		),
	)
	monkeypatch.syspath_prepend(str(root))
	try:
		(opaque,) = generate_paths([path], config=GeneratorConfig(resolve_imports=False), roots=[root])
		(resolved,) = generate_paths([path], roots=[root])
	finally:
		for name in ("excgen_relpkg.errors", "excgen_relpkg"):
			sys.modules.pop(name, None)
	assert resolved.module_name == "excgen_relpkg.api"
	(plan,) = resolved.outcomes[0].plans
	assert [e.handler.name for e in plan.specifics] == ["on_missing"]
	# without importing, Missing is opaque and not an exception type
	assert opaque.outcomes[0].plans[0].specifics == ()


def test_generate_paths_keeps_input_order_in_parallel(tmp_path: Path) -> None:
	paths = []
	for i in range(6):
		body = SCENARIO_SOURCE if i % 2 == 0 else "x = 1\n"
		paths.append(_write_file(tmp_path / f"mod{i}.py", body))
	results = generate_paths(paths, config=GeneratorConfig(jobs=4))
	assert [r.module_name for r in results] == [f"mod{i}" for i in range(6)]
	assert [bool(r.artifacts) for r in results] == [True, False, True, False, True, False]


def test_write_outputs_places_files(tmp_path: Path) -> None:
	src = _write_file(tmp_path / "handlers.py", SCENARIO_SOURCE)
	empty = _write_file(tmp_path / "empty.py", "x = 1\n")
	results = generate_paths([src, empty])

	written = write_outputs(results, GeneratorConfig())
	assert written == [tmp_path / "handlers_dispatch.py"]
	assert written[0].read_text(encoding="utf-8") == results[0].render()

	out_dir = tmp_path / "out"
	config = GeneratorConfig(output_suffix="_gen")
	assert write_outputs(results, config, out_dir) == [out_dir / "handlers_gen.py"]
	assert output_path_for(results[0], config) == tmp_path / "handlers_gen.py"


def test_package_init_output_uses_package_name(tmp_path: Path) -> None:
	init = _write_file(tmp_path / "pkg" / "__init__.py", SCENARIO_SOURCE)
	(result,) = generate_paths([init], roots=[tmp_path])
	assert result.module_name == "pkg"
	assert output_path_for(result, GeneratorConfig()) == tmp_path / "pkg" / "pkg_dispatch.py"
