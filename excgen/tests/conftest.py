# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import importlib
import itertools
import sys
import textwrap
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional, Tuple

import pytest

from excgen.config import GeneratorConfig
from excgen.driver import generate_file, write_outputs

_module_ids = itertools.count()

LoadDispatch = Callable[..., Tuple[ModuleType, ModuleType]]


@pytest.fixture
def load_dispatch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LoadDispatch:
	"""
	Write `source` as a module under tmp_path, generate its dispatch module and
	import both. Returns `(user_module, dispatch_module)`.

	Every call uses a fresh module name so imports never hit a stale
	sys.modules entry from another test.
	"""
	monkeypatch.syspath_prepend(str(tmp_path))
	loaded: list[str] = []

	def load(source: str, config: Optional[GeneratorConfig] = None) -> Tuple[ModuleType, ModuleType]:
		cfg = config or GeneratorConfig()
		module_name = f"excgen_case_{next(_module_ids)}"
		src_path = tmp_path / f"{module_name}.py"
		src_path.write_text(textwrap.dedent(source), encoding="utf-8")
		result = generate_file(src_path, module_name=module_name, config=cfg)
		assert result.ok, [d.format_human() for d in result.all_diagnostics]
		assert write_outputs([result], cfg), "no dispatch module generated"
		importlib.invalidate_caches()
		loaded.extend([module_name, f"{module_name}{cfg.output_suffix}"])
		user = importlib.import_module(module_name)
		generated = importlib.import_module(f"{module_name}{cfg.output_suffix}")
		return user, generated

	yield load
	for name in loaded:
		sys.modules.pop(name, None)
