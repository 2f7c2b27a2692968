# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generator configuration.

Defaults match the marker names exported by `excgen.annotations`. A project can
rename the markers (e.g. when re-exporting them under its own names) or change
where output goes with a JSON file:

	{
	  "format": "excgen-config",
	  "version": 0,
	  "markers": {
	    "container": "exception_handler",
	    "entry": "general_exception_handler",
	    "specific": "handles_exception",
	    "fallback": "fallback_exception_handler",
	    "partial_base": "Partial"
	  },
	  "output_suffix": "_dispatch",
	  "resolve_imports": true,
	  "jobs": 4
	}

Every key except "format"/"version" is optional.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from excgen.core.errors import ConfigError

_MARKER_KEYS = {
	"container": "container_marker",
	"entry": "entry_marker",
	"specific": "specific_marker",
	"fallback": "fallback_marker",
	"partial_base": "partial_base",
}


@dataclass(frozen=True)
class GeneratorConfig:
	container_marker: str = "exception_handler"
	entry_marker: str = "general_exception_handler"
	specific_marker: str = "handles_exception"
	fallback_marker: str = "fallback_exception_handler"
	partial_base: str = "Partial"
	output_suffix: str = "_dispatch"
	# Import modules named in `import`/`from ... import` statements to learn the
	# hierarchy of imported exception classes. Off: imported names stay opaque.
	resolve_imports: bool = True
	jobs: int = 1

	def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
		"""Return a copy with every non-None override applied."""
		known = {f.name for f in fields(self)}
		applied = {k: v for k, v in overrides.items() if v is not None}
		unknown = sorted(set(applied) - known)
		if unknown:
			raise ConfigError(reason_code="unknown-key", message="unknown configuration override", key=unknown[0])
		return replace(self, **applied)


def config_from_mapping(obj: Mapping[str, Any], *, path: str | None = None) -> GeneratorConfig:
	"""Validate a decoded JSON object and build a GeneratorConfig from it."""
	if obj.get("format") != "excgen-config" or obj.get("version") != 0:
		raise ConfigError(reason_code="unsupported-format", message="unsupported config format/version", path=path)

	values: dict[str, Any] = {}
	markers = obj.get("markers") or {}
	if not isinstance(markers, dict):
		raise ConfigError(reason_code="invalid-value", message="markers must be a JSON object", path=path, key="markers")
	for key, value in markers.items():
		if key not in _MARKER_KEYS:
			raise ConfigError(reason_code="unknown-key", message="unknown marker", path=path, key=f"markers.{key}")
		if not isinstance(value, str) or not value.isidentifier():
			raise ConfigError(
				reason_code="invalid-value",
				message="marker names must be identifiers",
				path=path,
				key=f"markers.{key}",
			)
		values[_MARKER_KEYS[key]] = value

	if "output_suffix" in obj:
		suffix = obj["output_suffix"]
		if not isinstance(suffix, str) or not suffix or not ("x" + suffix).isidentifier():
			raise ConfigError(
				reason_code="invalid-value",
				message="output_suffix must be a non-empty identifier fragment",
				path=path,
				key="output_suffix",
			)
		values["output_suffix"] = suffix
	if "resolve_imports" in obj:
		if not isinstance(obj["resolve_imports"], bool):
			raise ConfigError(reason_code="invalid-value", message="resolve_imports must be a boolean", path=path, key="resolve_imports")
		values["resolve_imports"] = obj["resolve_imports"]
	if "jobs" in obj:
		jobs = obj["jobs"]
		if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
			raise ConfigError(reason_code="invalid-value", message="jobs must be a positive integer", path=path, key="jobs")
		values["jobs"] = jobs
	return GeneratorConfig(**values)


def load_config_json(path: Path) -> GeneratorConfig:
	"""Load a generator config file (see module docstring for the format)."""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise ConfigError(reason_code="unreadable", message=f"cannot read config: {err.strerror}", path=str(path)) from err
	except json.JSONDecodeError as err:
		raise ConfigError(reason_code="invalid-json", message=f"invalid JSON: {err.msg}", path=str(path)) from err
	if not isinstance(obj, dict):
		raise ConfigError(reason_code="invalid-value", message="config must be a JSON object", path=str(path))
	return config_from_mapping(obj, path=str(path))


__all__ = ["GeneratorConfig", "config_from_mapping", "load_config_json"]
