# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for generator passes.

Every user-facing problem (structural rejection of a target class, a class whose
handler signatures cannot be extracted, a source file that does not parse) is a
Diagnostic. Diagnostics are class- or module-scoped; none of them aborts the
pass for sibling classes or modules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .span import Span

# Diagnostic codes surfaced to the host.
PARSE_FAILED = "EXC000"
REQUIRES_PARTIAL = "EXC001"
NESTED_CLASS = "EXC002"
EXTRACTION_FAILED = "EXC003"
UNSYNTHESIZED_ENTRY = "EXC004"


@dataclass(frozen=True)
class Diagnostic:
	"""Represents a generator diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Optional phase label ("parse", "structure", "extract", "io"); the CLI
	# prints it in JSON output so test expectations stay unambiguous.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: tuple[str, ...] = ()

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			object.__setattr__(self, "span", Span())

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def format_human(self) -> str:
		code = f" [{self.code}]" if self.code else ""
		text = f"{self.span.format()}: {self.severity}{code}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code,
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.is_error for d in diagnostics)


__all__ = [
	"Diagnostic",
	"has_errors",
	"PARSE_FAILED",
	"REQUIRES_PARTIAL",
	"NESTED_CLASS",
	"EXTRACTION_FAILED",
	"UNSYNTHESIZED_ENTRY",
]
