# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info for a declaration. Spans built
from `ast` nodes keep the node in `raw` so richer renderers can recover it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw node)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = field(default=None, compare=False, repr=False)

	@classmethod
	def from_node(cls, node: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an `ast` node (or anything exposing lineno/col_offset).

		`ast` columns are 0-based; spans store them 1-based to match the
		`file:line:col` convention used by the CLI.
		"""
		if node is None:
			return cls(file=file)
		col = getattr(node, "col_offset", None)
		end_col = getattr(node, "end_col_offset", None)
		return cls(
			file=file,
			line=getattr(node, "lineno", None),
			column=col + 1 if col is not None else None,
			end_line=getattr(node, "end_lineno", None),
			end_column=end_col + 1 if end_col is not None else None,
			raw=node,
		)

	def format(self) -> str:
		"""Render as `file:line:col`, omitting unknown parts."""
		parts = []
		if self.file:
			parts.append(self.file)
		if self.line is not None:
			parts.append(f"{self.line}:{self.column if self.column is not None else 0}")
		return ":".join(parts) if parts else "<unknown location>"


__all__ = ["Span"]
