# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .span import Span


class ExtractionError(Exception):
	"""
	A marked method (or its class) cannot be described as a handler signature.

	Raised by symbol providers; the driver turns it into a class-scoped
	diagnostic and skips only that class.
	"""

	def __init__(self, message: str, span: Span | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.span = span if span is not None else Span()


@dataclass(eq=False)
class ConfigError(Exception):
	"""A structured, serializable configuration error."""

	reason_code: str
	message: str
	path: str | None = None
	key: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"key": self.key,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		if self.key:
			parts.append(f"key={self.key}")
		return " ".join(parts)


__all__ = ["ExtractionError", "ConfigError"]
