# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
excgen: static exception-dispatch generator.

Stages:
  symbols: Python source -> marked classes and methods (types in a TypeTable)
  checker: structural gates, role classification, compatibility analysis
  plan:    ordered dispatch plans per entry point
  render:  plans -> Python source installing the synthesized entry points

The CLI entrypoint is `excgen.excgen:main`; user code imports its markers from
`excgen.annotations`.
"""

from excgen.annotations import (
	Partial,
	exception_handler,
	fallback_exception_handler,
	general_exception_handler,
	handles_exception,
	install_dispatch,
)

__all__ = [
	"Partial",
	"exception_handler",
	"general_exception_handler",
	"fallback_exception_handler",
	"handles_exception",
	"install_dispatch",
]
