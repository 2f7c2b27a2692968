# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Checker-side analysis: structural gates, handler classification, exception-set
resolution and entry/candidate compatibility.
"""

from excgen.checker.classify import Classification, classify
from excgen.checker.compat import is_valid_fallback, is_valid_handler
from excgen.checker.exception_sets import ExceptionTypeSet, resolve_exception_types
from excgen.checker.structure import check_container

__all__ = [
	"Classification",
	"classify",
	"is_valid_handler",
	"is_valid_fallback",
	"ExceptionTypeSet",
	"resolve_exception_types",
	"check_container",
]
