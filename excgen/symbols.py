# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbol provider over Python source.

`AstSymbolProvider` reads one module with the standard `ast` module (the module
itself is never imported or executed) and reports:

- every class carrying the container marker, at any nesting depth, with its
  partial/nested flags;
- the marked methods of such a class, with their annotations resolved into a
  shared TypeTable.

Annotation names resolve module classes first, then imported names, then
builtins. Imported classes can be resolved by importing their origin module
(`GeneratorConfig.resolve_imports`); anything that cannot be resolved becomes
an opaque type that is only compatible with itself.
"""

from __future__ import annotations

import ast
import importlib
import importlib.util
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from excgen.config import GeneratorConfig
from excgen.core.descriptors import ClassDecl, MethodDecl, MethodKind, MethodRole, Param
from excgen.core.errors import ExtractionError
from excgen.core.span import Span
from excgen.core.types_core import TypeId, TypeKind, TypeTable
from excgen.types_protocol import SymbolProvider

logger = logging.getLogger(__name__)

_TYPING_MODULES = frozenset({"typing", "typing_extensions"})
# typing aliases of builtin generics
_TYPING_ALIASES = {
	"List": "list",
	"Dict": "dict",
	"Set": "set",
	"FrozenSet": "frozenset",
	"Tuple": "tuple",
	"Type": "type",
}


@dataclass(frozen=True)
class _ImportRef:
	"""What a module-level name is bound to by an import statement."""

	module: str
	attr: Optional[str] = None  # None: the name is bound to the module itself


def _final_name(node: ast.expr) -> Optional[str]:
	"""Last identifier of a decorator/base expression (`a.b.c(...)` -> `c`)."""
	if isinstance(node, ast.Call):
		node = node.func
	if isinstance(node, ast.Name):
		return node.id
	if isinstance(node, ast.Attribute):
		return node.attr
	return None


def _dotted_parts(node: ast.expr) -> Optional[List[str]]:
	parts: List[str] = []
	while isinstance(node, ast.Attribute):
		parts.append(node.attr)
		node = node.value
	if not isinstance(node, ast.Name):
		return None
	parts.append(node.id)
	parts.reverse()
	return parts


def _is_docstring(stmt: ast.stmt) -> bool:
	return isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str)


def is_stub_body(body: Sequence[ast.stmt]) -> bool:
	"""
	Return True for a declaration-only body: after an optional docstring, the
	body is empty or the single expression `...`.
	"""
	stmts = list(body)
	if stmts and _is_docstring(stmts[0]):
		stmts = stmts[1:]
	if not stmts:
		return True
	if len(stmts) != 1:
		return False
	only = stmts[0]
	return isinstance(only, ast.Expr) and isinstance(only.value, ast.Constant) and only.value.value is Ellipsis


def _child_blocks(stmt: ast.stmt) -> Iterator[List[ast.stmt]]:
	"""Statement lists nested in a compound statement (if/for/while/with/try/match)."""
	for field_name in ("body", "orelse", "finalbody"):
		block = getattr(stmt, field_name, None)
		if isinstance(block, list):
			yield block
	for handler in getattr(stmt, "handlers", None) or []:
		yield handler.body
	for case in getattr(stmt, "cases", None) or []:
		yield case.body


class AstSymbolProvider(SymbolProvider):
	"""SymbolProvider for a single Python module."""

	def __init__(
		self,
		tree: ast.Module,
		*,
		path: Optional[str],
		module_name: str,
		table: TypeTable,
		config: GeneratorConfig,
		is_package: bool = False,
	) -> None:
		self._tree = tree
		self._path = path
		self._module = module_name
		self._table = table
		self._config = config
		self._is_package = is_package
		self._imports: dict[str, _ImportRef] = {}
		self._local_classes: dict[str, TypeId] = {}
		self._import_cache: dict[Tuple[str, str], TypeId] = {}
		# (class node, nested?) in source order.
		self._class_nodes: List[Tuple[ast.ClassDef, bool]] = []
		self._collect_classes(tree.body, nested=False)
		self._collect_imports(tree.body)
		self._declare_local_classes()

	@classmethod
	def from_source(
		cls,
		source: str,
		*,
		path: Optional[str],
		module_name: str,
		table: TypeTable,
		config: GeneratorConfig,
		is_package: bool = False,
	) -> "AstSymbolProvider":
		"""Parse `source`; raises SyntaxError/ValueError when it is not valid Python."""
		tree = ast.parse(source, filename=path or "<unknown>")
		return cls(tree, path=path, module_name=module_name, table=table, config=config, is_package=is_package)

	@property
	def table(self) -> TypeTable:
		return self._table

	# --- SymbolProvider -------------------------------------------------

	def classes(self) -> List[ClassDecl]:
		out: List[ClassDecl] = []
		for node, nested in self._class_nodes:
			if not self._has_marker(node.decorator_list, self._config.container_marker):
				continue
			out.append(
				ClassDecl(
					name=node.name,
					module=self._module,
					is_partial=any(_final_name(base) == self._config.partial_base for base in node.bases),
					is_nested=nested,
					span=Span.from_node(node, self._path),
					handle=node,
				)
			)
		return out

	def methods(self, cls: ClassDecl) -> List[MethodDecl]:
		node = cls.handle
		if not isinstance(node, ast.ClassDef):
			raise ExtractionError(f"no declaration available for class '{cls.name}'", cls.span)
		out: List[MethodDecl] = []
		order = 0
		for stmt in node.body:
			if not isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
				continue
			index = order
			order += 1
			markers, type_args = self._markers_of(stmt)
			if not markers:
				continue
			out.append(self._describe_method(cls, stmt, index, markers, type_args))
		return out

	# --- module scan ----------------------------------------------------

	def _collect_classes(self, body: Sequence[ast.stmt], nested: bool) -> None:
		for stmt in body:
			if isinstance(stmt, ast.ClassDef):
				self._class_nodes.append((stmt, nested))
				self._collect_classes(stmt.body, nested=True)
			elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
				self._collect_classes(stmt.body, nested=True)
			else:
				# Compound statements at module level keep module scope.
				for block in _child_blocks(stmt):
					self._collect_classes(block, nested=nested)

	def _collect_imports(self, body: Sequence[ast.stmt]) -> None:
		for stmt in body:
			if isinstance(stmt, ast.Import):
				for alias in stmt.names:
					if alias.asname:
						self._imports[alias.asname] = _ImportRef(module=alias.name)
					else:
						head = alias.name.split(".", 1)[0]
						self._imports[head] = _ImportRef(module=head)
			elif isinstance(stmt, ast.ImportFrom):
				module = self._absolute_module(stmt)
				if module is None:
					continue
				for alias in stmt.names:
					if alias.name == "*":
						continue
					self._imports[alias.asname or alias.name] = _ImportRef(module=module, attr=alias.name)
			elif not isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
				for block in _child_blocks(stmt):
					self._collect_imports(block)

	def _absolute_module(self, stmt: ast.ImportFrom) -> Optional[str]:
		if not stmt.level:
			return stmt.module
		package = self._module if self._is_package else self._module.rpartition(".")[0]
		try:
			return importlib.util.resolve_name("." * stmt.level + (stmt.module or ""), package)
		except (ImportError, ValueError):
			logger.debug("%s: cannot resolve relative import level=%d module=%s", self._module, stmt.level, stmt.module)
			return None

	def _declare_local_classes(self) -> None:
		module_level = [node for node, nested in self._class_nodes if not nested]
		for node in module_level:
			self._local_classes[node.name] = self._table.declare_class(self._module, node.name)
		for node in module_level:
			bases: List[TypeId] = []
			for base in node.bases:
				ty = self.resolve_annotation(base)
				if self._table.get(ty).kind is TypeKind.CLASS:
					bases.append(ty)
			self._table.set_bases(self._local_classes[node.name], bases)

	# --- methods --------------------------------------------------------

	def _has_marker(self, decorators: Sequence[ast.expr], marker: str) -> bool:
		return any(_final_name(dec) == marker for dec in decorators)

	def _markers_of(self, fn: ast.FunctionDef | ast.AsyncFunctionDef) -> Tuple[frozenset[MethodRole], Tuple[TypeId, ...]]:
		roles: set[MethodRole] = set()
		type_args: List[TypeId] = []
		for dec in fn.decorator_list:
			name = _final_name(dec)
			if name == self._config.entry_marker:
				roles.add(MethodRole.ENTRY_POINT)
			elif name == self._config.fallback_marker:
				roles.add(MethodRole.FALLBACK)
			elif name == self._config.specific_marker:
				roles.add(MethodRole.SPECIFIC)
				if isinstance(dec, ast.Call):
					type_args.extend(self._marker_type_args(dec.args))
		return frozenset(roles), tuple(type_args)

	def _marker_type_args(self, args: Sequence[ast.expr]) -> Iterator[TypeId]:
		"""
		Yield a type for every name or attribute among the marker's arguments.

		Literals and other expressions are skipped. A reference that does not
		resolve to a class stays in the set as an opaque type, so the handler is
		rejected instead of silently defaulting to its parameter type.
		"""
		for arg in args:
			if isinstance(arg, (ast.Tuple, ast.List)):
				yield from self._marker_type_args(arg.elts)
				continue
			if not isinstance(arg, (ast.Name, ast.Attribute)):
				continue
			ty = self.resolve_annotation(arg)
			if self._table.get(ty).kind in (TypeKind.CLASS, TypeKind.OPAQUE):
				yield ty
			else:
				yield self._table.new_opaque(ast.unparse(arg))

	def _describe_method(
		self,
		cls: ClassDecl,
		fn: ast.FunctionDef | ast.AsyncFunctionDef,
		order: int,
		markers: frozenset[MethodRole],
		type_args: Tuple[TypeId, ...],
	) -> MethodDecl:
		span = Span.from_node(fn, self._path)
		qualified = f"{cls.name}.{fn.name}"
		kind = MethodKind.INSTANCE
		for dec in fn.decorator_list:
			name = _final_name(dec)
			if name == "staticmethod":
				kind = MethodKind.STATIC
			elif name == "classmethod":
				kind = MethodKind.CLASS

		args = fn.args
		if args.vararg is not None or args.kwarg is not None:
			raise ExtractionError(f"handler method '{qualified}' may not declare *args or **kwargs", span)
		if args.kwonlyargs:
			raise ExtractionError(f"handler method '{qualified}' may not declare keyword-only parameters", span)
		positional = [*args.posonlyargs, *args.args]
		receiver: Optional[str] = None
		if kind is not MethodKind.STATIC:
			if not positional:
				raise ExtractionError(f"handler method '{qualified}' has no receiver parameter", span)
			receiver = positional[0].arg
			positional = positional[1:]

		return MethodDecl(
			name=fn.name,
			params=tuple(Param(name=a.arg, type=self.resolve_annotation(a.annotation)) for a in positional),
			return_type=self.resolve_annotation(fn.returns),
			is_stub=is_stub_body(fn.body),
			order=order,
			kind=kind,
			is_async=isinstance(fn, ast.AsyncFunctionDef),
			receiver=receiver,
			markers=markers,
			type_args=type_args,
			span=span,
		)

	# --- annotations ----------------------------------------------------

	def resolve_annotation(self, node: Optional[ast.expr]) -> TypeId:
		"""Resolve an annotation expression; a missing annotation is `Any`."""
		if node is None:
			return self._table.ensure_any()
		if isinstance(node, ast.Constant):
			if node.value is None:
				return self._table.ensure_none()
			if isinstance(node.value, str):
				try:
					inner = ast.parse(node.value, mode="eval").body
				except SyntaxError:
					return self._table.new_opaque(node.value)
				return self.resolve_annotation(inner)
			return self._table.new_opaque(ast.unparse(node))
		if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
			return self._table.new_union([self.resolve_annotation(node.left), self.resolve_annotation(node.right)])
		if isinstance(node, ast.Subscript):
			return self._resolve_subscript(node)
		if isinstance(node, (ast.Name, ast.Attribute)):
			return self._resolve_reference(node)
		return self._table.new_opaque(ast.unparse(node))

	def _resolve_subscript(self, node: ast.Subscript) -> TypeId:
		arg_nodes = list(node.slice.elts) if isinstance(node.slice, ast.Tuple) else [node.slice]
		form = self._typing_form(node.value)
		if form == "Optional":
			return self._table.new_union([self.resolve_annotation(arg_nodes[0]), self._table.ensure_none()])
		if form == "Union":
			return self._table.new_union([self.resolve_annotation(arg) for arg in arg_nodes])
		if form == "Annotated":
			return self.resolve_annotation(arg_nodes[0])
		origin = self.resolve_annotation(node.value)
		if self._table.get(origin).kind is not TypeKind.CLASS:
			return self._table.new_opaque(ast.unparse(node))
		return self._table.new_generic(origin, [self.resolve_annotation(arg) for arg in arg_nodes])

	def _typing_form(self, node: ast.expr) -> Optional[str]:
		"""Return the typing-module name `node` refers to, if any."""
		parts = _dotted_parts(node)
		if not parts:
			return None
		ref = self._imports.get(parts[0])
		if ref is None or ref.module not in _TYPING_MODULES:
			return None
		if ref.attr is not None:
			return ref.attr if len(parts) == 1 else None
		return parts[-1] if len(parts) == 2 else None

	def _resolve_reference(self, node: ast.Name | ast.Attribute) -> TypeId:
		expr = ast.unparse(node)
		form = self._typing_form(node)
		if form is not None:
			if form == "Any":
				return self._table.ensure_any()
			if form in _TYPING_ALIASES:
				builtin = self._table.ensure_builtin(_TYPING_ALIASES[form])
				if builtin is not None:
					return builtin
			return self._table.new_opaque(expr)

		parts = _dotted_parts(node)
		if not parts:
			return self._table.new_opaque(expr)
		head = parts[0]
		if len(parts) == 1:
			if head in self._local_classes:
				return self._local_classes[head]
			ref = self._imports.get(head)
			if ref is not None:
				if ref.attr is None:
					return self._table.new_opaque(expr)
				return self._resolve_imported(ref.module, ref.attr, expr)
			builtin = self._table.ensure_builtin(head)
			if builtin is not None:
				return builtin
			return self._table.new_opaque(expr)

		ref = self._imports.get(head)
		if ref is None:
			# `Outer.Inner` and other attribute chains we cannot follow statically.
			return self._table.new_opaque(expr)
		module = ref.module if ref.attr is None else f"{ref.module}.{ref.attr}"
		middle = parts[1:-1]
		if middle:
			module = ".".join([module, *middle])
		return self._resolve_imported(module, parts[-1], expr)

	def _resolve_imported(self, module: str, attr: str, expr: str) -> TypeId:
		key = (module, attr)
		cached = self._import_cache.get(key)
		if cached is not None:
			return cached
		ty = self._import_class(module, attr, expr)
		self._import_cache[key] = ty
		return ty

	def _import_class(self, module: str, attr: str, expr: str) -> TypeId:
		if not self._config.resolve_imports:
			return self._table.new_opaque(f"{module}.{attr}", source_expr=expr)
		try:
			mod = importlib.import_module(module)
		except (Exception, SystemExit) as err:  # importing runs arbitrary module code
			logger.debug("%s: cannot import %s for %s: %s", self._module, module, expr, err)
			return self._table.new_opaque(f"{module}.{attr}", source_expr=expr)
		value = getattr(mod, attr, None)
		if not isinstance(value, type):
			logger.debug("%s: %s.%s is not a class; treating %s as opaque", self._module, module, attr, expr)
			return self._table.new_opaque(f"{module}.{attr}", source_expr=expr)
		return self._table.ensure_runtime_class(value, source_expr=expr)


__all__ = ["AstSymbolProvider", "is_stub_body"]
