"""Identifier-erasing signature normalization.

Two declarations have the same shape when their canonical texts are
byte-identical. The canonical form drops decorators, comments and the body,
renames the function and every parameter binding to ``_``, and keeps
annotations, defaults, parameter kinds, order, ``async`` and the return
annotation.
"""

from __future__ import annotations

import ast
import inspect
import linecache
import textwrap

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider

from metagen.exceptions import MalformedDeclarationError

PLACEHOLDER = "_"
RECEIVER = "self"


class SignatureEraser(cst.CSTTransformer):
    def __init__(self, *, placeholder: str = PLACEHOLDER) -> None:
        self.placeholder = placeholder

    def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
        # Only the root signature is erased; the body is discarded on leave.
        return False

    def leave_FunctionDef(
        self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef
    ) -> cst.FunctionDef:
        return updated_node.with_changes(
            decorators=(),
            leading_lines=(),
            lines_after_decorators=(),
            name=cst.Name(self.placeholder),
            params=self._erase_parameters(updated_node.params),
            body=cst.SimpleStatementSuite(body=[cst.Expr(cst.Ellipsis())]),
        )

    def _erase_param(self, param: cst.Param) -> cst.Param:
        return param.with_changes(name=cst.Name(self.placeholder))

    def _erase_parameters(self, params: cst.Parameters) -> cst.Parameters:
        star_arg = params.star_arg
        if isinstance(star_arg, cst.Param):
            star_arg = self._erase_param(star_arg)
        star_kwarg = params.star_kwarg
        if star_kwarg is not None:
            star_kwarg = self._erase_param(star_kwarg)
        return params.with_changes(
            posonly_params=[self._erase_param(p) for p in params.posonly_params],
            params=[self._erase_param(p) for p in params.params],
            kwonly_params=[self._erase_param(p) for p in params.kwonly_params],
            star_arg=star_arg,
            star_kwarg=star_kwarg,
        )


def with_receiver(func: cst.FunctionDef, receiver: str = RECEIVER) -> cst.FunctionDef:
    """Return ``func`` with ``receiver`` inserted as its first parameter."""
    param = cst.Param(name=cst.Name(receiver))
    params = func.params
    if params.posonly_params:
        params = params.with_changes(posonly_params=[param, *params.posonly_params])
    else:
        params = params.with_changes(params=[param, *params.params])
    return func.with_changes(params=params)


def normalize_signature(
    func: cst.FunctionDef, *, inject_receiver: bool = False
) -> cst.FunctionDef:
    if inject_receiver:
        func = with_receiver(func)
    erased = func.visit(SignatureEraser())
    if not isinstance(erased, cst.FunctionDef):  # pragma: no cover
        raise MalformedDeclarationError("signature erasure removed the declaration")
    return erased


def render(node: cst.BaseStatement) -> str:
    return cst.Module(body=[node]).code


def canonical_text(func: cst.FunctionDef) -> str:
    """Re-serialize an (erased) declaration in whitespace-independent form."""
    return ast.unparse(ast.parse(render(func)))


def signatures_equal(left: cst.FunctionDef, right: cst.FunctionDef) -> bool:
    return canonical_text(left) == canonical_text(right)


def parse_declaration(source: str) -> cst.FunctionDef:
    try:
        module = cst.parse_module(textwrap.dedent(source))
    except cst.ParserSyntaxError as exc:
        raise MalformedDeclarationError(f"declaration does not parse: {exc}") from exc
    if len(module.body) != 1 or not isinstance(module.body[0], cst.FunctionDef):
        raise MalformedDeclarationError(
            "expected exactly one function definition, "
            f"found {len(module.body)} statement(s)"
        )
    return module.body[0]


class _DefinitionFinder(cst.CSTVisitor):
    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self, name: str, first_line: int) -> None:
        super().__init__()
        self.name = name
        self.first_line = first_line
        self.found: cst.FunctionDef | None = None

    def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
        if self.found is None and node.name.value == self.name:
            lines = {self.get_metadata(PositionProvider, node).start.line}
            for decorator in node.decorators:
                lines.add(
                    self.get_metadata(PositionProvider, decorator.decorator).start.line
                )
            if self.first_line in lines:
                self.found = node
        return self.found is None


def declaration_of(obj: object) -> cst.FunctionDef:
    """Return the definition of a live function from its module source.

    The whole file is parsed and the definition is picked by its first line,
    so indentation inside string literals never affects the result.
    """
    func = inspect.unwrap(obj)
    label = getattr(func, "__qualname__", func)
    code = getattr(func, "__code__", None)
    try:
        filename = inspect.getsourcefile(func)
    except TypeError as exc:
        raise MalformedDeclarationError(f"source for {label!r} is unavailable: {exc}") from exc
    if code is None or filename is None:
        raise MalformedDeclarationError(f"source for {label!r} is unavailable")
    lines = linecache.getlines(filename, getattr(func, "__globals__", None))
    if not lines:
        raise MalformedDeclarationError(f"source for {label!r} is unavailable: {filename}")
    try:
        wrapper = MetadataWrapper(cst.parse_module("".join(lines)))
    except cst.ParserSyntaxError as exc:
        raise MalformedDeclarationError(f"{filename} does not parse: {exc}") from exc
    finder = _DefinitionFinder(func.__name__, code.co_firstlineno)
    wrapper.visit(finder)
    if finder.found is None:
        raise MalformedDeclarationError(
            f"no definition of {label!r} at {filename}:{code.co_firstlineno}"
        )
    return finder.found
