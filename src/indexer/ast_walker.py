"""AST walker that extracts function-like declarations from Python source.

Visits every ``def``, ``async def`` and named ``lambda`` in a module and turns
each into a DeclarationSpan carrying its line range, name and parsed
docstring. Spans are returned in visit order; nesting is resolved later
by flatten_spans().

Example:
    >>> spans = extract_spans(Path("src/app/jobs.py").read_text())
    >>> [(s.name, s.start_line, s.end_line) for s in spans]
    [('run', 3, 9), ('cleanup', 12, 14)]
"""

import ast
from typing import Optional, Union

from .docstrings import parse_docstring
from .models import DeclarationSpan

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


class DeclarationWalker(ast.NodeVisitor):
    """Collect DeclarationSpans while walking a module AST."""

    def __init__(self):
        self.spans: list[DeclarationSpan] = []
        self._lambda_names: dict[int, str] = {}

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._add_function(node)
        self.generic_visit(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._add_function(node)
        self.generic_visit(node)

    def visit_Assign(self, node: ast.Assign) -> None:
        if len(node.targets) == 1:
            self._remember_lambda_name(node.targets[0], node.value)
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if node.value is not None:
            self._remember_lambda_name(node.target, node.value)
        self.generic_visit(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        # Only lambdas bound to a name are declarations; inline ones belong
        # to the enclosing function.
        name = self._lambda_names.get(id(node))
        if name is not None:
            self.spans.append(
                DeclarationSpan(
                    start_line=node.lineno,
                    end_line=node.end_lineno or node.lineno,
                    name=name,
                )
            )
        self.generic_visit(node)

    def _remember_lambda_name(self, target: ast.expr, value: ast.expr) -> None:
        if isinstance(value, ast.Lambda) and isinstance(target, ast.Name):
            self._lambda_names[id(value)] = target.id

    def _add_function(self, node: FunctionNode) -> None:
        start = min([node.lineno] + [d.lineno for d in node.decorator_list])
        doc = parse_docstring(ast.get_docstring(node, clean=False))
        self.spans.append(
            DeclarationSpan(
                start_line=start,
                end_line=node.end_lineno or node.lineno,
                name=node.name,
                first_paragraph=doc.first_paragraph,
                override=doc.override,
            )
        )


def extract_spans(source: str, filename: Optional[str] = None) -> list[DeclarationSpan]:
    """Parse source and return its declaration spans in visit order.

    Args:
        source: Python source text
        filename: Used in SyntaxError messages only

    Returns:
        List of DeclarationSpan (may be empty)

    Raises:
        SyntaxError: If the source is not valid Python
    """
    tree = ast.parse(source, filename=filename or "<unknown>")
    walker = DeclarationWalker()
    walker.visit(tree)
    return walker.spans
