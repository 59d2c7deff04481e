"""Abstract syntax tree nodes and a readable, indented tree dump."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from minicmips.symtable import Symbol


class NodeType(IntEnum):
    """The kind of grammar construct a node stands for."""

    FUNCTIONDEC = 0
    VARDEC = 1
    COMPOUND = 2
    WRITE = 3
    NUM = 4
    EXPR = 5
    VAR = 6
    READ = 7
    IF = 8
    ARG = 9
    CALL = 10
    IF_BODY = 11
    ASSIGN = 12
    ITERATE = 13
    WHILE_BODY = 14
    RETURN = 15
    PARAM = 16
    EXPRSTMT = 17


class Operator(IntEnum):
    """Operators carried by expression nodes."""

    PLUS = 0
    SUB = 1
    TIMES = 2
    MOD = 3
    DIV = 4
    LT = 5
    GT = 6
    GE = 7
    LE = 8
    EQ = 9
    NE = 10
    UMINUS = 11


class DataType(IntEnum):
    """Declared data types of the language."""

    INT = 0
    VOID = 1


_OPERATOR_TEXT = {
    Operator.PLUS: "+",
    Operator.SUB: "-",
    Operator.TIMES: "*",
    Operator.DIV: "/",
    Operator.MOD: "%",
    Operator.EQ: "==",
    Operator.LE: "<= ",
    Operator.GE: ">=",
    Operator.GT: ">",
    Operator.LT: "<",
    Operator.NE: "!=",
    Operator.UMINUS: "UMINUS",
}


@dataclass(eq=False)
class ASTNode:
    """A tree node; ``s1``/``s2`` are children and ``next`` links siblings."""

    kind: NodeType
    operator: Operator | None = None
    name: str | None = None
    value: int = 0
    label: str | None = None
    data_type: DataType = DataType.INT
    symbol: Symbol | None = field(default=None, repr=False)
    s1: ASTNode | None = None
    s2: ASTNode | None = None
    next: ASTNode | None = None


def data_type_name(data_type: DataType) -> str:
    """Return the source-language spelling of a data type."""
    return {DataType.INT: "int", DataType.VOID: "void"}[DataType(data_type)]


def indent(count: int) -> str:
    """Return ``count`` spaces (none for counts below one)."""
    return " " * max(count, 0)


def _scope(node: ASTNode) -> tuple[int, int]:
    if node.symbol is None:
        raise ValueError(f"node {node.kind.name} {node.name!r} has no symbol")
    return node.symbol.level, node.symbol.offset


def _render(node: ASTNode | None, level: int, out: list[str]) -> None:
    if node is None:
        return
    pad = indent(level)
    kind = node.kind

    if kind is NodeType.VARDEC:
        lvl, off = _scope(node)
        type_name = data_type_name(node.data_type)
        if node.value > 0:
            out.append(f"{pad}Variable {type_name} {node.name} [{node.value}] "
                       f"level: {lvl} offset: {off}\n")
        else:
            out.append(f"{pad}Variable {type_name} {node.name} "
                       f"level: {lvl} offset: {off}\n")
        _render(node.s1, level, out)
        _render(node.next, level, out)

    elif kind is NodeType.FUNCTIONDEC:
        lvl, off = _scope(node)
        out.append(f"{pad}Function {data_type_name(node.data_type)} {node.name} "
                   f"level: {lvl} offset: {off}\n")
        _render(node.s1, level + 1, out)
        _render(node.s2, level + 1, out)
        _render(node.next, level, out)

    elif kind is NodeType.COMPOUND:
        out.append(f"{pad}Compound Statement \n")
        _render(node.s1, level + 1, out)
        _render(node.s2, level + 1, out)
        _render(node.next, level, out)

    elif kind is NodeType.WRITE:
        out.append(pad)
        if node.name is not None:
            out.append(f"{pad}Write String {node.name}\n")
        else:
            out.append("Write Expression\n")
            _render(node.s1, level + 1, out)
        _render(node.next, level, out)

    elif kind is NodeType.NUM:
        out.append(f"{pad}Num value {node.value} \n")

    elif kind is NodeType.EXPR:
        text = _OPERATOR_TEXT.get(node.operator, "unknown operator ")
        out.append(f"{pad}Expression operator {text}\n")
        _render(node.s1, level + 1, out)
        _render(node.s2, level + 1, out)

    elif kind is NodeType.VAR:
        lvl, off = _scope(node)
        out.append(f"{pad}Variable {node.name} level: {lvl} offest: {off} \n")
        if node.s1 is not None and node.value > 0:
            out.append(f"{indent(level + 1)}[\n")
            _render(node.s1, level + 2, out)
            out.append(f"{indent(level + 1)}]\n")
        elif node.s1 is not None:
            _render(node.s1, level + 1, out)

    elif kind is NodeType.READ:
        out.append(f"{pad}Read Var\n")
        _render(node.s1, level + 1, out)

    elif kind is NodeType.IF:
        out.append(f"{pad}IF STATEMENT\n")
        out.append(f"{indent(level + 1)}IF EXPRESSION\n")
        _render(node.s1, level + 1, out)
        _render(node.s2, level + 1, out)
        out.append("\n")
        _render(node.next, level, out)

    elif kind is NodeType.IF_BODY:
        out.append(f"{pad}IF BODY\n")
        _render(node.s1, level + 1, out)
        if node.s2 is not None:
            out.append(f"{pad}else statment\n")
            _render(node.s2, level + 1, out)
        out.append("\n")

    elif kind is NodeType.ASSIGN:
        out.append(f"{pad}assignment statement\n")
        _render(node.s1, level, out)
        out.append(f"{pad}= \n")
        _render(node.s2, level, out)
        out.append("\n")

    elif kind is NodeType.ITERATE:
        out.append(f"{pad}WHILE STATEMENT\n")
        out.append(f"{indent(level + 1)}WHILE Expression\n")
        _render(node.s1, level + 1, out)
        _render(node.s2, level + 1, out)
        _render(node.next, level, out)
        out.append("\n")

    elif kind is NodeType.WHILE_BODY:
        out.append(f"{pad}while body\n")
        _render(node.s1, level + 1, out)
        out.append("\n")

    elif kind is NodeType.RETURN:
        out.append(f"{pad}RETURN STATEMENT\n")
        _render(node.s1, level + 1, out)
        _render(node.next, level, out)

    elif kind is NodeType.PARAM:
        out.append("PARAMETER ")
        type_name = data_type_name(node.data_type)
        if node.value > 0:
            out.append(f"{pad}Parameter {type_name} {node.name} [] \n")
        else:
            out.append(f"{pad}Paramater {type_name} {node.name} \n")
        _render(node.next, level, out)

    elif kind is NodeType.ARG:
        out.append(f"{pad}Call ARG\n ")
        _render(node.s1, level + 1, out)
        _render(node.next, level, out)

    elif kind is NodeType.CALL:
        out.append(f"{pad}Call function {node.name}(\n")
        if node.s1 is not None:
            _render(node.s1, level + 1, out)
        else:
            out.append(f"{indent(level + 1)}NULL\n")
        out.append(f"{indent(level + 1)})\n")

    elif kind is NodeType.EXPRSTMT:
        out.append(f"{pad}expression statment\n")
        _render(node.s1, level + 1, out)
        _render(node.next, level, out)

    else:
        out.append(f"unknown AST Node type {int(kind)} in ASTprint\n")


def format_ast(node: ASTNode | None, level: int = 0) -> str:
    """Return the indented dump of the tree rooted at ``node``."""
    out: list[str] = []
    _render(node, level, out)
    return "".join(out)


def print_ast(node: ASTNode | None, level: int = 0, file: TextIO | None = None) -> None:
    """Write the indented dump of the tree to ``file`` (stdout by default)."""
    (file or sys.stdout).write(format_ast(node, level))


def check_params(actuals: ASTNode | None, formals: ASTNode | None) -> bool:
    """Tell whether call arguments match formal parameters in count and type."""
    while actuals is not None and formals is not None:
        if actuals.s1 is None:
            raise ValueError("argument node has no expression")
        if actuals.s1.data_type != formals.data_type:
            return False
        if actuals.data_type != formals.data_type:
            return False
        actuals, formals = actuals.next, formals.next
    return actuals is None and formals is None