"""MIPS assembly generation from an annotated abstract syntax tree."""

from __future__ import annotations

import io
from typing import TextIO

from minicmips.symtable import Symbol
from minicmips.syntax_tree import ASTNode, NodeType, Operator

WSIZE = 4
LOG_WSIZE = 2


class CodeGenError(Exception):
    """Raised when the tree holds something the generator cannot translate."""


def emit_line(out: TextIO, label: str, command: str, comment: str) -> None:
    """Write one formatted assembly line: label, command and comment."""
    out.write(f"{label}\t{command}\t#{comment}\n")


def _symbol(node: ASTNode) -> Symbol:
    if node.symbol is None:
        raise CodeGenError(f"node {node.kind.name} {node.name!r} has no symbol")
    return node.symbol


_OPERATOR_CODE: dict[Operator, tuple[tuple[str, str], ...]] = {
    Operator.PLUS: (("add $a0 $a0, $a1", "add and expression"),),
    Operator.SUB: (("sub $a0 $a0, $a1", "subtract an expression"),),
    Operator.TIMES: (
        ("mult $a0 $a1", "multiply left and right"),
        ("mflo $a0", "multiply expression"),
    ),
    Operator.DIV: (
        ("div $a0, $a1", "divide the expression"),
        ("mflo $a0", "dividion expression"),
    ),
    Operator.LE: (
        ("add $a1, $a1, 1", "Less than EQUAL EXPRESSION"),
        ("slt $a0, $a1, $a0", "LESS THAN EXPRESSION"),
    ),
    Operator.GT: (("slt $a0, $a0, $a1", "greater than expression"),),
    Operator.GE: (
        ("add $a1, $a1, 1", "GREATER than EQUAL EXPRESSION"),
        ("slt $a0, $a1, $a0", "greater than equal expression"),
    ),
    Operator.EQ: (
        ("slt $t2, $a0, $a1", "equal expression"),
        ("slt $t3, $a1, $a0", "equal expression"),
        ("nor $a0, $t2, $t3", "equal expression"),
        ("andi $a0, 1", "EQUAL EXPRESSION"),
    ),
    Operator.NE: (
        ("slt $t2, $a0, $a1", "not equal expression"),
        ("slt $t3, $a1, $a0", "not equal expression"),
        ("or $a0, $t2, $t3", "not equal expression"),
    ),
    Operator.LT: (("slt $a0, $a0, $a1", "less than expression"),),
    Operator.UMINUS: (
        ("li $t0, 0", "loading unary minus holder"),
        ("sub $a0, $t0, $a0", "UNARY MINUS IMPLEMENTATION"),
    ),
}


class MipsEmitter:
    """Walks the tree and writes MIPS assembly; owns the label counter."""

    def __init__(self) -> None:
        self._label_count = 0

    def generate_label(self) -> str:
        """Return a fresh label of the form ``_LN``."""
        label = f"_L{self._label_count}"
        self._label_count += 1
        return label

    def emit(self, root: ASTNode | None, out: TextIO) -> None:
        """Write the whole program: data segment, then text segment."""
        if root is None:
            return
        out.write("#MIPS CODE GENERATED HEADER CS370\n\n")
        out.write(".data\n\n")
        self.emit_strings(root, out)
        out.write(".align 2")
        self.emit_globals(root, out)
        out.write("\n.text\n")
        out.write(".globl main\n\n")
        self.emit_ast(root, out)

    def emit_globals(self, node: ASTNode | None, out: TextIO) -> None:
        """Reserve space in the data segment for every global variable."""
        while node is not None:
            if node.kind is NodeType.VARDEC and _symbol(node).level == 0:
                symbol = _symbol(node)
                out.write(f"\n{symbol.name}: .space {symbol.size * WSIZE}")
            self.emit_globals(node.s1, out)
            node = node.next

    def emit_strings(self, node: ASTNode | None, out: TextIO) -> None:
        """Write every string literal, labelling write nodes that lack a label."""
        while node is not None:
            if node.kind is NodeType.WRITE and node.name is not None:
                if node.label is None:
                    node.label = self.generate_label()
                out.write(f"{node.label}: .asciiz {node.name} \n")
            self.emit_strings(node.s1, out)
            self.emit_strings(node.s2, out)
            node = node.next

    def emit_ast(self, node: ASTNode | None, out: TextIO) -> None:
        """Write code for a statement or declaration and its successors."""
        if node is None:
            return
        kind = node.kind
        if kind is NodeType.VARDEC:
            self.emit_ast(node.next, out)
        elif kind is NodeType.FUNCTIONDEC:
            self._emit_function(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.WRITE:
            self._emit_write(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.COMPOUND:
            self.emit_ast(node.next, out)
            self.emit_ast(node.s2, out)
        elif kind is NodeType.READ:
            self._emit_read(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.ASSIGN:
            self._emit_assign(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.ITERATE:
            self._emit_while(node, out)
            self.emit_ast(node.next, out)
        elif kind in (NodeType.WHILE_BODY, NodeType.IF_BODY):
            pass
        elif kind is NodeType.IF:
            self._emit_if(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.RETURN:
            self._emit_return(node, out)
            self.emit_ast(node.next, out)
        elif kind is NodeType.CALL:
            self.emit_call(node, out)
        elif kind is NodeType.EXPRSTMT:
            if node.s1 is None:
                raise CodeGenError("expression statement has no expression")
            self.emit_expr(node.s1, out)
        else:
            raise CodeGenError(f"emit ast case {int(kind)} not implemented")

    def emit_expr(self, node: ASTNode, out: TextIO) -> None:
        """Write code that leaves the value of the expression in $a0."""
        kind = node.kind
        if kind is NodeType.NUM:
            emit_line(out, "", f"li $a0, {node.value}", "expression is a constant int")
            return
        if kind is NodeType.CALL:
            self.emit_call(node, out)
            return
        if kind is NodeType.VAR:
            self._emit_var(node, out)
            emit_line(out, "", "lw $a0, ($a0)", "Expression is a var")
            return
        if kind is not NodeType.EXPR:
            raise CodeGenError(f"cannot evaluate node {kind.name} as an expression")

        if node.s1 is None:
            raise CodeGenError("expression has no left operand")
        offset = _symbol(node).offset * WSIZE
        self.emit_expr(node.s1, out)
        emit_line(out, "", f"sw $a0, {offset}($sp)", "lhs is an expression")
        if node.s2 is not None:
            self.emit_expr(node.s2, out)
        emit_line(out, "", "move $a1, $a0", "rhs of an expression")
        emit_line(out, "", f"lw $a0, {offset}($sp)", "lhs from memory stack pointer")

        code = _OPERATOR_CODE.get(node.operator) if node.operator is not None else None
        if code is None:
            raise CodeGenError("error inside of expression operator")
        for command, comment in code:
            emit_line(out, "", command, comment)

    def emit_call(self, node: ASTNode, out: TextIO) -> None:
        """Evaluate call arguments into $t registers and jump to the function."""
        args = []
        arg = node.s1
        while arg is not None:
            args.append(arg)
            arg = arg.next

        for arg in args:
            if arg.s1 is None:
                raise CodeGenError("call argument has no expression")
            self.emit_expr(arg.s1, out)
            offset = _symbol(arg).offset * WSIZE
            emit_line(out, "", f"sw $a0, {offset}($sp)\n", "store call arg temporarily")
        for register, arg in enumerate(args):
            offset = _symbol(arg).offset * WSIZE
            emit_line(out, "", f"lw $a0, {offset}($sp)", "pull out stored Arg")
            emit_line(out, "", f"move $t{register}, $a0", "move arg in temp\n")
        emit_line(out, "", f"jal {node.name}\n\n", "call the function")

    def _emit_var(self, node: ASTNode, out: TextIO) -> None:
        """Leave the address of the variable (element) in $a0."""
        symbol = _symbol(node)
        index = node.s1
        if index is not None:
            if index.kind is NodeType.NUM:
                emit_line(out, "", f"li $a0, {index.value}", "VAR is a number")
                emit_line(out, "", "move $a1, $a0", "make a copy of the index")
                emit_line(out, "", "move $a1, $a0", "VAR copy index array in a1")
                emit_line(out, "", f"sll $a1 $a1 {LOG_WSIZE}",
                          "mult the index by the wordsize")
            elif index.kind is NodeType.EXPR:
                self.emit_expr(index, out)
                emit_line(out, "", "move $a1, $a0", "var copy index array in a1")
                emit_line(out, "", f"sll $a1, $a1, {LOG_WSIZE}", "multiply index by 4")
            elif index.kind is NodeType.VAR:
                self._emit_var(index, out)
                emit_line(out, "", "lw $a0 ($a0)", "get value from identifier")
                emit_line(out, "", "move $a1, $a0", "var copy index array in a1")
                emit_line(out, "", f"sll $a1, $a1, {LOG_WSIZE}", "multiply index by 4")
            else:
                raise CodeGenError(f"unsupported array index node {index.kind.name}")

        if symbol.level == 0:
            emit_line(out, "", f"la $a0, {symbol.name}",
                      "load global variables from data segment")
        else:
            emit_line(out, "", "move $a0 $sp", "take a copy of the stack pointer")
            emit_line(out, "", f"addi $a0, $a0, {symbol.offset * WSIZE}",
                      "load from code segment")
        if index is not None:
            emit_line(out, "", "add $a0, $a0, $a1", "add on a1 to the array reference")

    def _emit_write(self, node: ASTNode, out: TextIO) -> None:
        if node.name is not None:
            if node.label is None:
                raise CodeGenError(f"string {node.name} has no label")
            emit_line(out, "", f"la $a0, {node.label}", "The string address")
            emit_line(out, "", "li $v0, 4", "About to print a string")
            emit_line(out, "", "syscall", "call write to string")
        else:
            if node.s1 is None:
                raise CodeGenError("write has no expression")
            self.emit_expr(node.s1, out)
            emit_line(out, "", "li $v0, 1", "About to print a number")
            emit_line(out, "", "syscall", "call to write a number")
        out.write("\n\n")

    def _emit_read(self, node: ASTNode, out: TextIO) -> None:
        if node.s1 is None:
            raise CodeGenError("read has no variable")
        self._emit_var(node.s1, out)
        emit_line(out, "", "li $v0, 5", "about to read in value")
        emit_line(out, "", "syscall", "read in value")
        emit_line(out, "", "sw $v0, ($a0)", "store the read in value")
        out.write("\n\n")

    def _emit_function(self, node: ASTNode, out: TextIO) -> None:
        symbol = _symbol(node)
        emit_line(out, f"{node.name}:", "", "function declaration")
        emit_line(out, "", "move $a1, $sp", "ACtivation record carve out copy sp")
        emit_line(out, "", f"subi $a1, $a1, {symbol.offset * WSIZE}",
                  "Activation carve out size of function")
        emit_line(out, "", "sw $ra, ($a1)", "Store return address")
        emit_line(out, "", f"sw $sp {WSIZE}($a1)", "Store the old stack pointer")
        emit_line(out, "", "move $sp, $a1", "make sp the current activation record")
        out.write("\n\n")

        param = node.s1
        register = 0
        while param is not None:
            emit_line(out, "", f"sw $t{register} {_symbol(param).offset * WSIZE}($sp)",
                      "parameter store start of function")
            register += 1
            param = param.next

        self.emit_ast(node.s2, out)

        emit_line(out, "", "lw $ra ($sp)", "restore old env RA")
        emit_line(out, "", f"lw $sp {WSIZE}($sp)", "return from function restore sp")
        out.write("\n")
        if node.name != "main":
            emit_line(out, "", "jr $ra", "jump to the other function")
        emit_line(out, "", "li $v0, 10", "exit from main done")
        emit_line(out, "", "syscall", "EXIT PROGRAM")

    def _emit_while(self, node: ASTNode, out: TextIO) -> None:
        if node.s1 is None or node.s2 is None:
            raise CodeGenError("while statement is incomplete")
        top = self.generate_label()
        end = self.generate_label()
        emit_line(out, f"{top}:", "", "WHILE TOP LABEL")
        self.emit_expr(node.s1, out)
        emit_line(out, "", f"beq $a0, $0 {end}", "BRANCH EQ GET OUT")
        self.emit_ast(node.s2.s1, out)
        emit_line(out, "", f"j {top}", "jump back till BRANCH EQ")
        emit_line(out, f"{end}:", "", "END OF WHILE")

    def _emit_if(self, node: ASTNode, out: TextIO) -> None:
        if node.s1 is None or node.s2 is None:
            raise CodeGenError("if statement is incomplete")
        else_label = self.generate_label()
        end_label = self.generate_label()
        self.emit_expr(node.s1, out)
        emit_line(out, "", f"beq $a0, $0 {else_label}", "if branch to else")
        self.emit_ast(node.s2.s1, out)
        emit_line(out, "", f"j {end_label}", "goto L2")
        emit_line(out, f"{else_label}:", "", "LABEL 1")
        self.emit_ast(node.s2.s2, out)
        emit_line(out, f"{end_label}:", "", "LABEL 2")

    def _emit_return(self, node: ASTNode, out: TextIO) -> None:
        if node.s1 is None:
            emit_line(out, "", "li $a0, 0 ", "return zero")
        else:
            self.emit_expr(node.s1, out)

    def _emit_assign(self, node: ASTNode, out: TextIO) -> None:
        if node.s1 is None or node.s2 is None:
            raise CodeGenError("assignment is incomplete")
        offset = _symbol(node).offset * WSIZE
        self.emit_expr(node.s2, out)
        emit_line(out, "", f"sw $a0 {offset}($sp)", "")
        self._emit_var(node.s1, out)
        emit_line(out, "", f"lw $a1 {offset}($sp)", "load the expression")
        emit_line(out, "", "sw $a1 ($a0)", "assign into memory of var")


def generate_program(root: ASTNode | None) -> str:
    """Return the complete assembly text for the program tree."""
    buffer = io.StringIO()
    MipsEmitter().emit(root, buffer)
    return buffer.getvalue()