import io

import pytest

from minicmips.emit import CodeGenError, MipsEmitter, emit_line, generate_program
from minicmips.symtable import Symbol, SymbolSubtype
from minicmips.syntax_tree import ASTNode, DataType, NodeType, Operator


def _sym(name, level, offset, size=1, subtype=SymbolSubtype.SCALAR):
    return Symbol(name=name, offset=offset, size=size, level=level,
                  data_type=DataType.INT, subtype=subtype)


def _num(value):
    return ASTNode(NodeType.NUM, value=value)


def _var(symbol, index=None):
    return ASTNode(NodeType.VAR, name=symbol.name, symbol=symbol, s1=index)


def _expr(op, left, right, offset=5):
    return ASTNode(NodeType.EXPR, operator=op, s1=left, s2=right,
                   symbol=_sym("_t", 1, offset))


def _function(name, body, offset=6, params=None):
    return ASTNode(NodeType.FUNCTIONDEC, name=name, data_type=DataType.VOID,
                   symbol=_sym(name, 0, offset, subtype=SymbolSubtype.FUNCTION),
                   s1=params, s2=body)


def _sample_program():
    array = ASTNode(NodeType.VARDEC, name="A", value=100,
                    symbol=_sym("A", 0, 0, size=100, subtype=SymbolSubtype.ARRAY))
    x_sym = _sym("x", 1, 2)
    local = ASTNode(NodeType.VARDEC, name="x", symbol=x_sym)
    write_hello = ASTNode(NodeType.WRITE, name='"hello"')
    write_nl = ASTNode(NodeType.WRITE, name='"\\n"')
    assign = ASTNode(NodeType.ASSIGN, s1=_var(x_sym), s2=_num(10),
                     symbol=_sym("_t0", 1, 3))
    write_expr = ASTNode(NodeType.WRITE,
                         s1=_expr(Operator.SUB, _var(x_sym), _num(1), offset=4))
    write_hello.next = write_nl
    write_nl.next = assign
    assign.next = write_expr
    body = ASTNode(NodeType.COMPOUND, s1=local, s2=write_hello)
    array.next = _function("main", body)
    return array


def _run(method, node):
    out = io.StringIO()
    method(node, out)
    return out.getvalue()


def test_emit_line_format():
    out = io.StringIO()
    emit_line(out, "L", "cmd", "note")
    assert out.getvalue() == "L\tcmd\t#note\n"


def test_generate_label_sequence():
    emitter = MipsEmitter()
    assert [emitter.generate_label() for _ in range(3)] == ["_L0", "_L1", "_L2"]


def test_constant_expression():
    text = _run(MipsEmitter().emit_expr, _num(7))
    assert text == "\tli $a0, 7\t#expression is a constant int\n"


def test_binary_expression_ends_with_operator_code():
    node = _expr(Operator.PLUS, _num(1), _num(2))
    lines = _run(MipsEmitter().emit_expr, node).splitlines()
    assert lines[0].startswith("\tli $a0, 1")
    assert "move $a1, $a0" in lines[-2] or "move $a1, $a0" in lines[-3]
    assert lines[-1].startswith("\tadd $a0 $a0, $a1")


def test_equality_uses_four_instructions():
    node = _expr(Operator.EQ, _num(1), _num(2))
    text = _run(MipsEmitter().emit_expr, node)
    assert text.count("#equal expression") == 3
    assert "andi $a0, 1" in text


def test_unary_minus_without_right_operand():
    node = _expr(Operator.UMINUS, _num(3), None)
    text = _run(MipsEmitter().emit_expr, node)
    assert text.count("li $a0") == 1
    assert text.rstrip().endswith("#UNARY MINUS IMPLEMENTATION")


def test_mod_operator_is_rejected():
    with pytest.raises(CodeGenError):
        _run(MipsEmitter().emit_expr, _expr(Operator.MOD, _num(4), _num(2)))


def test_global_var_loads_by_name():
    text = _run(MipsEmitter().emit_expr, _var(_sym("x", 0, 0)))
    assert "la $a0, x" in text
    assert text.endswith("\tlw $a0, ($a0)\t#Expression is a var\n")


def test_local_var_uses_stack_pointer():
    text = _run(MipsEmitter().emit_expr, _var(_sym("y", 1, 0)))
    assert "move $a0 $sp" in text
    assert "la $a0" not in text


def test_array_element_with_constant_index():
    array = _sym("A", 0, 0, size=100, subtype=SymbolSubtype.ARRAY)
    text = _run(MipsEmitter().emit_expr, _var(array, _num(3)))
    assert "sll $a1 $a1 2" in text
    assert "add $a0, $a0, $a1" in text


def test_var_without_symbol_raises():
    with pytest.raises(CodeGenError):
        _run(MipsEmitter().emit_expr, ASTNode(NodeType.VAR, name="z"))


def test_globals_only_level_zero():
    array = ASTNode(NodeType.VARDEC, name="A",
                    symbol=_sym("A", 0, 0, size=100, subtype=SymbolSubtype.ARRAY))
    array.next = ASTNode(NodeType.VARDEC, name="y", symbol=_sym("y", 1, 2))
    text = _run(MipsEmitter().emit_globals, array)
    assert text == "\nA: .space 400"


def test_strings_get_labels_in_order():
    first = ASTNode(NodeType.WRITE, name='"a"')
    first.next = ASTNode(NodeType.WRITE, name='"b"')
    text = _run(MipsEmitter().emit_strings, first)
    assert first.label == "_L0"
    assert first.next.label == "_L1"
    assert text.index('_L0: .asciiz "a"') < text.index('_L1: .asciiz "b"')


def test_read_statement():
    read = ASTNode(NodeType.READ, s1=_var(_sym("x", 0, 0)))
    text = _run(MipsEmitter().emit_ast, read)
    assert "li $v0, 5" in text
    assert "sw $v0, ($a0)" in text


def test_call_moves_args_into_temp_registers():
    args = ASTNode(NodeType.ARG, s1=_num(1), symbol=_sym("_t1", 1, 1))
    args.next = ASTNode(NodeType.ARG, s1=_num(2), symbol=_sym("_t2", 1, 2))
    call = ASTNode(NodeType.CALL, name="f", s1=args)
    text = _run(MipsEmitter().emit_call, call)
    assert "move $t0, $a0" in text
    assert "move $t1, $a0" in text
    assert "jal f" in text
    assert text.index("move $t1") < text.index("jal f")


def test_while_labels_and_jumps():
    cond = _expr(Operator.LT, _var(_sym("x", 0, 0)), _num(2))
    body = ASTNode(NodeType.WHILE_BODY,
                   s1=ASTNode(NodeType.WRITE, name='"hi"', label="_L9"))
    loop = ASTNode(NodeType.ITERATE, s1=cond, s2=body)
    text = _run(MipsEmitter().emit_ast, loop)
    assert text.startswith("_L0:\t")
    assert "beq $a0, $0 _L1" in text
    assert text.index("j _L0") < text.index("_L1:\t")


def test_if_else_labels():
    body = ASTNode(NodeType.IF_BODY,
                   s1=ASTNode(NodeType.RETURN),
                   s2=ASTNode(NodeType.RETURN, s1=_num(4)))
    node = ASTNode(NodeType.IF, s1=_num(1), s2=body)
    text = _run(MipsEmitter().emit_ast, node)
    assert "beq $a0, $0 _L0" in text
    assert text.index("j _L1") < text.index("_L0:\t") < text.index("_L1:\t")
    assert "li $a0, 0 " in text


def test_unknown_statement_kind_raises():
    with pytest.raises(CodeGenError):
        _run(MipsEmitter().emit_ast, ASTNode(NodeType.PARAM, name="p"))


def test_generate_program_layout():
    text = generate_program(_sample_program())
    assert text.startswith("#MIPS CODE GENERATED HEADER CS370\n\n.data\n\n")
    assert text.index(".data") < text.index(".align 2") < text.index(".text")
    assert "A: .space 400" in text
    assert '_L0: .asciiz "hello"' in text
    assert "main:\t\t#function declaration\n" in text
    assert "jr $ra" not in text
    assert text.rstrip().endswith("#EXIT PROGRAM")


def test_generate_program_keeps_function_name():
    root = _sample_program()
    generate_program(root)
    assert root.next.name == "main"


def test_non_main_function_returns_with_jump():
    func = _function("helper", ASTNode(NodeType.COMPOUND))
    text = generate_program(func)
    assert "jr $ra" in text
    assert text.index("jr $ra") < text.index("li $v0, 10")


def test_function_stores_parameters():
    params = ASTNode(NodeType.PARAM, name="a", symbol=_sym("a", 1, 2))
    params.next = ASTNode(NodeType.PARAM, name="b", symbol=_sym("b", 1, 3))
    func = _function("f", ASTNode(NodeType.COMPOUND), params=params)
    text = generate_program(func)
    assert text.count("#parameter store start of function") == 2
    assert "sw $t0 " in text and "sw $t1 " in text


def test_generate_program_empty_tree():
    assert generate_program(None) == ""