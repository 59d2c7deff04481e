# minicmips

minicmips is the back end of a compiler for a small C-like language. The
language has `int` and `void` types, global and local scalars and arrays,
functions with parameters, `read`, `write`, `if`/`else`, `while` and
`return`. The package takes an annotated abstract syntax tree and turns it
into MIPS assembly text for a MIPS simulator. It has three modules.

- `minicmips.syntax_tree`
  - `ASTNode` is the tree node. `s1` and `s2` hold its children and `next`
    links it to the following sibling.
  - `NodeType`, `Operator` and `DataType` are the enumerations the nodes
    use.
  - `format_ast` returns an indented listing of a tree and `print_ast`
    writes that listing to a stream, stdout by default.
  - `data_type_name` returns `"int"` or `"void"`.
  - `indent` returns a string of spaces.
  - `check_params` checks a chain of call argument nodes against a chain of
    formal parameter nodes. It returns `True` when both chains have the
    same length and every pair has the same data type.
- `minicmips.symtable`
  - `SymbolTable` is a scoped table of `Symbol` entries. Each entry has a
    name, offset, size, level, data type and `SymbolSubtype`. Level 0 holds
    the globals.
  - `insert` raises `DuplicateSymbolError` when the name already exists at
    the same level.
  - `search` looks only at the given level. With `recursive=True` it also
    looks at every outer level down to 0.
  - `delete(level)` removes every symbol at that level or deeper and
    returns their total size.
  - `create_temp` returns fresh names `_t0`, `_t1`, and so on.
  - The table can be iterated, newest entry first, and it supports `len()`.
    `str()` and `display()` give a table listing, and `format_symbol`
    formats one row.
- `minicmips.emit`
  - `MipsEmitter` writes a `.data` section holding the string literals and
    the space for global variables. It then writes a `.text` section with
    function prologues and epilogues, expressions, calls, assignments,
    `read`, `write`, `while` and `if`.
  - `generate_program` returns the whole assembly program as a string.
  - `emit_line` writes one line in the form `label<TAB>command<TAB>#comment`.
  - The constants `WSIZE` (4) and `LOG_WSIZE` (2) set the word size.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Usage

This example compiles the following program:

```c
int x;
void main(void) {
  x = 7;
  write x;
}
```

```python
from minicmips.syntax_tree import ASTNode, NodeType, DataType, print_ast
from minicmips.symtable import SymbolTable, SymbolSubtype
from minicmips.emit import generate_program

table = SymbolTable()

# int x;
x_sym = table.insert("x", DataType.INT, SymbolSubtype.SCALAR, 0, 1, 0)
x_dec = ASTNode(NodeType.VARDEC, name="x", data_type=DataType.INT, symbol=x_sym)

# void main(void) { x = 7; write x; }
temp = table.insert(table.create_temp(), DataType.INT, SymbolSubtype.SCALAR, 1, 1, 2)
assign = ASTNode(
    NodeType.ASSIGN,
    s1=ASTNode(NodeType.VAR, name="x", symbol=x_sym),
    s2=ASTNode(NodeType.NUM, value=7),
    symbol=temp,
)
assign.next = ASTNode(NodeType.WRITE, s1=ASTNode(NodeType.VAR, name="x", symbol=x_sym))

body = ASTNode(NodeType.COMPOUND, s2=assign)
main_sym = table.insert("main", DataType.VOID, SymbolSubtype.FUNCTION, 0, 0, 3)
x_dec.next = ASTNode(
    NodeType.FUNCTIONDEC, name="main", data_type=DataType.VOID, s2=body, symbol=main_sym
)

print_ast(x_dec)                 # indented tree listing
print(generate_program(x_dec))   # MIPS assembly text
```

To write into a stream you already have, use `MipsEmitter`:

```python
import io
from minicmips.emit import MipsEmitter

out = io.StringIO()
MipsEmitter().emit(x_dec, out)
```

### How the tree must be annotated

The emitter reads offsets and levels from the `symbol` fields of the nodes.
The following nodes need a `symbol`:

- variable declarations and variable references;
- function declarations. The symbol's `offset`, in words, is the size of
  the activation record.
- parameters;
- expressions and assignments. Their offset names a stack slot for
  intermediate values.
- call arguments.

A `write` node with a string `name` writes that literal. The literal must
include its quotes. If such a node has no `label`, the emitter gives it one
while it writes the data section. Each emitter numbers its labels `_L0`,
`_L1` and so on, and string literals, `while` and `if` all draw from the
same counter.

The generator raises `CodeGenError` when the tree holds a node it cannot
translate, for example a node with no symbol, an unknown operator or a
statement that is missing a part. `format_ast` and `check_params` raise
`ValueError` when a node they need is missing.

## What the package does not do

The package has no lexer or parser and no command-line program. It does not
read source files. It does not build the tree or fill in the symbol table
for you, and it does no type checking beyond `check_params`. You build the
tree and the symbol table yourself, or you get them from a front end of
your own. The package does not assemble or run the MIPS code it produces.