import pytest

from tallyc.errors import ParseError
from tallyc.lexer import Token, tokenize
from tallyc.parser import Parser, Num, BinOp, Return, VarDecl, Op, dump, parse


def parse_source(source):
    return parse(tokenize(source))


def test_precedence():
    assert parse_source("return 1 + 2 * 3;") == [
        Return(BinOp(Num(1), Op.ADD, BinOp(Num(2), Op.MUL, Num(3))))
    ]


def test_precedence_mul_first():
    assert parse_source("return 1 * 2 + 3;") == [
        Return(BinOp(BinOp(Num(1), Op.MUL, Num(2)), Op.ADD, Num(3)))
    ]


def test_left_associative_sub():
    assert parse_source("return 1 - 2 - 3;") == [
        Return(BinOp(BinOp(Num(1), Op.SUB, Num(2)), Op.SUB, Num(3)))
    ]


def test_left_associative_div():
    assert parse_source("return 8 / 4 / 2;") == [
        Return(BinOp(BinOp(Num(8), Op.DIV, Num(4)), Op.DIV, Num(2)))
    ]


def test_parentheses():
    assert parse_source("return (1 + 2) * 3;") == [
        Return(BinOp(BinOp(Num(1), Op.ADD, Num(2)), Op.MUL, Num(3)))
    ]


def test_parentheses_make_no_node():
    assert parse_source("return ((7));") == [Return(Num(7))]


def test_mixed():
    assert parse_source("return 1 + 2 * 3 - 4 / 2;") == [
        Return(BinOp(
            BinOp(Num(1), Op.ADD, BinOp(Num(2), Op.MUL, Num(3))),
            Op.SUB,
            BinOp(Num(4), Op.DIV, Num(2)),
        ))
    ]


def test_var_decl():
    assert parse_source("var answer = 6 * 7;") == [
        VarDecl("answer", BinOp(Num(6), Op.MUL, Num(7)))
    ]


def test_statements_keep_source_order():
    program = parse_source("var a = 1; var b = 2; return 3; var c = 4;")
    assert program == [
        VarDecl("a", Num(1)),
        VarDecl("b", Num(2)),
        Return(Num(3)),
        VarDecl("c", Num(4)),
    ]


def test_empty_program():
    assert parse_source("") == []


def test_missing_expression():
    with pytest.raises(ParseError, match="unexpected token in primary") as exc:
        parse_source("return ;")
    assert exc.value.token.kind == "SEMI"


def test_missing_assign():
    with pytest.raises(ParseError, match="'='") as exc:
        parse_source("var x 5;")
    assert exc.value.expected == "ASSIGN"
    assert exc.value.token == Token("NUMBER", 5)


def test_missing_identifier():
    with pytest.raises(ParseError) as exc:
        parse_source("var = 5;")
    assert exc.value.expected == "ID"
    assert exc.value.token.kind == "ASSIGN"


def test_missing_semicolon_at_end_of_input():
    with pytest.raises(ParseError, match="end of input") as exc:
        parse_source("return 1")
    assert exc.value.expected == "SEMI"
    assert exc.value.token.kind == "EOF"


def test_missing_rparen():
    with pytest.raises(ParseError) as exc:
        parse_source("return (1 + 2;")
    assert exc.value.expected == "RPAREN"
    assert exc.value.token.kind == "SEMI"


def test_unexpected_statement_start():
    with pytest.raises(ParseError, match="unexpected token") as exc:
        parse_source("x = 5;")
    assert exc.value.token == Token("ID", "x")
    assert exc.value.expected is None


def test_identifiers_are_not_expressions():
    with pytest.raises(ParseError, match="unexpected token in primary"):
        parse_source("var a = 1; return a;")


def test_dangling_operator():
    with pytest.raises(ParseError, match="unexpected token in primary"):
        parse_source("return 1 + ;")


def test_error_position():
    with pytest.raises(ParseError) as exc:
        parse_source("var a = 1;\nvar b 2;")
    assert (exc.value.line, exc.value.col) == (2, 7)


def test_current_token_past_end_is_eof():
    parser = Parser([Token("NUMBER", 1)])
    parser.consume()
    parser.consume()
    assert parser.pos == 1
    assert parser.current_token().kind == "EOF"


def test_token_list_without_eof():
    tokens = [Token("RETURN"), Token("NUMBER", 1), Token("SEMI")]
    assert Parser(tokens).parse() == [Return(Num(1))]


def test_long_operator_chain():
    program = parse_source("return " + " + ".join(["1"] * 3000) + ";")
    node = program[0].value
    depth = 0
    while isinstance(node, BinOp):
        assert node.right == Num(1)
        node = node.left
        depth += 1
    assert depth == 2999


def test_nesting_limit():
    with pytest.raises(ParseError, match="nested too deeply") as exc:
        parse_source("return " + "(" * 600 + "1" + ")" * 600 + ";")
    assert exc.value.token.kind == "LPAREN"


def test_nesting_below_limit():
    assert parse_source("return " + "(" * 150 + "1" + ")" * 150 + ";") == [Return(Num(1))]


def test_nesting_depth_resets_between_groups():
    source = "return " + " + ".join(["(" * 150 + "1" + ")" * 150] * 4) + ";"
    assert len(parse_source(source)) == 1


def test_operator_position():
    node = parse_source("return 1 +\n  2 * 3;")[0].value
    assert (node.line, node.col) == (1, 10)
    assert (node.right.line, node.right.col) == (2, 5)


def test_dump_matches_repr():
    program = parse_source("var a = (1 - 2) * 3; return 4 / 2;")
    assert [dump(stmt) for stmt in program] == [repr(stmt) for stmt in program]


def test_dump_deep_tree():
    text = dump(parse_source("return " + " - ".join(["7"] * 3000) + ";")[0])
    assert text.startswith("Return(value=BinOp(left=BinOp(left=")
    assert text.count("Num(value=7)") == 3000
