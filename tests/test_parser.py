import pytest

from esolang import ast
from esolang.errors import ParseError
from esolang.lexer import Lexer
from esolang.parser import Parser, parse_program


def parse(source):
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    assert parser.errors == []
    return program


def parse_errors(source):
    parser = Parser(Lexer(source, 'test.eso'))
    parser.parse_program()
    return parser.errors


def single_expression(source):
    program = parse(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ast.ExpressionStatement)
    return stmt.expression


@pytest.mark.parametrize('source, expected', [
    ('-a * b', '((-a) * b)'),
    ('!-a', '(!(-a))'),
    ('a + b * c', '(a + (b * c))'),
    ('a + b - c', '((a + b) - c)'),
    ('a * b % c', '((a * b) % c)'),
    ('a + b % c', '(a + (b % c))'),
    ('(a + b) * c', '((a + b) * c)'),
    ('a < b == c > d', '((a < b) == (c > d))'),
    ('a && b == c', '((a && b) == c)'),
    ('a or b', '(a || b)'),
    ('a is b', '(a == b)'),
    ('a is_not b', '(a != b)'),
    ('add(a, b * c)[1]', '(add(a, (b * c))[1])'),
    ('a::name + 1', '((a["name"]) + 1)'),
    ('items.count() + 1', '(items.count() + 1)'),
])
def test_operator_precedence(source, expected):
    assert str(parse(source)) == expected


def test_let_and_return_statements():
    program = parse('let x = 5; return x; return;')
    let, ret, bare = program.statements
    assert isinstance(let, ast.LetStatement)
    assert let.name.value == 'x'
    assert isinstance(let.value, ast.IntegerLiteral) and let.value.value == 5
    assert isinstance(ret, ast.ReturnStatement) and str(ret.value) == 'x'
    assert isinstance(bare, ast.ReturnStatement) and bare.value is None


def test_literals():
    program = parse('1.5; "hi"; true; [1, 2]; {"a": 1, 2: false}')
    exprs = [s.expression for s in program.statements]
    assert isinstance(exprs[0], ast.FloatLiteral) and exprs[0].value == 1.5
    assert isinstance(exprs[1], ast.StringLiteral) and exprs[1].value == 'hi'
    assert isinstance(exprs[2], ast.BooleanLiteral) and exprs[2].value is True
    assert isinstance(exprs[3], ast.ArrayLiteral) and len(exprs[3].elements) == 2
    assert isinstance(exprs[4], ast.HashLiteral)
    assert [(str(k), str(v)) for k, v in exprs[4].pairs] == [('"a"', '1'), ('2', 'false')]


def test_if_elif_else():
    expr = single_expression('if (x < 1) { a } elif (x < 2) { b } else { c }')
    assert isinstance(expr, ast.IfExpression)
    nested = expr.alternative.statements[0].expression
    assert isinstance(nested, ast.IfExpression)
    assert str(nested.condition) == '(x < 2)'
    assert str(nested.alternative) == '{ c }'


def test_when_loop():
    expr = single_expression('when (i < 3) { i += 1 }')
    assert isinstance(expr, ast.WhileExpression)
    assert str(expr) == 'when ((i < 3)) { i += 1 }'


def test_function_literal_and_call():
    expr = single_expression('fn(x, y) { x + y }(1, 2)')
    assert isinstance(expr, ast.CallExpression)
    assert isinstance(expr.function, ast.FunctionLiteral)
    assert [p.value for p in expr.function.parameters] == ['x', 'y']
    assert len(expr.arguments) == 2


def test_function_define_with_defaults():
    expr = single_expression('func greet(name, greeting = "hi") { greeting + name }')
    assert isinstance(expr, ast.FunctionDefine)
    assert expr.name.value == 'greet'
    assert [p.value for p in expr.parameters] == ['name', 'greeting']
    assert str(expr.defaults['greeting']) == '"hi"'


def test_assign_and_bind():
    program = parse('x = 1; x += 2; y := [1]')
    assign, compound, bind = [s.expression for s in program.statements]
    assert isinstance(assign, ast.AssignStatement) and assign.operator == '='
    assert isinstance(compound, ast.AssignStatement) and compound.operator == '+='
    assert isinstance(bind, ast.BindExpression) and bind.left.value == 'y'


def test_postfix_binds_to_previous_identifier():
    program = parse('i++;')
    first, second = program.statements
    assert isinstance(first.expression, ast.Identifier)
    postfix = second.expression
    assert isinstance(postfix, ast.PostfixExpression)
    assert postfix.token.literal == 'i'
    assert postfix.operator == '++'


def test_method_call_and_import():
    expr = single_expression('import("eso/math").Max(1, 2)')
    assert isinstance(expr, ast.ObjectCallExpression)
    assert isinstance(expr.object, ast.ImportExpression)
    assert expr.call.function.value == 'Max'


def test_string_rendering_reparses():
    source = 'let s = "a\\"b\\n"; let f = fn(a) { if (a) { return a * 2 } else { return -a } }; f(s)'
    program = parse(source)
    again = parse(str(program))
    assert str(again) == str(program)


def test_errors_are_positioned_and_collected():
    errors = parse_errors('let = 5;\nlet y 7;')
    assert errors[0] == 'test.eso:1:5: expected next token to be IDENT, got = instead'
    assert 'test.eso:2:7: expected next token to be =, got INT instead' in errors


def test_no_prefix_parse_function():
    errors = parse_errors('}')
    assert errors == ['test.eso:1:1: no prefix parse function for } found']


def test_illegal_token_reported():
    assert parse_errors('let s = "oops') == ['test.eso:1:9: unterminated string literal']
    assert parse_errors('1 @ 2')[0] == "test.eso:1:3: illegal character '@'"


def test_bind_requires_identifier():
    errors = parse_errors('1 := 2')
    assert errors[0].startswith('test.eso:1:3: expected identifier on left side of :=')


def test_assign_requires_identifier():
    errors = parse_errors('[1] = 2')
    assert errors[0].startswith('test.eso:1:5: cannot assign to [1]')


def test_unterminated_block():
    errors = parse_errors('if (x) { 1')
    assert errors == ['test.eso:1:11: unterminated block, expected }']


def test_method_call_requires_parentheses():
    errors = parse_errors('x.length')
    assert errors == ['test.eso:1:9: expected next token to be (, got EOF instead']


def test_integer_overflow():
    errors = parse_errors('9223372036854775808')
    assert errors == ['test.eso:1:1: could not parse 9223372036854775808 as integer']


def test_parse_program_raises():
    with pytest.raises(ParseError) as excinfo:
        parse_program('let 1', 'bad.eso')
    assert excinfo.value.errors[0].startswith('bad.eso:1:5:')


def test_deep_nesting_is_a_syntax_error():
    source = '(' * 5000 + '1' + ')' * 5000
    assert parse_errors(source) == ['test.eso:1:101: expression nested too deeply']
    with pytest.raises(ParseError):
        parse_program(source)


def test_nesting_limit_is_configurable():
    parser = Parser(Lexer('((1))', 'test.eso'), max_depth=2)
    parser.parse_program()
    assert parser.errors == ['test.eso:1:3: expression nested too deeply']
    assert parse_errors('((1))') == []


def test_nested_blocks_within_limit():
    source = 'if (true) { ' * 40 + '1' + ' }' * 40
    program = parse(source)
    assert len(program.statements) == 1
