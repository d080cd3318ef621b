import pytest

from esolang.interpreter import Interpreter, parse_program, run_file
from esolang.types import NULL, Array, Boolean, Error, Float, Integer, String


def run(source, **kwargs):
    interpreter = Interpreter(**kwargs)
    return interpreter.run(parse_program(source))


def assert_error(result, message):
    assert isinstance(result, Error), result
    assert result.message == message


@pytest.mark.parametrize('source, expected', [
    ('1 + 2 * 3', 7),
    ('(1 + 2) * 3', 9),
    ('5 + 2 * 10', 25),
    ('(5 + 10 * 2 + 15 / 3) * 2 + -10', 50),
    ('7 / 2', 3),
    ('-7 / 2', -3),
    ('-7 % 2', -1),
    ('7 % -2', 1),
    ('9223372036854775807 + 1', -9223372036854775808),
])
def test_integer_arithmetic(source, expected):
    assert run(source) == Integer(expected)


def test_float_arithmetic():
    assert run('1 + 2.5') == Float(3.5)
    assert run('7.5 % 2') == Float(1.5)
    assert run('-0.5') == Float(-0.5)
    assert run('1.5 < 2') is run('true')


def test_division_by_zero():
    assert_error(run('10 / 0'), "<input>:1:4: Can't divide by zero")
    assert_error(run('1.0 % 0'), "<input>:1:5: Can't divide by zero")


def test_string_operators():
    assert run('"Hello" + ", " + "world"') == String('Hello, world')
    assert run('"ab" * 3') == String('ababab')
    assert run('"a" == "a"').value is True
    assert run('"a" != "a"').value is False


def test_type_errors():
    assert_error(run('1 + true'), '<input>:1:3: type mismatch: INTEGER + BOOLEAN')
    assert_error(run('-true'), '<input>:1:1: unknown operator: -BOOLEAN')
    assert_error(run('"a" - "b"'), '<input>:1:5: unknown operator: STRING - STRING')
    assert_error(run('true + false'), '<input>:1:6: unknown operator: BOOLEAN + BOOLEAN')


def test_equality_between_kinds():
    assert run('1 == "1"').value is False
    assert run('true == true').value is True
    assert run('[1] == [1]').value is False
    assert run('let a = [1]; a == a').value is True


def test_logical_operators_short_circuit():
    assert run('false && missing') is run('false')
    assert run('true || missing') is run('true')
    assert run('(1 < 2) && (2 < 3)').value is True
    assert run('1 and 0').value is False
    assert_error(run('true && missing'), "<input>:1:9: cannot find 'missing' in scope")


@pytest.mark.parametrize('source, expected', [
    ('if (0) { 1 } else { 2 }', 2),
    ('if ("") { 1 } else { 2 }', 2),
    ('if ([]) { 1 } else { 2 }', 2),
    ('if ({}) { 1 } else { 2 }', 2),
    ('if ("x") { 1 } else { 2 }', 1),
    ('if (0.5) { 1 } else { 2 }', 1),
])
def test_truthiness(source, expected):
    assert run(source) == Integer(expected)


def test_if_without_else_is_null():
    assert run('if (false) { 1 }') is NULL


def test_elif_chain():
    source = 'func grade(n) { if (n > 8) { "a" } elif (n > 5) { "b" } else { "c" } }; [grade(9), grade(6), grade(1)]'
    assert run(source).inspect() == '["a", "b", "c"]'


def test_return_unwinds_nested_blocks():
    assert run('if (10 > 1) { if (10 > 1) { return 10; } return 1; }') == Integer(10)
    assert run('let f = fn() { when (true) { return 3 } }; f()') == Integer(3)


def test_let_and_identifiers():
    assert run('let a = 5; let b = a * 2; b') == Integer(10)
    assert_error(run('foobar'), "<input>:1:1: cannot find 'foobar' in scope")


def test_closures():
    source = 'let adder = fn(x) { fn(y) { x + y } }; let add2 = adder(2); add2(3)'
    assert run(source) == Integer(5)


def test_recursive_function():
    source = 'func fib(n) { if (n < 2) { return n } fib(n - 1) + fib(n - 2) }; fib(15)'
    assert run(source) == Integer(610)


def test_function_define_returns_null_and_binds():
    interpreter = Interpreter()
    assert interpreter.run(parse_program('func one() { 1 }')) is NULL
    assert interpreter.run(parse_program('one()')) == Integer(1)


def test_wrong_number_of_arguments():
    assert_error(run('let f = fn(a, b) { a }; f(1)'),
                 '<input>:1:26: wrong number of arguments: want=2, got=1')
    assert_error(run('let f = fn() { 1 }; f(1, 2)'),
                 '<input>:1:22: wrong number of arguments: want=0, got=2')


def test_default_parameters_see_earlier_arguments():
    assert run('func f(a, b = a * 2) { a + b }; f(3)') == Integer(9)
    assert run('func f(a, b = a * 2) { a + b }; f(3, 1)') == Integer(4)


def test_not_a_function():
    assert_error(run('let x = 5; x()'), '<input>:1:13: not a function: INTEGER')


def test_recursion_depth_is_bounded():
    result = run('func down(n) { down(n + 1) }; down(0)', max_call_depth=50)
    assert isinstance(result, Error)
    assert result.message.endswith('maximum recursion depth exceeded (50)')


def test_assignment_updates_enclosing_binding():
    assert run('let x = 1; let f = fn() { x = 2 }; f(); x') == Integer(2)
    assert run('z = 3; z') == Integer(3)
    assert run('let x = 1; x = 7') == Integer(7)


def test_compound_assignment():
    assert run('let x = 5; x += 3; x *= 2; x -= 1; x') == Integer(15)
    assert run('let s = "a"; s += "b"; s') == String('ab')
    assert_error(run('y += 1'), '<input>:1:3: y is unknown')


def test_postfix_operators():
    assert run('let i = 5; i++') == Integer(5)
    assert run('let i = 5; i++; i') == Integer(6)
    assert run('let i = 5; i--; i--; i') == Integer(3)
    assert_error(run('let s = "a"; s++'), '<input>:1:14: s is not an int')
    assert_error(run('n++'), "<input>:1:1: cannot find 'n' in scope")


def test_while_loop():
    source = 'let i = 0; let total = 0; when (i < 5) { total += i; i += 1 }; total'
    assert run(source) == Integer(10)


def test_index_expressions():
    assert run('[1, 2, 3][0]') == Integer(1)
    assert run('[1, 2, 3][3]') is NULL
    assert run('[1][-1]') is NULL
    assert run('"abc"[1]') == String('b')
    assert run('{"a": 1}["a"]') == Integer(1)
    assert run('{"a": 1}["b"]') is NULL
    assert run('{true: 1, 2: 3}[2]') == Integer(3)
    assert run('let h = {"name": "eso"}; h::name') == String('eso')
    assert_error(run('1[0]'), '<input>:1:2: index operator not supported: INTEGER')


def test_unusable_hash_keys():
    assert_error(run('{[1]: 2}'), '<input>:1:2: unusable as hash key: ARRAY')
    assert_error(run('{"a": 1}[fn() { 1 }]'), '<input>:1:9: unusable as hash key: FUNCTION')


def test_array_concatenation():
    assert run('[1] + [2, 3]') == Array([Integer(1), Integer(2), Integer(3)])


def test_method_calls():
    assert run('"abc".reverse()') == String('cba')
    assert run('[3, 1, 2].sort()').inspect() == '[1, 2, 3]'
    assert run('5.to_string()') == String('5')
    assert run('{"a": 1}.keys()').inspect() == '["a"]'


def test_method_errors():
    assert_error(run('5.shout()'), '<input>:1:2: value of type `INTEGER` has no member `shout`')
    assert_error(run('"abc".equals(1)'),
                 'TypeError: String.equals() expected argument #1 to be `STRING` got `INTEGER`')
    assert_error(run('[].pop(1)'), 'TypeError: Array.pop() takes exactly 0 arguments (1 given)')


def test_let_shares_and_bind_copies():
    assert run('let a = [1]; let b = a; a.append(2); b').inspect() == '[1, 2]'
    assert run('let a = [1]; b := a; a.append(2); b').inspect() == '[1]'
    assert run('let h = {"k": [1]}; c := h; h::k.append(2); c').inspect() == '{"k": [1]}'
    assert run('b := 1') is NULL


def test_error_short_circuits_remaining_statements(capsys):
    result = run('let a = 1 + true; println("unreachable"); a;')
    assert_error(result, '<input>:1:11: type mismatch: INTEGER + BOOLEAN')
    assert capsys.readouterr().out == ''


@pytest.mark.parametrize('source', [
    'let f = fn(n) { if (n < 1) { return 0 } n + f(n - 1) }; f(4)',
    'let h = {"a": [1, 2], "b\\n": -3}; h["a"][1] * h::a.count() + h["b\\n"]',
    'let s = "x"; when (count(s) < 4) { s += "y" }; s',
])
def test_rendered_source_evaluates_the_same(source):
    program = parse_program(source)
    assert run(str(program)) == run(source)


def test_builtin_errors_stop_the_program(capsys):
    result = run('println("a"); count(1); println("b")')
    assert_error(result, 'argument to `count` not supported, got INTEGER')
    assert capsys.readouterr().out == 'a\n'


def test_builtin_arity():
    assert_error(run('type_of()'), 'wrong number of arguments. got=0, want=1')


def test_builtins_can_be_shadowed():
    assert run('let count = fn(x) { 42 }; count([1])') == Integer(42)


def test_errors_inside_functions_propagate():
    source = 'let f = fn() { let x = 1 / 0; 99 }; let y = f(); y'
    assert_error(run(source), "<input>:1:26: Can't divide by zero")


def test_types():
    assert run('type_of(1.5)') == String('FLOAT')
    assert run('type_of(Set())') == String('SET')
    assert run('type_of(fn() {})') == String('FUNCTION')
    assert isinstance(run('true'), Boolean)


def test_default_call_depth_is_reachable():
    source = 'func down(n) { if (n == 0) { return 0; } return down(n - 1); }; down(%d);'
    assert run(source % 400) == Integer(0)
    result = run(source % 600)
    assert isinstance(result, Error)
    assert result.message.endswith('maximum recursion depth exceeded (512)')


def test_run_file(tmp_path):
    path = tmp_path / 'sum.eso'
    path.write_text('let total = 0;\nlet i = 1;\nwhen (i <= 4) { total += i; i++; }\ntotal', encoding='utf-8')
    assert run_file(str(path)) == Integer(10)
    interpreter = Interpreter()
    run_file(str(path), interpreter)
    assert interpreter.global_env.get('i') == Integer(5)
