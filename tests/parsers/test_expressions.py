"""
Tests for expression parsers: args, variables, methods, arrays, conditions.
"""

import pytest

from templater.errors import NestingTooDeepError, ParseError
from templater.nodes import (
    ArgCondition,
    ArgNode,
    BinaryCondition,
    BracketsCondition,
    CompareCondition,
    ConditionType,
    InCondition,
    LiteralNode,
    VariableNode,
)


class TestArgParser:

    def test_literal(self, grammar):
        arg = grammar('"text"').arg.parse()
        assert arg == ArgNode(value=LiteralNode("text"))

    def test_variable(self, grammar):
        arg = grammar("name").arg.parse()
        assert arg.value == VariableNode(root="name")
        assert arg.methods == ()

    def test_surrounding_whitespace(self, grammar):
        g = grammar("   name   ")
        arg = g.arg.parse()
        assert arg.value == VariableNode(root="name")
        assert g.reader.remaining == 0

    def test_pipeline(self, grammar):
        arg = grammar('a -> replace(from="x" to="") -> length()').arg.parse()

        assert [m.function for m in arg.methods] == ["replace", "length"]
        replace = arg.methods[0]
        assert [p.key for p in replace.params] == ["from", "to"]
        assert replace.params[0].value.value == LiteralNode("x")
        assert replace.params[1].value.value == LiteralNode("")

    def test_pipeline_without_spaces(self, grammar):
        arg = grammar("a->length()->length()").arg.parse()
        assert len(arg.methods) == 2

    def test_invalid_start(self, grammar):
        with pytest.raises(ParseError, match='Expected text or variable but found "1"'):
            grammar("123").arg.parse()

    def test_end_of_input(self, grammar):
        with pytest.raises(ParseError, match="Unexpected end of input"):
            grammar("   ").arg.parse()

    def test_str_representation(self, grammar):
        arg = grammar('a.b[c] -> match(length=n middle=",")').arg.parse()
        assert str(arg) == 'a.b[c] -> match(length=n middle=",")'


class TestVariableParser:

    def test_fields(self, grammar):
        var = grammar("weapon.damage.from").variable.parse()
        assert var.root == "weapon"
        assert var.parts == ("damage", "from")

    def test_computed_index(self, grammar):
        var = grammar("weapons[id].name").variable.parse()
        assert var.root == "weapons"
        assert isinstance(var.parts[0], ArgNode)
        assert var.parts[0].value == VariableNode(root="id")
        assert var.parts[1] == "name"

    def test_literal_index_with_spaces(self, grammar):
        var = grammar('items[ "0" ]').variable.parse()
        assert var.parts[0].value == LiteralNode("0")

    def test_nested_index(self, grammar):
        var = grammar("a[b[c]]").variable.parse()
        inner = var.parts[0].value
        assert inner.root == "b"
        assert inner.parts[0].value == VariableNode(root="c")

    def test_range_separator_is_not_a_step(self, grammar):
        g = grammar("a..b")
        var = g.variable.parse()
        assert var == VariableNode(root="a")
        assert g.reader.peek(2) == ".."

    def test_empty_field(self, grammar):
        with pytest.raises(ParseError, match="Empty identificator"):
            grammar("a.1").variable.parse()

    def test_unterminated_index(self, grammar):
        with pytest.raises(ParseError, match="Unexpected end of input"):
            grammar("a[b").variable.parse()


class TestMethodParser:

    def test_no_params(self, grammar):
        method = grammar("length()").method.parse()
        assert method.function == "length"
        assert method.params == ()

    def test_param_without_value(self, grammar):
        method = grammar("fmt(upper trim=\"x\")").method.parse()
        assert method.params[0].key == "upper"
        assert method.params[0].value is None
        assert method.params[1].key == "trim"

    def test_param_with_pipeline_value(self, grammar):
        method = grammar('match(length=weapons -> length() middle=";" last=".")').method.parse()
        assert [p.key for p in method.params] == ["length", "middle", "last"]
        assert method.params[0].value.methods[0].function == "length"

    def test_offset_recorded(self, grammar):
        g = grammar("a -> upper()")
        arg = g.arg.parse()
        assert arg.methods[0].offset == 5

    def test_missing_paren(self, grammar):
        with pytest.raises(ParseError, match='Wrong symbol "x", expected "\\("'):
            grammar("length x").method.parse()

    def test_unterminated(self, grammar):
        with pytest.raises(ParseError, match="Unexpected end of input"):
            grammar("length(a=b").method.parse()

    def test_empty_name(self, grammar):
        with pytest.raises(ParseError, match="Empty function name"):
            grammar("()").method.parse()


class TestArrayParser:

    def test_elements(self, grammar):
        items = grammar('[ "a", b ,c -> length() ]').array.parse()
        assert len(items) == 3
        assert items[0].value == LiteralNode("a")
        assert items[1].value == VariableNode(root="b")
        assert items[2].methods[0].function == "length"

    def test_single_element(self, grammar):
        assert len(grammar('["x"]').array.parse()) == 1

    def test_empty_array_is_error(self, grammar):
        with pytest.raises(ParseError):
            grammar("[]").array.parse()

    def test_unterminated(self, grammar):
        with pytest.raises(ParseError, match="Unexpected end of input"):
            grammar('["a", "b"').array.parse()


class TestConditionParser:

    def test_bare_arg(self, grammar):
        cond = grammar("a").parse_condition()
        assert isinstance(cond, ArgCondition)
        assert cond.arg.value == VariableNode(root="a")

    def test_eq(self, grammar):
        cond = grammar('mod eq "bold"').parse_condition()
        assert isinstance(cond, CompareCondition)
        assert cond.operator == ConditionType.EQ
        assert not cond.negate
        assert cond.right.value == LiteralNode("bold")

    def test_not_eq(self, grammar):
        cond = grammar('a not eq "2"').parse_condition()
        assert cond.operator == ConditionType.EQ
        assert cond.negate

    def test_like(self, grammar):
        cond = grammar('x like "a%c"').parse_condition()
        assert cond.get_type() == ConditionType.LIKE

    def test_in(self, grammar):
        cond = grammar('x not in ["a", "b"]').parse_condition()
        assert isinstance(cond, InCondition)
        assert cond.negate
        assert [i.value.text for i in cond.items] == ["a", "b"]

    def test_pipeline_before_operator(self, grammar):
        cond = grammar('items -> length() not eq "0"').parse_condition()
        assert cond.left.methods[0].function == "length"
        assert cond.negate

    def test_brackets(self, grammar):
        cond = grammar('(a eq "1") or (b not eq "1")').parse_condition()
        assert isinstance(cond, BinaryCondition)
        assert cond.operator == ConditionType.OR
        assert isinstance(cond.left, BracketsCondition)
        assert isinstance(cond.right, BracketsCondition)

    def test_and_or_right_associative(self, grammar):
        """a and b or c is parsed as a and (b or c)"""
        cond = grammar("a and b or c").parse_condition()

        assert cond.operator == ConditionType.AND
        assert cond.left.arg.value.root == "a"
        assert cond.right.operator == ConditionType.OR
        assert cond.right.left.arg.value.root == "b"
        assert cond.right.right.arg.value.root == "c"

    def test_or_and_right_associative(self, grammar):
        """a or b and c is parsed as a or (b and c)"""
        cond = grammar("a or b and c").parse_condition()
        assert cond.operator == ConditionType.OR
        assert cond.right.operator == ConditionType.AND

    def test_same_operator_chain(self, grammar):
        cond = grammar("a or b or c").parse_condition()
        assert str(cond) == "a or b or c"
        assert isinstance(cond.right, BinaryCondition)

    def test_invalid_condition(self, grammar):
        with pytest.raises(ParseError, match="Invalid condition"):
            grammar('a and ]').parse_condition()

    def test_not_without_operator(self, grammar):
        with pytest.raises(ParseError, match="Expected eq, like or in after not"):
            grammar("a not").parse_condition()

    def test_unclosed_bracket(self, grammar):
        with pytest.raises(ParseError, match="Unexpected end of input"):
            grammar("(a").parse_condition()

    def test_trailing_content(self, grammar):
        with pytest.raises(ParseError, match="after condition"):
            grammar('a eq "1" "2"').parse_condition()

    def test_nesting_limit(self, grammar):
        text = "(" * 20 + "a" + ")" * 20
        with pytest.raises(NestingTooDeepError, match="too deeply nested"):
            grammar(text, max_depth=10).parse_condition()

    def test_nesting_within_limit(self, grammar):
        text = "(" * 5 + "a" + ")" * 5
        cond = grammar(text, max_depth=10).parse_condition()
        assert isinstance(cond, BracketsCondition)
