"""
Tests for the default transform functions.
"""

import pytest

from templater import DEFAULT_METHODS, Templater, render
from templater.methods import case, length, match, replace


class TestLength:

    @pytest.mark.parametrize("value,expected", [
        ("text", "4"),
        ("", "0"),
        ({"a": "1", "b": "2"}, "2"),
        (["x", "y", "z"], "3"),
        (12345, "5"),
    ])
    def test_length(self, value, expected):
        assert length(value, {}) == expected

    def test_in_template(self):
        assert render("{{:a -> length()}}", {"a": "text"}) == "4"


class TestReplace:

    def test_first_occurrence_only(self):
        assert replace("aXbX", {"from": "X", "to": "Y"}) == "aYbX"

    def test_remove(self):
        assert replace("text", {"from": "x", "to": ""}) == "tet"

    def test_missing_params(self):
        assert replace("text", {}) == "text"

    def test_chain(self):
        assert render('{{:a -> replace(from="x" to="") -> length()}}', {"a": "text"}) == "3"

    def test_on_literal(self):
        assert render('{{:"text" -> replace(from="x" to="s")}}') == "test"


class TestMatch:

    @pytest.mark.parametrize("position,expected", [
        ("0", "F"),
        ("1", "M"),
        ("2", "L"),
    ])
    def test_all_given(self, position, expected):
        params = {"length": "3", "first": "F", "middle": "M", "last": "L"}
        assert match(position, params) == expected

    def test_without_last(self):
        params = {"length": "3", "first": "F", "middle": "M"}
        assert match("0", params) == "F"
        assert match("2", params) == "M"

    def test_without_last_single_element(self):
        assert match("0", {"length": "1", "first": "F", "middle": "M"}) == "M"

    def test_without_last_and_first(self):
        assert match("0", {"length": "3", "middle": "M"}) == ""

    def test_without_first(self):
        params = {"length": "3", "middle": "M", "last": "L"}
        assert match("2", params) == "L"
        assert match("0", params) == "M"

    def test_without_first_single_element(self):
        assert match("0", {"length": "1", "middle": "M", "last": "L"}) == "M"

    def test_empty_length(self):
        params = {"length": "", "first": "F", "middle": "M", "last": "L"}
        assert match("-1", params) == "L"

    def test_non_numeric_length(self):
        params = {"length": "many", "first": "F", "middle": "M", "last": "L"}
        assert match("1", params) == "M"

    def test_separators_in_loop(self):
        template = (
            '{{for i of ["0", "1", "2"]}}{{:i}}'
            '{{:i -> match(length="3" middle=", " last=".")}}{{/for}}'
        )
        assert render(template, options={"squash": "off"}) == "0, 1, 2."


class TestCase:

    def test_then(self):
        assert case("bold", {"on": "bold", "then": "**"}) == "**"

    def test_else(self):
        assert case("plain", {"on": "bold", "then": "**", "else": ""}) == ""

    def test_passthrough(self):
        assert case("plain", {"on": "bold", "then": "**"}) == "plain"

    def test_in_template(self):
        template = '{{:mod -> case(on="bold" then="**")}}text'
        assert render(template, {"mod": "bold"}) == "**text"


class TestRegistry:

    def test_defaults(self):
        assert set(DEFAULT_METHODS) == {"length", "replace", "match", "case"}

    def test_caller_methods_take_precedence(self):
        templater = Templater(methods={"length": lambda value, params: "many"})
        assert templater.render("{{:a -> length()}}", {"a": "abc"}) == "many"

    def test_custom_method_receives_params(self):
        received = {}

        def capture(value, params):
            received.update(params)
            return value

        render('{{:a -> capture(flag key="v" other=b)}}', {"a": "x", "b": "y"}, {"capture": capture})
        assert received == {"flag": "", "key": "v", "other": "y"}

    def test_duplicate_param_last_wins(self):
        result = render('{{:a -> replace(from="a" from="b" to="_")}}', {"a": "ab"})
        assert result == "a_"

    def test_method_may_return_structure(self):
        methods = {"split": lambda value, params: value.split(params["by"])}
        assert render('{{:a -> split(by="-") -> length()}}', {"a": "x-y-z"}, methods) == "3"
