"""
Unit tests for the TemplateEvaluator.
"""
import pytest

from kitsune_jinja2.evaluator.evaluator import TemplateEvaluator
from kitsune_jinja2.system.errors import PathNotFoundError, TemplateEvaluationError, TypeMismatchError
from kitsune_jinja2.template.ast_nodes import (
    ForLoopNode,
    IfNode,
    ReplaceNode,
    TemplateNode,
    TextNode,
    link_nodes,
)


def test_empty_chain_renders_nothing(evaluator):
    assert evaluator.render({}, None) == ""


def test_text_only_ignores_context(evaluator):
    root = link_nodes([TextNode("a"), TextNode(" b "), TextNode("{{c}}")])
    assert evaluator.render({}, root) == "a b {{c}}"
    assert evaluator.render({"c": "x", "a": [1]}, root) == "a b {{c}}"


def test_replace(evaluator):
    root = link_nodes([TextNode("Hello "), ReplaceNode(["user", "name"])])
    assert evaluator.render({"user": {"name": "Ada"}}, root) == "Hello Ada"


def test_replace_missing_path(evaluator):
    root = link_nodes([TextNode("Hello "), ReplaceNode(["user", "name"])])
    with pytest.raises(PathNotFoundError) as exc_info:
        evaluator.render({"user": {}}, root)
    assert "user.name" in str(exc_info.value)


def test_replace_non_coercible(evaluator):
    with pytest.raises(TypeMismatchError):
        evaluator.render({"flag": True}, ReplaceNode(["flag"]))


class TestIf:
    """Tests for conditional nodes."""

    def _node(self, literal):
        return IfNode(["v"], literal, then_branch=TextNode("T"), else_branch=TextNode("F"))

    def test_equal_to_literal(self, evaluator):
        assert evaluator.render({"v": "editor"}, self._node("editor")) == "T"
        assert evaluator.render({"v": "viewer"}, self._node("editor")) == "F"

    def test_int_value_against_int_literal(self, evaluator):
        assert evaluator.render({"v": 3}, self._node(3)) == "T"
        assert evaluator.render({"v": "3"}, self._node(3)) == "T"

    @pytest.mark.parametrize("token", ["true", "True"])
    def test_truthy_tokens_ignore_literal(self, evaluator, token):
        assert evaluator.render({"v": token}, self._node("something else")) == "T"

    def test_other_spellings_are_not_truthy(self, evaluator):
        assert evaluator.render({"v": "TRUE"}, self._node("x")) == "F"
        assert evaluator.render({"v": "yes"}, self._node("x")) == "F"

    def test_bool_literal_compares_by_text(self, evaluator):
        assert evaluator.render({"v": "false"}, self._node(False)) == "T"

    def test_no_else_renders_nothing(self, evaluator):
        node = link_nodes([IfNode(["v"], "x", then_branch=TextNode("T")), TextNode("!")])
        assert evaluator.render({"v": "y"}, node) == "!"

    def test_missing_condition_path(self, evaluator):
        with pytest.raises(PathNotFoundError):
            evaluator.render({}, self._node("x"))

    def test_bool_condition_value_is_type_mismatch(self, evaluator):
        with pytest.raises(TypeMismatchError):
            evaluator.render({"v": True}, self._node(True))

    def test_continues_with_next(self, evaluator):
        root = link_nodes([self._node("x"), TextNode("|after")])
        assert evaluator.render({"v": "x"}, root) == "T|after"

    def test_then_branch_failure_propagates(self, evaluator):
        root = link_nodes([
            IfNode(["v"], "x", then_branch=ReplaceNode(["missing"])),
            TextNode("after"),
        ])
        with pytest.raises(PathNotFoundError) as exc_info:
            evaluator.render({"v": "x"}, root)
        assert exc_info.value.path == ("missing",)

    def test_else_branch_failure_propagates(self, evaluator):
        root = IfNode(["v"], "x", else_branch=ReplaceNode(["missing", "key"]))
        with pytest.raises(PathNotFoundError):
            evaluator.render({"v": "y"}, root)


class TestForLoop:
    """Tests for loop nodes."""

    def test_renders_in_order_and_binding_persists(self, evaluator):
        context = {"numbers": [1, 2, 3]}
        root = ForLoopNode(["numbers"], "i", body=ReplaceNode(["i"]))

        assert evaluator.render(context, root) == "123"
        assert context["i"] == 3

    def test_binding_overwrites_existing_key(self, evaluator):
        context = {"xs": ["a"], "x": "old"}
        evaluator.render(context, ForLoopNode(["xs"], "x", body=ReplaceNode(["x"])))
        assert context["x"] == "a"

    def test_binding_visible_to_following_siblings(self, evaluator):
        root = link_nodes([
            ForLoopNode(["xs"], "x", body=None),
            ReplaceNode(["x"]),
        ])
        assert evaluator.render({"xs": ["last"]}, root) == "last"

    def test_scoped_binding_does_not_leak(self):
        evaluator = TemplateEvaluator(loop_binding="scoped")
        context = {"numbers": [1, 2, 3]}
        root = ForLoopNode(["numbers"], "i", body=ReplaceNode(["i"]))

        assert evaluator.render(context, root) == "123"
        assert "i" not in context

    def test_scoped_binding_not_visible_after_loop(self):
        evaluator = TemplateEvaluator(loop_binding="scoped")
        root = link_nodes([ForLoopNode(["xs"], "x", body=None), ReplaceNode(["x"])])
        with pytest.raises(PathNotFoundError):
            evaluator.render({"xs": ["a"]}, root)

    def test_body_reads_outer_context(self, evaluator):
        root = ForLoopNode(["users"], "u", body=link_nodes([
            ReplaceNode(["greeting"]), TextNode(" "), ReplaceNode(["u", "name"]), TextNode(";"),
        ]))
        context = {"greeting": "hi", "users": [{"name": "Ada"}, {"name": "Bob"}]}
        assert evaluator.render(context, root) == "hi Ada;hi Bob;"

    def test_nested_loops(self, evaluator):
        root = ForLoopNode(["rows"], "row", body=link_nodes([
            ForLoopNode(["row", "cells"], "c", body=ReplaceNode(["c"])),
            TextNode("/"),
        ]))
        context = {"rows": [{"cells": [1, 2]}, {"cells": ["a"]}]}
        assert evaluator.render(context, root) == "12/a/"

    def test_empty_array(self, evaluator):
        root = link_nodes([ForLoopNode(["xs"], "x", body=TextNode("never")), TextNode("done")])
        assert evaluator.render({"xs": []}, root) == "done"

    def test_missing_source(self, evaluator):
        with pytest.raises(PathNotFoundError):
            evaluator.render({}, ForLoopNode(["xs"], "x"))

    @pytest.mark.parametrize("source", ["abc", 5, {"a": 1}, None, True])
    def test_non_array_source(self, evaluator, source):
        root = link_nodes([TextNode("before"), ForLoopNode(["xs"], "x", body=TextNode("body"))])
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluator.render({"xs": source}, root)
        assert exc_info.value.path == ("xs",)
        assert exc_info.value.partial_output == ""

    def test_failing_iteration_keeps_partial_output_on_error(self, evaluator):
        root = ForLoopNode(["items"], "item", body=ReplaceNode(["item", "name"]))
        context = {"items": [{"name": "a"}, {"name": "b"}, {}]}
        with pytest.raises(PathNotFoundError) as exc_info:
            evaluator.render(context, root)
        assert exc_info.value.partial_output == "ab"
        assert exc_info.value.path == ("item", "name")


def test_long_chain_does_not_recurse():
    root = link_nodes([TextNode("x") for _ in range(20000)])
    assert TemplateEvaluator().render({}, root) == "x" * 20000


def test_unknown_node_type(evaluator):
    class StrayNode(TemplateNode):
        type = "stray"

    with pytest.raises(TemplateEvaluationError, match="Unknown template node type: stray"):
        evaluator.render({}, StrayNode())


def test_invalid_loop_binding_mode():
    with pytest.raises(ValueError):
        TemplateEvaluator(loop_binding="overlay")


def test_evaluator_is_reusable_across_contexts(evaluator):
    root = ForLoopNode(["xs"], "x", body=ReplaceNode(["x"]))
    first, second = {"xs": [1]}, {"xs": [2]}
    assert evaluator.render(first, root) == "1"
    assert evaluator.render(second, root) == "2"
    assert first["x"] == 1 and second["x"] == 2
