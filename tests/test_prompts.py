"""Tests for the prompt catalog."""

import re

import pytest

from gsd_mcp.errors import InvalidPromptArguments, UnknownPrompt
from gsd_mcp.prompts import get_prompt, list_prompts


def _text(result):
    assert len(result["messages"]) == 1
    message = result["messages"][0]
    assert message["role"] == "user"
    assert message["content"]["type"] == "text"
    return message["content"]["text"]


def _assert_clean(text):
    assert "${" not in text
    assert "None" not in text
    assert "undefined" not in text
    # no labeled line left empty ("Focus area: ")
    assert not re.search(r"^[^\n]*:\s*$", text.replace("This will create:", ""), re.MULTILINE)


class TestListPrompts:
    def test_names(self):
        assert [p["name"] for p in list_prompts()] == [
            "gsd_new_project", "gsd_discuss_phase", "gsd_plan_phase", "gsd_quick",
        ]

    def test_arguments_declared(self):
        for prompt in list_prompts():
            assert prompt["description"]
            assert any(a["required"] for a in prompt["arguments"])

    def test_listing_is_a_copy(self):
        listed = list_prompts()
        listed.pop()
        listed[0]["arguments"].clear()
        assert len(list_prompts()) == 4
        assert list_prompts()[0]["arguments"]
        assert get_prompt("gsd_new_project", {"name": "a", "description": "b"})


class TestGetPrompt:
    def test_unknown(self):
        with pytest.raises(UnknownPrompt):
            get_prompt("gsd_nope", {})

    def test_missing_required(self):
        with pytest.raises(InvalidPromptArguments) as exc:
            get_prompt("gsd_new_project", {"name": "demo"})
        assert "description" in exc.value.message

    def test_blank_required(self):
        with pytest.raises(InvalidPromptArguments):
            get_prompt("gsd_quick", {"task": "   "})

    def test_arguments_must_be_an_object(self):
        with pytest.raises(InvalidPromptArguments) as exc:
            get_prompt("gsd_quick", ["task"])
        assert "must be an object" in exc.value.message

    def test_new_project_full(self):
        result = get_prompt("gsd_new_project", {"name": "demo", "description": "A CLI", "auto": "true"})
        assert result["description"] == "Configure a new GSD project"
        text = _text(result)
        assert "Project name: demo" in text
        assert "Description: A CLI" in text
        assert "Auto mode enabled" in text
        assert text.endswith("- .planning/STATE.md")

    @pytest.mark.parametrize("name,args", [
        ("gsd_new_project", {"name": "demo", "description": "A CLI"}),
        ("gsd_discuss_phase", {"phase": "2"}),
        ("gsd_plan_phase", {"phase": "3"}),
        ("gsd_quick", {"task": "rename the module"}),
    ])
    def test_optional_arguments_omitted(self, name, args):
        text = _text(get_prompt(name, args))
        _assert_clean(text)

    def test_discuss_focus(self):
        text = _text(get_prompt("gsd_discuss_phase", {"phase": "2", "focus": "api"}))
        assert text.startswith("Discuss phase 2 implementation details.")
        assert "Focus area: api" in text

    def test_discuss_without_focus(self):
        assert "Focus area" not in _text(get_prompt("gsd_discuss_phase", {"phase": "2"}))

    def test_plan_flags(self):
        text = _text(get_prompt("gsd_plan_phase", {"phase": "3", "skip_research": "true", "skip_verify": "false"}))
        assert "- Skip research: Yes" in text
        assert "Skip verification" not in text

    def test_flags_case_insensitive(self):
        text = _text(get_prompt("gsd_plan_phase", {"phase": "3", "skip_verify": "True"}))
        assert "- Skip verification: Yes" in text

    def test_quick(self):
        text = _text(get_prompt("gsd_quick", {"task": "rename the module"}))
        assert text.startswith("Quick task: rename the module\n\n")
