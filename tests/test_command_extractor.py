"""Unit tests for recovering task commands from model output."""

import json

from app.services.command_extractor import extract_commands, is_pure_json, strip_code_fences


class TestExtractCommands:
    """Object and array literals embedded in free text."""

    def test_single_object_in_prose(self):
        command = {"action": "create_task", "title": "Buy milk", "priority": "high"}
        text = f"Sure, I'll add that.\n{json.dumps(command)}\nAnything else?"

        assert extract_commands(text) == [command]

    def test_array_keeps_source_order(self):
        commands = [
            {"action": "create_task", "title": "First"},
            {"action": "update_task", "title": "Second", "status": "COMPLETED"},
            {"action": "delete_task", "title": "Third"},
        ]
        text = "Here you go:\n" + json.dumps(commands)

        assert extract_commands(text) == commands

    def test_objects_back_to_back(self):
        text = '{"action": "create_task", "title": "A"}{"action": "delete_task", "title": "B"}'

        assert extract_commands(text) == [
            {"action": "create_task", "title": "A"},
            {"action": "delete_task", "title": "B"},
        ]

    def test_objects_interspersed_with_prose(self):
        text = (
            'First I will create it: {"action": "create_task", "title": "A"} '
            'and then list: {"action": "list_tasks"} done.'
        )

        assert [c["action"] for c in extract_commands(text)] == ["create_task", "list_tasks"]

    def test_nested_filter_object_is_kept_whole(self):
        command = {"action": "list_tasks", "filter": {"status": "TODO", "assignee": "Bob"}}

        assert extract_commands(json.dumps(command)) == [command]

    def test_code_fences_are_stripped(self):
        text = '```json\n{"action": "delete_task", "title": "Old"}\n```'

        assert extract_commands(text) == [{"action": "delete_task", "title": "Old"}]

    def test_malformed_objects_are_dropped(self):
        text = '{"action": "create_task", title: broken} {"action": "list_tasks"}'

        assert extract_commands(text) == [{"action": "list_tasks"}]

    def test_valid_object_inside_malformed_one_is_returned_alone(self):
        text = '{"action": "list_tasks", "filter": {"status": "TODO"}, broken}'

        assert extract_commands(text) == [{"status": "TODO"}]

    def test_plain_reply_has_no_commands(self):
        assert extract_commands("You have three tasks due this week.") == []

    def test_brackets_without_objects_fall_back_to_objects(self):
        text = 'Options [1, 2] then {"action": "list_tasks"}'

        assert extract_commands(text) == [{"action": "list_tasks"}]

    def test_empty_text(self):
        assert extract_commands("") == []


class TestPureJson:
    """Detection of replies that are nothing but a JSON literal."""

    def test_object_only(self):
        assert is_pure_json('  {"answer": 42}  ')

    def test_array_only(self):
        assert is_pure_json("[]")

    def test_prose_around_json(self):
        assert not is_pure_json('Result: {"answer": 42}')

    def test_plain_text(self):
        assert not is_pure_json("hello")


def test_strip_code_fences_handles_none():
    assert strip_code_fences(None) == ""
