"""Tests for ticket front-matter parsing and serialization."""

import pytest

from tiki.errors import InvalidFrontmatter
from tiki.parser import parse_ticket, serialize_ticket, split_front_matter
from tiki.task import Ticket


def test_split_front_matter():
    meta, body = split_front_matter("---\ntitle: Hello\n---\nBody text\n")
    assert meta == {"title": "Hello"}
    assert body == "Body text\n"


def test_empty_front_matter_is_empty_mapping():
    meta, body = split_front_matter("---\n---\nJust a body")
    assert meta == {}
    assert body == "Just a body"


def test_missing_delimiters():
    with pytest.raises(InvalidFrontmatter):
        split_front_matter("title: Hello\n\nNo fences here")


def test_malformed_yaml():
    with pytest.raises(InvalidFrontmatter):
        split_front_matter("---\ntitle: [unclosed\n---\n")


def test_non_mapping_front_matter():
    with pytest.raises(InvalidFrontmatter):
        split_front_matter("---\n- a\n- b\n---\n")


def test_parse_full_ticket():
    text = """---
title: Fix login
type: bug
status: in progress
tags: [auth, ui]
assignee: bob
priority: 1
points: 3
---
Users cannot log in.
"""
    ticket = parse_ticket("tiki-abc123", text, 10)
    assert ticket.id == "TIKI-ABC123"
    assert ticket.title == "Fix login"
    assert ticket.type == "bug"
    assert ticket.status == "in_progress"
    assert ticket.tags == ["auth", "ui"]
    assert ticket.assignee == "bob"
    assert ticket.priority == 1
    assert ticket.points == 3
    assert ticket.description == "Users cannot log in."


def test_parse_normalizes_bad_values():
    """A boolean tags value and out-of-range numbers fall back to defaults."""
    text = "---\ntitle: Odd\ntags: true\npriority: 12\npoints: 0\nstatus: weird\n---\n"
    ticket = parse_ticket("TIKI-ODD001", text, 10)
    assert ticket.tags == []
    assert ticket.priority == 3
    assert ticket.points == 5
    assert ticket.status == "backlog"


def test_embedded_id_is_ignored():
    ticket = parse_ticket("TIKI-FILE01", "---\nid: TIKI-OTHER1\ntitle: x\n---\n", 10)
    assert ticket.id == "TIKI-FILE01"


def test_serialize_key_order():
    ticket = Ticket(id="TIKI-AAAAAA", title="Hello", tags=["b", "a"], points=2, description="Body")
    text = serialize_ticket(ticket)
    meta, _ = split_front_matter(text)
    assert list(meta) == ["title", "type", "status", "tags", "assignee", "priority", "points"]
    assert meta["tags"] == ["a", "b"]
    assert text.endswith("---\nBody\n")


def test_serialize_then_parse_keeps_fields():
    ticket = Ticket(
        id="TIKI-AAAAAA",
        title="Title: with colon",
        type="spike",
        status="review",
        tags=["x"],
        assignee="carol",
        priority=2,
        points=8,
        description="Line one\n\nLine two",
    )
    parsed = parse_ticket(ticket.id, serialize_ticket(ticket), 10)
    for name in ("title", "type", "status", "tags", "assignee", "priority", "points", "description"):
        assert getattr(parsed, name) == getattr(ticket, name)
