"""Tests for the notification email templates."""

from __future__ import annotations

import pytest

from notification_service.application.templates import TEMPLATES, render_email


def test_body_values_are_escaped_but_subject_is_plain():
    rendered = render_email(
        "chat_message_received",
        {"sender_name": "Tom & Jerry", "message_preview": "<script>alert(1)</script>"},
    )

    assert rendered.subject == "New message from Tom & Jerry"
    assert "Tom &amp; Jerry" in rendered.html
    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html


def test_action_button_needs_a_url():
    with_link = render_email(
        "chat_message_received",
        {"sender_name": "Riley", "message_preview": "Hi"},
        action_url="https://portal.test/messages/conv-1",
    )
    without_link = render_email(
        "chat_message_received", {"sender_name": "Riley", "message_preview": "Hi"}
    )

    assert 'href="https://portal.test/messages/conv-1"' in with_link.html
    assert with_link.action_label == "Reply"
    assert "href=" not in without_link.html


def test_missing_values_render_blank():
    rendered = render_email("chat_message_received", {"sender_name": None})

    assert rendered.subject == "New message from"
    assert "None" not in rendered.html


def test_unknown_template_is_rejected():
    with pytest.raises(ValueError):
        render_email("no_such_template", {})


@pytest.mark.parametrize("template_id", sorted(TEMPLATES))
def test_every_template_renders_with_an_empty_context(template_id):
    rendered = render_email(template_id, {}, action_url="https://portal.test")

    assert rendered.subject
    assert rendered.html.startswith("<div")
