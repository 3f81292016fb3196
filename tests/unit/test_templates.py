"""Unit tests for reply templates and their use in announcements."""

import json
from dataclasses import replace
from pathlib import Path

import pytest

from src.formatting import render_announcement_text, render_chat_message, render_payload
from src.models import ChatWebhook, DeploymentOutcome, PublicPost
from src.templates import (
    ReplyTemplate,
    TemplateError,
    list_templates,
    load_template,
    render_template,
    template_for_outcome,
)

SHIPPED_TEMPLATES = Path(__file__).resolve().parents[2] / "reply-templates"


def write_template(directory: Path, name: str, **fields) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    body = {"name": name, "description": f"{name} template", "template": "🚀 {undername} is live"}
    body.update(fields)
    path = directory / f"{name}.json"
    path.write_text(json.dumps(body), encoding="utf-8")
    return path


@pytest.fixture
def templates_dir(config):
    return Path(config.templates_dir)


class TestLoadTemplate:
    def test_loads_valid_file(self, templates_dir):
        write_template(templates_dir, "success", example="🚀 deadbeef is live")

        template = load_template("success", templates_dir)

        assert template.name == "success"
        assert template.example == "🚀 deadbeef is live"
        assert template.placeholders() == ["undername"]

    def test_missing_file(self, templates_dir):
        with pytest.raises(TemplateError, match="not found"):
            load_template("success", templates_dir)

    def test_missing_required_field(self, templates_dir):
        templates_dir.mkdir(parents=True)
        (templates_dir / "success.json").write_text('{"name": "success", "description": "x"}', encoding="utf-8")

        with pytest.raises(TemplateError, match="invalid"):
            load_template("success", templates_dir)

    def test_malformed_json(self, templates_dir):
        templates_dir.mkdir(parents=True)
        (templates_dir / "success.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(TemplateError):
            load_template("success", templates_dir)

    def test_list_skips_invalid(self, templates_dir, caplog):
        write_template(templates_dir, "success")
        write_template(templates_dir, "broken", template="")

        names = [t.name for t in list_templates(templates_dir)]

        assert names == ["success"]
        assert "broken.json" in caplog.text

    def test_list_missing_directory(self, tmp_path):
        assert list_templates(tmp_path / "nowhere") == []

    def test_shipped_templates_are_valid(self):
        names = {t.name for t in list_templates(SHIPPED_TEMPLATES)}
        assert {"success", "no-changes"} <= names


class TestRenderTemplate:
    def test_substitutes_known_placeholders(self):
        template = ReplyTemplate(name="t", description="d", template="{undername} on {ownerArnsName} ({missing})")
        assert render_template(template, {"undername": "abc", "ownerArnsName": "jonnie"}) == "abc on jonnie ({missing})"

    def test_none_renders_empty(self):
        template = ReplyTemplate(name="t", description="d", template="TX: {manifestTxId}")
        assert render_template(template, {"manifestTxId": None}) == "TX: "

    def test_failed_outcome_has_no_template(self, config, templates_dir):
        write_template(templates_dir, "success")
        failed = DeploymentOutcome.create("deadbeef", config, succeeded=False)

        with pytest.raises(TemplateError, match="failed deployments"):
            template_for_outcome(failed, templates_dir)


class TestTemplatedAnnouncements:
    def test_success_uses_template(self, config, outcome, templates_dir):
        write_template(templates_dir, "success", template="🚀 {undername} live at {deploymentUrl} ({duration})")

        text = render_announcement_text(outcome, config)

        assert text == "🚀 deadbeef live at https://deadbeef_jonnie.arweave.net (10ms)"

    def test_missing_template_falls_back(self, config, outcome, caplog):
        text = render_announcement_text(outcome, config)

        assert text.startswith("✅ Deployment completed!")
        assert "built-in announcement layout" in caplog.text

    def test_social_payload_uses_template(self, config, outcome, templates_dir):
        write_template(templates_dir, "success")
        assert render_payload(outcome, PublicPost(), config).text == "🚀 deadbeef is live"

    def test_chat_content_carries_template(self, config, outcome, templates_dir):
        write_template(templates_dir, "success")

        message = render_chat_message(outcome, config)

        assert message.content == "@everyone 🚀 deadbeef is live"
        assert message.embeds[0].title == "✅ Deployment completed!"

    def test_no_change_template(self, config, no_change_outcome, templates_dir):
        write_template(templates_dir, "no-changes", template="Nothing new across {totalApps} apps")

        payload = render_payload(no_change_outcome, ChatWebhook(), config)

        assert payload.chat.content == "@everyone Nothing new across 7 apps"
        assert payload.chat.embeds[0].title == "ℹ️ No Changes Detected"

    def test_templates_dir_from_config(self, config, outcome, tmp_path):
        other = tmp_path / "elsewhere"
        write_template(other, "success", template="from {filePath}")

        assert render_announcement_text(outcome, replace(config, templates_dir=str(other))) == "from hello-world.txt"
