"""
Unit tests for EditorSession: change propagation, load/reset, photos and the
rewrite request/apply flow.
"""

import asyncio

import pytest

from vitae.contexts.document.defaults import get_default_snapshot
from vitae.contexts.document.modules import FieldRef, Module
from vitae.contexts.document.persistence import InMemoryGateway, JsonFileGateway
from vitae.contexts.editing.session import EditorSession
from vitae.contexts.rendering.preview import EMPTY_STATE_HTML
from vitae.contexts.rewrite.adapter import RewriteAdapter
from vitae.exceptions import EmptyInput, MissingRequiredField, RewriteFailed, ValidationError
from vitae.utils.llm import LLMRequestError

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def session(gateway, fake_timer, fake_provider):
    return EditorSession(gateway=gateway, call_later=fake_timer, rewrite_adapter=RewriteAdapter(fake_provider))


class TestChangePropagation:
    """Every mutation re-renders the preview and schedules a save."""

    @pytest.mark.unit
    def test_initial_preview_is_empty(self, session):
        assert session.preview == ""
        assert session.preview_html() == EMPTY_STATE_HTML

    @pytest.mark.unit
    def test_write_updates_preview_and_schedules_save(self, session, gateway, fake_timer):
        session.write(FieldRef("profile", "name"), "张三")

        assert "张三" in session.preview
        assert len(fake_timer.live) == 1
        fake_timer.fire()
        assert gateway.load()["profile"]["name"] == "张三"

    @pytest.mark.unit
    def test_burst_of_edits_saves_once(self, session, gateway, fake_timer):
        for ch in "张三丰":
            session.write(FieldRef("profile", "name"), (session.read(FieldRef("profile", "name")) or "") + ch)
        session.add_entry("experience")
        session.write(FieldRef("experience", "company", 1), "某公司")

        fake_timer.fire()
        assert gateway.save_count == 1
        saved = gateway.load()
        assert saved["profile"]["name"] == "张三丰"
        assert saved["experience"][1]["company"] == "某公司"

    @pytest.mark.unit
    def test_ignored_write_schedules_nothing(self, session, fake_timer):
        assert session.write(FieldRef("profile", "nickname"), "x") is False
        assert session.write(FieldRef("bogus", "x"), "x") is False
        assert session.write(FieldRef("experience", "company", 7), "x") is False
        assert fake_timer.handles == []

    @pytest.mark.unit
    def test_structural_commands(self, session):
        session.write(FieldRef("profile", "name"), "A")
        session.write(FieldRef("summary"), "自我评价内容")

        assert session.delete_module("summary") is True
        assert "自我评价内容" not in session.preview
        assert session.deleted_modules() == ["summary"]

        assert session.restore_module("summary") is True
        assert session.active_modules()[-1] == "summary"
        assert "自我评价内容" in session.preview

        assert session.reorder_modules(["summary"]) is False

    @pytest.mark.unit
    def test_read_dispatch(self, session):
        session.write(FieldRef("skills"), "Python")
        session.write(FieldRef("education", "school", 0), "复旦大学")

        assert session.read(FieldRef("skills")) == "Python"
        assert session.read(FieldRef("education", "school", 0)) == "复旦大学"
        assert session.read(FieldRef("education", "school", 3)) is None
        assert session.read(FieldRef("education", "school")) is None
        assert session.read(FieldRef("bogus")) is None


class TestLoadAndReset:
    """Tests for loading persisted state and resetting."""

    @pytest.mark.unit
    def test_load_restores_snapshot_without_saving(self, filled_snapshot, fake_timer):
        gateway = InMemoryGateway()
        gateway.save(filled_snapshot)
        session = EditorSession(gateway=gateway, call_later=fake_timer)

        assert session.load() is True
        assert session.model.snapshot() == filled_snapshot
        assert "张三" in session.preview
        assert fake_timer.handles == []
        assert gateway.save_count == 1

    @pytest.mark.unit
    def test_load_malformed_file_falls_back_to_defaults(self, tmp_path, fake_timer):
        path = tmp_path / "data.json"
        path.write_text("{broken", encoding="utf-8")
        session = EditorSession(gateway=JsonFileGateway(path), call_later=fake_timer)

        assert session.load() is False
        assert session.model.snapshot() == get_default_snapshot()

    @pytest.mark.unit
    def test_load_non_object_falls_back_to_defaults(self, tmp_path, fake_timer):
        path = tmp_path / "data.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        session = EditorSession(gateway=JsonFileGateway(path), call_later=fake_timer)

        assert session.load() is False
        assert session.model.snapshot() == get_default_snapshot()

    @pytest.mark.unit
    def test_reset_clears_everything(self, session, gateway, fake_timer, filled_snapshot):
        session.model.replace(filled_snapshot)
        fake_timer.fire()
        assert gateway.load() is not None

        session.write(FieldRef("profile", "name"), "pending edit")
        session.reset()

        assert fake_timer.fire() == 0
        assert gateway.load() is None
        assert session.model.snapshot() == get_default_snapshot()
        assert session.preview == ""


class TestPhoto:
    """Tests for photo set/remove through the session."""

    @pytest.mark.unit
    def test_set_and_remove_photo(self, session):
        session.write(FieldRef("profile", "name"), "A")
        session.set_photo(PNG_HEADER, "image/png")

        photo = session.read(FieldRef("profile", "photo"))
        assert photo.startswith("data:image/png;base64,")
        assert 'class="resume-photo"' in session.preview

        session.remove_photo()
        assert session.read(FieldRef("profile", "photo")) == ""

    @pytest.mark.unit
    def test_invalid_photo_leaves_model_untouched(self, session, fake_timer):
        with pytest.raises(ValidationError):
            session.set_photo(b"%PDF", "application/pdf")
        with pytest.raises(ValidationError):
            EditorSession(photo_max_bytes=4, call_later=fake_timer).set_photo(PNG_HEADER, "image/png")

        assert session.read(FieldRef("profile", "photo")) == ""
        assert fake_timer.handles == []


class TestExport:
    """Tests for export preconditions (docx encoding is covered by integration tests)."""

    @pytest.mark.unit
    def test_export_without_name_raises_before_writing(self, session, tmp_path):
        with pytest.raises(MissingRequiredField):
            session.export(tmp_path / "out")
        assert not (tmp_path / "out").exists()


class TestRewriteFlow:
    """Tests for request_rewrite / apply_rewrite / discard_rewrite."""

    @pytest.mark.unit
    def test_apply_changes_only_the_bound_field(self, session, filled_snapshot, fake_provider):
        session.model.replace(filled_snapshot)
        target = FieldRef("experience", "desc", 0)
        before = session.model.snapshot()

        proposal = asyncio.run(session.request_rewrite(target))
        assert proposal.original == "负责支付系统\n主导服务拆分"
        assert proposal.rewritten == "• 改写结果"
        # Requesting does not touch the document
        assert session.model.snapshot() == before

        assert session.apply_rewrite(proposal) is True
        after = session.model.snapshot()
        assert after["experience"][0]["desc"] == "• 改写结果"
        after["experience"][0]["desc"] = before["experience"][0]["desc"]
        assert after == before

        system_prompt, _ = fake_provider.calls[0]
        assert "工作经历-工作描述" in system_prompt

    @pytest.mark.unit
    def test_apply_user_edited_text(self, session):
        session.write(FieldRef("summary"), "原文")
        proposal = asyncio.run(session.request_rewrite(FieldRef("summary")))

        assert session.apply_rewrite(proposal, text="用户修改后的文本") is True
        assert session.read(FieldRef("summary")) == "用户修改后的文本"

    @pytest.mark.unit
    def test_proposal_cannot_be_applied_twice(self, session):
        session.write(FieldRef("summary"), "原文")
        proposal = asyncio.run(session.request_rewrite(FieldRef("summary")))

        assert session.apply_rewrite(proposal) is True
        session.write(FieldRef("summary"), "later edit")
        assert session.apply_rewrite(proposal) is False
        assert session.read(FieldRef("summary")) == "later edit"

    @pytest.mark.unit
    def test_discard_makes_proposal_stale(self, session):
        session.write(FieldRef("skills"), "Python")
        proposal = asyncio.run(session.request_rewrite(FieldRef("skills")))
        session.discard_rewrite()

        assert session.apply_rewrite(proposal) is False
        assert session.read(FieldRef("skills")) == "Python"

    @pytest.mark.unit
    def test_reset_makes_proposal_stale(self, session):
        session.write(FieldRef("skills"), "Python")
        proposal = asyncio.run(session.request_rewrite(FieldRef("skills")))
        session.reset()

        assert session.apply_rewrite(proposal) is False
        assert session.read(FieldRef("skills")) == ""

    @pytest.mark.unit
    def test_overlapping_requests_last_wins(self, gateway, fake_timer, make_provider):
        provider = make_provider(replies=["first result", "second result"])
        session = EditorSession(gateway=gateway, call_later=fake_timer, rewrite_adapter=RewriteAdapter(provider))
        session.write(FieldRef("summary"), "摘要")
        session.write(FieldRef("skills"), "技能")

        async def scenario():
            provider.gates = [asyncio.Event(), asyncio.Event()]
            first = asyncio.create_task(session.request_rewrite(FieldRef("summary")))
            await asyncio.sleep(0)
            second = asyncio.create_task(session.request_rewrite(FieldRef("skills")))
            await asyncio.sleep(0)

            # Second request answers before the first
            provider.gates[1].set()
            second_result = await second
            provider.gates[0].set()
            first_result = await first
            return first_result, second_result

        first_result, second_result = asyncio.run(scenario())

        assert first_result is None
        assert second_result.rewritten == "second result"
        assert second_result.target == FieldRef("skills")
        assert session.apply_rewrite(second_result) is True
        assert session.read(FieldRef("skills")) == "second result"
        assert session.read(FieldRef("summary")) == "摘要"

    @pytest.mark.unit
    def test_stale_failure_is_dropped(self, gateway, fake_timer, make_provider):
        provider = make_provider(error=LLMRequestError("API request failed (500): boom", status_code=500))
        session = EditorSession(gateway=gateway, call_later=fake_timer, rewrite_adapter=RewriteAdapter(provider))
        session.write(FieldRef("summary"), "摘要")

        async def scenario():
            provider.gates = [asyncio.Event()]
            task = asyncio.create_task(session.request_rewrite(FieldRef("summary")))
            await asyncio.sleep(0)
            session.discard_rewrite()
            provider.gates[0].set()
            return await task

        assert asyncio.run(scenario()) is None

    @pytest.mark.unit
    def test_empty_field_raises_and_keeps_pending_binding(self, session):
        session.write(FieldRef("skills"), "Python")
        proposal = asyncio.run(session.request_rewrite(FieldRef("skills")))

        with pytest.raises(EmptyInput):
            asyncio.run(session.request_rewrite(FieldRef("summary")))
        assert session.apply_rewrite(proposal) is True

    @pytest.mark.unit
    def test_failure_surfaces_and_leaves_field(self, gateway, fake_timer, make_provider):
        provider = make_provider(error=LLMRequestError("API request failed (401): bad key", status_code=401))
        session = EditorSession(gateway=gateway, call_later=fake_timer, rewrite_adapter=RewriteAdapter(provider))
        session.write(FieldRef("summary"), "摘要")

        with pytest.raises(RewriteFailed) as exc_info:
            asyncio.run(session.request_rewrite(FieldRef("summary")))
        assert exc_info.value.status_code == 401
        assert session.read(FieldRef("summary")) == "摘要"
        assert session.binding.pending is None

    @pytest.mark.unit
    def test_unknown_target_raises(self, session):
        with pytest.raises(ValidationError):
            asyncio.run(session.request_rewrite(FieldRef("experience", "desc", 9)))

    @pytest.mark.unit
    def test_without_adapter_rewrite_fails(self, fake_timer):
        session = EditorSession(call_later=fake_timer)
        session.write(FieldRef("summary"), "摘要")
        with pytest.raises(RewriteFailed):
            asyncio.run(session.request_rewrite(FieldRef("summary")))


@pytest.mark.unit
def test_close_flushes_pending_save(fake_timer):
    gateway = InMemoryGateway()
    session = EditorSession(gateway=gateway, call_later=fake_timer)
    session.write(FieldRef("profile", "name"), "A")
    session.close()

    assert gateway.load()["profile"]["name"] == "A"
    session.write(FieldRef("profile", "name"), "B")
    assert fake_timer.fire() == 0


@pytest.mark.unit
def test_entries_accessor_used_by_session(fake_timer):
    session = EditorSession(call_later=fake_timer)
    index = session.add_entry(Module.PROJECTS)
    assert session.remove_entry(Module.PROJECTS, index) is True
    assert len(session.model.entries(Module.PROJECTS)) == 1
