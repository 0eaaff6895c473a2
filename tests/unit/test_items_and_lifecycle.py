"""
Unit tests for repeatable entry management and the module lifecycle.
"""

import random

import pytest

from vitae.contexts.document.document_model import DocumentModel
from vitae.contexts.document.items import ItemCollectionManager
from vitae.contexts.document.lifecycle import ModuleLifecycleController, ModuleState
from vitae.contexts.document.modules import CANONICAL_ORDER, Module


@pytest.fixture
def model():
    return DocumentModel()


@pytest.fixture
def notifications(model):
    calls = []
    model.subscribe(lambda m: calls.append(m))
    return calls


class TestItemCollectionManager:
    """Tests for add/remove/set_field."""

    @pytest.mark.unit
    def test_add_appends_blank_entry(self, model, notifications):
        items = ItemCollectionManager(model)
        index = items.add(Module.EXPERIENCE)

        assert index == 1
        assert model.entries(Module.EXPERIENCE)[1] == Module.EXPERIENCE.schema.blank()
        assert len(notifications) == 1

    @pytest.mark.unit
    def test_add_accepts_identifier_strings(self, model):
        items = ItemCollectionManager(model)
        assert items.add("projects") == 1

    @pytest.mark.unit
    @pytest.mark.parametrize("module", ["skills", "summary", "profile", "bogus", None])
    def test_add_to_non_repeatable_is_noop(self, model, notifications, module):
        items = ItemCollectionManager(model)
        assert items.add(module) is None
        assert notifications == []

    @pytest.mark.unit
    def test_remove_valid_index(self, model, notifications):
        items = ItemCollectionManager(model)
        items.add(Module.EDUCATION)
        items.set_field(Module.EDUCATION, 1, "school", "B")

        assert items.remove(Module.EDUCATION, 0) is True
        assert [entry["school"] for entry in model.entries(Module.EDUCATION)] == ["B"]
        assert len(notifications) == 3

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [-1, 1, 5, True, "0", None])
    def test_remove_invalid_index_is_noop(self, model, notifications, index):
        items = ItemCollectionManager(model)
        assert items.remove(Module.EDUCATION, index) is False
        assert len(model.entries(Module.EDUCATION)) == 1
        assert notifications == []

    @pytest.mark.unit
    def test_remove_from_empty_collection_is_noop(self, model):
        items = ItemCollectionManager(model)
        assert items.remove(Module.PROJECTS, 0) is True
        assert items.remove(Module.PROJECTS, 0) is False
        assert model.entries(Module.PROJECTS) == []

    @pytest.mark.unit
    def test_set_field_updates_in_place(self, model, notifications):
        items = ItemCollectionManager(model)
        assert items.set_field(Module.EXPERIENCE, 0, "company", "某公司") is True
        assert model.entries(Module.EXPERIENCE)[0]["company"] == "某公司"
        assert len(notifications) == 1

    @pytest.mark.unit
    def test_set_field_rejects_unknown_field(self, model, notifications):
        items = ItemCollectionManager(model)
        assert items.set_field(Module.EXPERIENCE, 0, "school", "x") is False
        assert items.set_field(Module.SKILLS, 0, "desc", "x") is False
        assert items.set_field(Module.EXPERIENCE, 3, "company", "x") is False
        assert notifications == []

    @pytest.mark.unit
    def test_entries_keep_insertion_order(self, model):
        items = ItemCollectionManager(model)
        for name in ["B", "C", "D"]:
            index = items.add(Module.PROJECTS)
            items.set_field(Module.PROJECTS, index, "projectName", name)
        items.set_field(Module.PROJECTS, 0, "projectName", "A")

        names = [entry["projectName"] for entry in model.entries(Module.PROJECTS)]
        assert names == ["A", "B", "C", "D"]


class TestModuleLifecycle:
    """Tests for delete/restore/reorder and the order/deleted partition."""

    @pytest.mark.unit
    def test_delete_moves_module_to_deleted(self, model, notifications):
        lifecycle = ModuleLifecycleController(model)
        assert lifecycle.delete(Module.PROJECTS) is True

        assert Module.PROJECTS not in lifecycle.active_modules()
        assert lifecycle.deleted_modules() == [Module.PROJECTS]
        assert lifecycle.state("projects") == ModuleState(Module.PROJECTS, active=False)
        assert len(notifications) == 1

    @pytest.mark.unit
    def test_delete_is_idempotent(self, model, notifications):
        lifecycle = ModuleLifecycleController(model)
        lifecycle.delete(Module.SKILLS)
        assert lifecycle.delete(Module.SKILLS) is False
        assert len(notifications) == 1

    @pytest.mark.unit
    def test_delete_keeps_content(self, model):
        model.set("skillsContent", "Python")
        lifecycle = ModuleLifecycleController(model)
        lifecycle.delete(Module.SKILLS)
        lifecycle.restore(Module.SKILLS)
        assert model.text(Module.SKILLS) == "Python"

    @pytest.mark.unit
    @pytest.mark.parametrize("module", ["profile", "bogus", "", None])
    def test_non_modules_are_never_deletable(self, model, notifications, module):
        lifecycle = ModuleLifecycleController(model)
        assert lifecycle.delete(module) is False
        assert lifecycle.restore(module) is False
        assert lifecycle.state(module) is None
        assert notifications == []

    @pytest.mark.unit
    def test_restore_appends_at_end(self, model):
        lifecycle = ModuleLifecycleController(model)
        lifecycle.delete(Module.EDUCATION)
        lifecycle.restore(Module.EDUCATION)

        assert lifecycle.active_modules()[-1] == Module.EDUCATION
        assert lifecycle.state(Module.EDUCATION) == ModuleState(
            Module.EDUCATION, active=True, position=len(CANONICAL_ORDER) - 1
        )

    @pytest.mark.unit
    def test_restore_active_module_is_noop(self, model, notifications):
        lifecycle = ModuleLifecycleController(model)
        assert lifecycle.restore(Module.EDUCATION) is False
        assert notifications == []

    @pytest.mark.unit
    def test_reorder_with_permutation(self, model):
        lifecycle = ModuleLifecycleController(model)
        new_order = list(reversed(CANONICAL_ORDER))
        assert lifecycle.reorder([module.value for module in new_order]) is True
        assert lifecycle.active_modules() == new_order

    @pytest.mark.unit
    def test_reorder_same_order_reports_no_change(self, model, notifications):
        lifecycle = ModuleLifecycleController(model)
        assert lifecycle.reorder(list(CANONICAL_ORDER)) is False
        assert notifications == []

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload",
        [
            ["education", "experience"],
            ["education", "experience", "projects", "skills", "summary", "awards", "awards"],
            ["education", "experience", "projects", "skills", "summary", "bogus"],
            ["education", "education", "projects", "skills", "summary", "awards"],
            [],
        ],
    )
    def test_reorder_rejects_non_permutations(self, model, notifications, payload):
        lifecycle = ModuleLifecycleController(model)
        before = lifecycle.active_modules()

        assert lifecycle.reorder(payload) is False
        assert lifecycle.active_modules() == before
        assert notifications == []

    @pytest.mark.unit
    def test_reorder_cannot_resurrect_deleted_module(self, model):
        lifecycle = ModuleLifecycleController(model)
        lifecycle.delete(Module.AWARDS)
        assert lifecycle.reorder([module.value for module in CANONICAL_ORDER]) is False
        assert Module.AWARDS in lifecycle.deleted_modules()

    @pytest.mark.unit
    def test_random_sequences_preserve_partition(self, model):
        lifecycle = ModuleLifecycleController(model)
        rng = random.Random(1234)
        identifiers = [module.value for module in CANONICAL_ORDER] + ["profile", "bogus"]

        for _ in range(500):
            action = rng.choice(["delete", "restore", "reorder"])
            if action == "delete":
                lifecycle.delete(rng.choice(identifiers))
            elif action == "restore":
                lifecycle.restore(rng.choice(identifiers))
            else:
                order = [module.value for module in lifecycle.active_modules()]
                rng.shuffle(order)
                if rng.random() < 0.3 and order:
                    order.pop()
                lifecycle.reorder(order)

            active = lifecycle.active_modules()
            deleted = lifecycle.deleted_modules()
            assert len(active) == len(set(active))
            assert len(deleted) == len(set(deleted))
            assert set(active).isdisjoint(deleted)
            assert set(active) | set(deleted) == set(CANONICAL_ORDER)
