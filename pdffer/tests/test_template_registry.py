"""
Tests for the template registry (factory boundary).
"""

from importlib.metadata import EntryPoint

import pytest

from pdffer.app.templates import registry as registry_module
from pdffer.app.templates.exceptions import (
    DuplicateTemplateError,
    TemplateNotFoundError,
)
from pdffer.app.templates.identity import SCOPE_PROTOTYPE, SCOPE_SINGLETON
from pdffer.app.templates.path import get_template_path, split_template_path
from pdffer.app.templates.registry import TemplateRegistry, pdf_template
from pdffer.tests.fixtures.templates import AmountPayload, make_template_class


def test_register_attaches_identity_to_class(registry):
    cls = make_template_class()

    entry = registry.register(cls, group="invoices", name="monthly", description="d")

    assert cls.identity is entry.identity
    assert cls.identity.group == "invoices"
    assert cls.identity.name == "monthly"
    assert cls.identity.scope == SCOPE_PROTOTYPE
    assert cls.template_path() == get_template_path("invoices", "monthly")
    assert entry.payload_type is AmountPayload
    assert entry.description == "d"


def test_created_instance_identity_decodes_to_lookup_path(registry):
    cls = make_template_class()
    registry.register(cls, group="invoices", name="monthly")
    path = get_template_path("invoices", "monthly")

    instance = registry.create(path)

    assert isinstance(instance, cls)
    assert split_template_path(instance.template_path()) == ("invoices", "monthly")


def test_prototype_scope_creates_fresh_instances(registry):
    registry.register(make_template_class(), name="receipt")

    assert registry.create("receipt") is not registry.create("receipt")


def test_singleton_scope_shares_one_instance(registry):
    registry.register(make_template_class(), name="receipt", scope=SCOPE_SINGLETON)

    first = registry.create("receipt")

    assert registry.create("receipt") is first


def test_duplicate_path_is_rejected(registry):
    registry.register(make_template_class(), group="g", name="n")

    with pytest.raises(DuplicateTemplateError):
        registry.register(make_template_class(), group="g", name="n")


def test_class_cannot_be_registered_under_a_second_path(registry):
    cls = make_template_class()
    registry.register(cls, group="invoices", name="monthly")
    monthly = get_template_path("invoices", "monthly")

    with pytest.raises(DuplicateTemplateError) as excinfo:
        registry.register(cls, group="invoices", name="weekly")

    assert excinfo.value.path == monthly
    assert excinfo.value.template_cls is cls
    assert get_template_path("invoices", "weekly") not in registry
    assert split_template_path(registry.create(monthly).template_path()) == (
        "invoices",
        "monthly",
    )


def test_class_can_be_registered_again_after_unregister(registry):
    cls = make_template_class()
    registry.register(cls, name="old")
    registry.unregister("old")

    registry.register(cls, name="new")

    assert cls.template_path() == "new"


def test_subclass_of_registered_class_can_be_registered(registry):
    parent = make_template_class()
    registry.register(parent, group="invoices", name="monthly")
    child = type("Weekly", (parent,), {})

    registry.register(child, group="invoices", name="weekly")

    assert parent.template_path() == get_template_path("invoices", "monthly")
    assert child.template_path() == get_template_path("invoices", "weekly")


def test_same_name_in_different_groups_is_allowed(registry):
    registry.register(make_template_class(), group="a", name="n")
    registry.register(make_template_class(), group="b", name="n")
    registry.register(make_template_class(), name="n")

    assert len(registry) == 3


def test_unknown_path_raises_not_found(registry):
    with pytest.raises(TemplateNotFoundError) as excinfo:
        registry.create("missing")

    assert excinfo.value.path == "missing"
    assert isinstance(excinfo.value, LookupError)


def test_get_entry_for_group_and_name(registry):
    cls = make_template_class()
    registry.register(cls, group="letters", name="formal")

    assert registry.get_entry_for("letters", "formal").template_cls is cls
    with pytest.raises(TemplateNotFoundError):
        registry.get_entry_for("", "formal")


@pytest.mark.parametrize("kwargs", [{"name": ""}, {"name": "n", "scope": "request"}])
def test_invalid_identity_is_rejected(registry, kwargs):
    with pytest.raises(ValueError):
        registry.register(make_template_class(), **kwargs)

    assert len(registry) == 0


def test_non_template_class_is_rejected(registry):
    with pytest.raises(TypeError):
        registry.register(dict, name="n")


def test_entries_are_sorted_by_group_then_name(registry):
    registry.register(make_template_class(), group="b", name="x")
    registry.register(make_template_class(), name="z")
    registry.register(make_template_class(), group="a", name="y")

    assert [e.identity.as_tuple() for e in registry.entries()] == [
        ("", "z"),
        ("a", "y"),
        ("b", "x"),
    ]
    assert registry.paths()[0] == "z"
    assert "z" in registry


def test_unregister_clears_identity(registry):
    cls = make_template_class()
    registry.register(cls, name="temp", scope=SCOPE_SINGLETON)
    registry.create("temp")

    registry.unregister("temp")

    assert "temp" not in registry
    assert cls.identity is None
    with pytest.raises(TemplateNotFoundError):
        registry.unregister("temp")


def test_decorator_registers_in_given_registry(registry):
    @pdf_template(group="g", name="decorated", registry=registry)
    class Decorated(make_template_class()):
        pass

    assert registry.get_entry_for("g", "decorated").template_cls is Decorated
    assert Decorated.identity.name == "decorated"


def test_load_entry_points_imports_plugin_modules(registry, monkeypatch):
    loaded = []

    def fake_entry_points(group):
        assert group == "pdffer.templates"
        return [
            EntryPoint(
                name="extra",
                value="pdffer.tests.fixtures.templates",
                group=group,
            )
        ]

    monkeypatch.setattr(registry_module, "entry_points", fake_entry_points)
    monkeypatch.setattr(EntryPoint, "load", lambda self: loaded.append(self.value))

    names = registry.load_entry_points()

    assert names == ["extra"]
    assert loaded == ["pdffer.tests.fixtures.templates"]


def test_load_entry_points_propagates_import_errors(registry, monkeypatch):
    def fake_entry_points(group):
        return [EntryPoint(name="broken", value="pdffer.does_not_exist", group=group)]

    monkeypatch.setattr(registry_module, "entry_points", fake_entry_points)

    with pytest.raises(ModuleNotFoundError):
        registry.load_entry_points()


def test_registries_are_independent():
    first = TemplateRegistry()
    second = TemplateRegistry()
    first.register(make_template_class(), name="only-here")

    assert "only-here" in first
    assert "only-here" not in second
