"""Tests for factory discovery and naming."""

import sys

import factory
import pytest

from factory_seeder.core.exceptions import FactoryNotFoundError
from factory_seeder.shared.factories import FactoryCatalog, factory_name_for
from tests.sample_app.factories import PostFactory, UserFactory

BASE_FILE = '''
import factory


class WidgetFactory(factory.Factory):
    class Meta:
        model = dict

    label = "widget"
'''

DEPENDENT_FILE = '''
import sys

import factory

WidgetFactory = sys.modules["factory_seeder_factories.b_widgets"].WidgetFactory


class SpecialWidgetFactory(WidgetFactory):
    label = "special"
'''


@pytest.fixture(autouse=True)
def forget_loaded_files():
    """Drop modules imported from temporary factory files."""
    yield
    for name in [n for n in sys.modules if n.startswith("factory_seeder_factories.")]:
        del sys.modules[name]


@pytest.mark.parametrize(
    ("class_name", "expected"),
    [
        ("UserFactory", "user"),
        ("BlogPostFactory", "blog_post"),
        ("HTTPRequestFactory", "http_request"),
        ("OAuth2TokenFactory", "o_auth2_token"),
        ("Factory", "factory"),
    ],
)
def test_factory_name_for(class_name, expected):
    factory_cls = type(class_name, (), {})

    assert factory_name_for(factory_cls) == expected


def test_seeder_name_override(catalog):
    assert "account" in catalog
    assert "legacy_account" not in catalog


class TestCatalog:
    def test_loads_sample_factories(self, catalog):
        assert catalog.names() == ["account", "comment", "explosive", "gadget", "post", "user"]
        assert catalog.get("user") is UserFactory
        assert catalog.name_of(PostFactory) == "post"
        assert len(catalog) == 6

    def test_get_unknown(self, catalog):
        with pytest.raises(FactoryNotFoundError) as exc_info:
            catalog.get("widget")

        assert exc_info.value.details["available"] == catalog.names()
        assert catalog.find("widget") is None

    def test_duplicate_name_keeps_first(self, catalog):
        class UserFactoryCopy(factory.Factory):
            class Meta:
                model = dict

        catalog.register(UserFactoryCopy, name="user")

        assert catalog.get("user") is UserFactory

    def test_abstract_factories_are_skipped(self):
        class BaseModelFactory(factory.Factory):
            class Meta:
                abstract = True

        catalog = FactoryCatalog()
        module = type(sys)("abstract_only")
        BaseModelFactory.__module__ = "abstract_only"
        module.BaseModelFactory = BaseModelFactory

        assert catalog.register_module(module) == []

    def test_imported_factories_belong_to_their_module(self, catalog):
        module = type(sys)("reexports")
        module.UserFactory = UserFactory

        assert FactoryCatalog().register_module(module) == []

    def test_unimportable_module_is_recorded(self):
        catalog = FactoryCatalog()

        assert catalog.load_modules(["tests.sample_app.does_not_exist"]) == 0
        assert "tests.sample_app.does_not_exist" in catalog.load_errors

    def test_clear(self, catalog):
        catalog.clear()

        assert len(catalog) == 0
        assert catalog.names() == []


class TestLoadPaths:
    def test_loads_directory(self, tmp_path):
        (tmp_path / "widgets.py").write_text(BASE_FILE)
        (tmp_path / "__init__.py").write_text("raise RuntimeError('skipped')")
        (tmp_path / "conftest.py").write_text("raise RuntimeError('skipped')")
        catalog = FactoryCatalog()

        found = catalog.load_paths([tmp_path, tmp_path / "missing"])

        assert found == 1
        assert catalog.names() == ["widget"]
        assert catalog.load_errors == {}

    def test_loads_single_file(self, tmp_path):
        path = tmp_path / "single_widgets.py"
        path.write_text(BASE_FILE)
        catalog = FactoryCatalog()

        assert catalog.load_paths([path]) == 1

    def test_retries_files_that_depend_on_later_files(self, tmp_path):
        (tmp_path / "a_special.py").write_text(DEPENDENT_FILE)
        (tmp_path / "b_widgets.py").write_text(BASE_FILE)
        catalog = FactoryCatalog()

        found = catalog.load_paths([tmp_path])

        assert found == 2
        assert catalog.names() == ["special_widget", "widget"]
        assert catalog.load_errors == {}

    def test_broken_file_is_recorded(self, tmp_path):
        (tmp_path / "broken_widgets.py").write_text("import not_a_real_module_xyz\n")
        (tmp_path / "good_widgets.py").write_text(BASE_FILE)
        catalog = FactoryCatalog()

        found = catalog.load_paths([tmp_path])

        assert found == 1
        assert list(catalog.load_errors) == [str(tmp_path / "broken_widgets.py")]
        assert catalog.load_errors[str(tmp_path / "broken_widgets.py")].startswith(
            "ModuleNotFoundError"
        )
