"""Discovery and lookup of factory_boy factories in the host application."""

from __future__ import annotations

import importlib
import importlib.util
import re
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import ModuleType

import factory
from factory.base import BaseFactory

from factory_seeder.core.exceptions import FactoryNotFoundError
from factory_seeder.core.logging import get_logger

logger = get_logger(__name__)

SKIPPED_FILES = frozenset({"__init__.py", "conftest.py"})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def factory_name_for(factory_cls: type) -> str:
    """Registry name of a factory class.

    ``BlogPostFactory`` becomes ``blog_post``. A ``_seeder_name`` class
    attribute wins over the derived name.
    """
    override = getattr(factory_cls, "_seeder_name", None)
    if override:
        return str(override)
    base = factory_cls.__name__
    if base.endswith("Factory") and base != "Factory":
        base = base[: -len("Factory")]
    return _CAMEL_BOUNDARY.sub("_", base).lower()


def is_concrete_factory(obj: object) -> bool:
    return (
        isinstance(obj, type)
        and issubclass(obj, BaseFactory)
        and not obj._meta.abstract
    )


def _factories_in(module: ModuleType) -> Iterator[type[factory.Factory]]:
    for value in vars(module).values():
        if is_concrete_factory(value) and value.__module__ == module.__name__:
            yield value


def _module_name_for(path: Path) -> str:
    try:
        relative = path.resolve().relative_to(Path.cwd().resolve())
    except ValueError:
        return f"factory_seeder_factories.{path.stem}"
    return ".".join(relative.with_suffix("").parts)


def _import_path(path: Path) -> ModuleType:
    module_name = _module_name_for(path)
    if module_name in sys.modules:
        return sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[module_name]
        raise
    return module


class FactoryCatalog:
    """Name to factory class mapping, owned by the app or CLI that built it."""

    def __init__(self) -> None:
        self._factories: dict[str, type[factory.Factory]] = {}
        self.load_errors: dict[str, str] = {}

    def register(self, factory_cls: type[factory.Factory], name: str | None = None) -> str:
        """Add a factory; a name already taken keeps its first factory."""
        name = name or factory_name_for(factory_cls)
        existing = self._factories.get(name)
        if existing is not None and existing is not factory_cls:
            logger.warning(
                "factory.catalog.duplicate_name",
                factory=name,
                kept=existing.__qualname__,
                ignored=factory_cls.__qualname__,
            )
            return name
        self._factories[name] = factory_cls
        return name

    def register_module(self, module: ModuleType) -> list[str]:
        return [self.register(factory_cls) for factory_cls in _factories_in(module)]

    def load_modules(self, module_names: Iterable[str]) -> int:
        """Import dotted modules and collect their factories."""
        found = 0
        for module_name in module_names:
            try:
                module = importlib.import_module(module_name)
            except Exception as e:
                self._record_failure(module_name, e)
                continue
            found += len(self.register_module(module))
        return found

    def load_paths(self, paths: Iterable[str | Path]) -> int:
        """Import factory files from files or directories.

        Files that fail are retried once after every other file, since a
        later file may define what an earlier one needs.

        Returns:
            Number of factories found.
        """
        files = [f for p in paths for f in self._python_files(Path(p))]
        found = 0
        failed: list[Path] = []

        for path in files:
            try:
                found += len(self.register_module(_import_path(path)))
            except Exception:
                failed.append(path)

        for path in failed:
            try:
                found += len(self.register_module(_import_path(path)))
            except Exception as e:
                self._record_failure(str(path), e)

        logger.info(
            "factory.catalog.loaded",
            files=len(files),
            factories=len(self._factories),
            failed=len(self.load_errors),
        )
        return found

    def _python_files(self, path: Path) -> list[Path]:
        if path.is_file():
            return [path] if path.suffix == ".py" else []
        if not path.is_dir():
            logger.debug("factory.catalog.path_missing", path=str(path))
            return []
        return sorted(p for p in path.rglob("*.py") if p.name not in SKIPPED_FILES)

    def _record_failure(self, source: str, error: Exception) -> None:
        self.load_errors[source] = f"{type(error).__name__}: {error}"
        logger.warning(
            "factory.catalog.load_failed",
            source=source,
            error=str(error),
            error_type=type(error).__name__,
        )

    def find(self, name: str) -> type[factory.Factory] | None:
        return self._factories.get(name)

    def get(self, name: str) -> type[factory.Factory]:
        factory_cls = self.find(name)
        if factory_cls is None:
            raise FactoryNotFoundError(name, available=self.names())
        return factory_cls

    def name_of(self, factory_cls: type) -> str:
        """Catalog name of ``factory_cls``, falling back to the naming rule."""
        for name, registered in self._factories.items():
            if registered is factory_cls:
                return name
        return factory_name_for(factory_cls)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def items(self) -> list[tuple[str, type[factory.Factory]]]:
        return sorted(self._factories.items())

    def clear(self) -> None:
        self._factories.clear()
        self.load_errors.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)
