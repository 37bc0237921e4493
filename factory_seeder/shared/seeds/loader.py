"""Loads custom seed files from the seeds directory.

Every ``*.py`` file in the directory is imported as a standalone module and
must expose ``register(registry)``::

    def register(registry):
        registry.define("hello", lambda name: ..., lambda s: s.string_param("name", required=True))
"""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

from factory_seeder.core.logging import get_logger
from factory_seeder.shared.seeds.registry import SeedRegistry

logger = get_logger(__name__)

REGISTER_HOOK = "register"


class CustomSeedLoader:
    """Imports seed files into a :class:`SeedRegistry`.

    Args:
        registry: Registry the seed files register into.
        directory: Directory holding the seed files.
    """

    def __init__(self, registry: SeedRegistry, directory: str | Path) -> None:
        self.registry = registry
        self.directory = Path(directory)
        self.errors: dict[str, str] = {}

    def seed_files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.glob("*.py") if not p.name.startswith("_"))

    def load_all(self) -> int:
        """Import every seed file; returns the number of files loaded."""
        files = self.seed_files()
        if not files:
            logger.info("seeds.loader.no_files", directory=str(self.directory))
            return 0

        loaded = 0
        for path in files:
            if self.load_file(path):
                loaded += 1

        logger.info(
            "seeds.loader.completed",
            directory=str(self.directory),
            files=loaded,
            failed=len(self.errors),
            seeds=len(self.registry),
        )
        return loaded

    def reload(self) -> int:
        """Clear the registry and load every seed file again."""
        self.registry.clear()
        self.errors.clear()
        return self.load_all()

    def load_file(self, path: Path) -> bool:
        """Import one seed file and call its register hook.

        Returns:
            False if the file failed; the failure is logged and kept in
            ``errors`` so the remaining files still load.
        """
        try:
            module = _import_file(path)
            hook = getattr(module, REGISTER_HOOK, None)
            if not callable(hook):
                raise AttributeError(f"{path.name} does not define {REGISTER_HOOK}(registry)")
            hook(self.registry)
        except Exception as e:
            self.errors[str(path)] = f"{type(e).__name__}: {e}"
            logger.error(
                "seeds.loader.file_failed",
                path=str(path),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.debug("seeds.loader.file_loaded", path=str(path))
        return True


def _import_file(path: Path) -> ModuleType:
    module_name = f"factory_seeder_custom_seeds.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
