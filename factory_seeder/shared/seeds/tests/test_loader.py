"""Tests for loading custom seed files from a directory."""

from factory_seeder.shared.seeds import CustomSeedLoader, SeedRegistry

GOOD_SEED = '''
def register(registry):
    registry.define(
        "hello",
        lambda name: f"Hello {name}",
        lambda s: s.string_param("name", required=True),
    )
'''

SECOND_SEED = '''
def register(registry):
    registry.define("bye", lambda: "bye")
'''


def write(directory, name, source):
    path = directory / name
    path.write_text(source)
    return path


def test_loads_every_seed_file(tmp_path):
    write(tmp_path, "hello.py", GOOD_SEED)
    write(tmp_path, "bye.py", SECOND_SEED)
    write(tmp_path, "_helpers.py", "raise RuntimeError('never imported')")
    write(tmp_path, "notes.txt", "not python")
    registry = SeedRegistry()

    loaded = CustomSeedLoader(registry, tmp_path).load_all()

    assert loaded == 2
    assert sorted(registry.names()) == ["bye", "hello"]
    assert registry.run("hello", name="Ada").result == "Hello Ada"


def test_broken_file_is_skipped(tmp_path):
    write(tmp_path, "a_broken.py", "def register(registry):\n    raise ValueError('bad seed')\n")
    write(tmp_path, "b_syntax.py", "def register(registry)\n")
    write(tmp_path, "c_no_hook.py", "VALUE = 1\n")
    write(tmp_path, "d_good.py", SECOND_SEED)
    registry = SeedRegistry()
    loader = CustomSeedLoader(registry, tmp_path)

    loaded = loader.load_all()

    assert loaded == 1
    assert registry.names() == ["bye"]
    assert set(loader.errors) == {
        str(tmp_path / "a_broken.py"),
        str(tmp_path / "b_syntax.py"),
        str(tmp_path / "c_no_hook.py"),
    }
    assert loader.errors[str(tmp_path / "a_broken.py")] == "ValueError: bad seed"
    assert loader.errors[str(tmp_path / "c_no_hook.py")].startswith("AttributeError")


def test_missing_directory_loads_nothing(tmp_path):
    registry = SeedRegistry()

    assert CustomSeedLoader(registry, tmp_path / "missing").load_all() == 0
    assert len(registry) == 0


def test_reload_picks_up_changes(tmp_path):
    path = write(tmp_path, "hello.py", GOOD_SEED)
    registry = SeedRegistry()
    loader = CustomSeedLoader(registry, tmp_path)
    loader.load_all()
    registry.define("stale", lambda: None)

    path.write_text(SECOND_SEED)
    loaded = loader.reload()

    assert loaded == 1
    assert registry.names() == ["bye"]
