"""Tests for the CLI reference generator script."""

import importlib.util
from pathlib import Path
from types import SimpleNamespace

SCRIPT = Path(__file__).parent.parent / "scripts" / "generate_cli_reference.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("generate_cli_reference", SCRIPT)
    assert module_spec and module_spec.loader
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class TestGenerateCliReference:
    """Tests for generate_cli_reference."""

    def test_lists_nested_commands(self) -> None:
        """Should document sub-commands by their full path."""
        doc = _load_script().generate_cli_reference()
        assert "### month add" in doc
        assert "### month show" in doc
        assert "### loan set" in doc
        assert "### import-sheet" in doc
        assert "`--force`" in doc

    def test_documents_arguments_and_options(self) -> None:
        """Should list arguments and option help text."""
        doc = _load_script().generate_cli_reference()
        assert "**Arguments:**" in doc
        assert "Overwrite existing database and config" in doc

    def test_walks_any_command_tree(self) -> None:
        """Should walk groups by their commands mapping, whatever their class."""
        leaf = SimpleNamespace(name="show")
        tree = SimpleNamespace(commands={"month": SimpleNamespace(commands={"show": leaf}), "init": leaf})
        paths = [path for path, _ in _load_script().walk_commands(tree)]
        assert paths == ["init", "month show"]
