# tests/core/lineage/test_normalizer.py
"""
Testes do normalizador canônico de caminhos.

Os testes asseguram que:
- a variante estrita resolve caminhos relativos contra o diretório de
  trabalho do contexto e propaga falhas do VFS
- a variante segura nunca levanta: devolve o caminho original e
  registra um evento WARNING no contexto
"""

import os

import pytest

try:
    from atlas_lineage.core.errors import PATH_NORMALIZATION_FAILED
    from atlas_lineage.core.exceptions import FileResolutionError
    from atlas_lineage.core.lineage.normalizer import normalize_file_path, normalize_file_path_safely
except Exception as e:  # noqa: BLE001
    normalize_file_path = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing normalizer module. Implement:\n"
            "- src/atlas_lineage/core/lineage/normalizer.py (normalize_file_path, normalize_file_path_safely)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_absolute_existing_file_is_unchanged(scope, tmp_path):
    _require_imports()
    f = tmp_path / "This is a text file.txt"
    f.write_text("x", encoding="utf-8")
    assert normalize_file_path(scope, str(f)) == str(f)


def test_ram_path_normalizes_to_public_uri(scope):
    _require_imports()
    assert normalize_file_path(scope, "ram:///tmp/../a/b.txt") == "ram:///a/b.txt"


def test_relative_path_is_made_absolute(scope, tmp_path):
    _require_imports()
    result = normalize_file_path_safely(scope, "temp/foo")
    assert result != "temp/foo"
    assert result.endswith(os.sep + os.path.join("temp", "foo"))
    assert result.startswith(str(tmp_path))


def test_none_passes_through(scope):
    _require_imports()
    assert normalize_file_path(scope, None) is None
    assert normalize_file_path_safely(scope, None) is None


def test_strict_variant_propagates_failure(scope):
    _require_imports()
    with pytest.raises(FileResolutionError):
        normalize_file_path(scope, "s3://bucket/key")


def test_safe_variant_returns_original_on_vfs_failure(scope, monkeypatch):
    """
    Verifica que uma falha do VFS não escapa da variante segura.

    O VFS é substituído por um stub que sempre falha; o resultado deve
    ser exatamente a string de entrada, e a falha deve virar um evento
    WARNING com payload `PATH_NORMALIZATION_FAILED`.
    """
    _require_imports()

    def _boom(path, base_directory=None):
        raise FileResolutionError(message="mockedException", details={"path": path})

    monkeypatch.setattr(scope.vfs, "resolve", _boom)

    assert normalize_file_path_safely(scope, "temp/foo", step_id="Read CSV") == "temp/foo"

    warnings = scope.events_at("WARNING")
    assert len(warnings) == 1
    assert warnings[0]["step_id"] == "Read CSV"
    assert warnings[0]["error"]["type"] == PATH_NORMALIZATION_FAILED
    assert warnings[0]["error"]["details"]["path"] == "temp/foo"
    assert scope.warnings["Read CSV"]


def test_unexpected_errors_are_wrapped(scope, monkeypatch):
    _require_imports()

    def _boom(path, base_directory=None):
        raise RuntimeError("provider offline")

    monkeypatch.setattr(scope.vfs, "resolve", _boom)

    with pytest.raises(FileResolutionError) as exc:
        normalize_file_path(scope, "a/b")
    assert exc.value.details["exc_type"] == "RuntimeError"
    assert normalize_file_path_safely(scope, "a/b") == "a/b"
