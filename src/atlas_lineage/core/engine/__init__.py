# src/atlas_lineage/core/engine/__init__.py
"""
Analyzer do Atlas Lineage.

Aplica os resolvedores de `core.lineage` sobre cada Step de um pipeline,
registrando falhas no Step que as causou sem interromper a análise.
"""
