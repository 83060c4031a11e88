# src/atlas_lineage/core/lineage/__init__.py
"""
Resolução de recursos de lineage.

Ordem das dependências (folhas primeiro):
    - vfs, types, dictionary, environment
    - model, repository
    - normalizer
    - definitions
    - subpipeline, extractors, document
"""
