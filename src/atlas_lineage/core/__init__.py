# src/atlas_lineage/core/__init__.py
"""
Core do Atlas Lineage.

Componentes principais:
    - config  → resolução de configuração (merge, validação, hashing)
    - context → AnalysisContext, o escopo de cada análise
    - lineage → resolução de caminhos, sub-pipelines e recursos
    - engine  → analyzer de referência

Princípios fundamentais:
    - Entradas são snapshots imutáveis
    - Falhas soft viram eventos; falhas autoritativas viram exceções tipadas
    - Nenhum estado global

Este pacote não importa submódulos: o namespace público fica em
`atlas_lineage`.
"""
