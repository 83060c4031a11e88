# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Lineage.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML como string)
- contexto de análise controlado (AnalysisContext) ancorado em `tmp_path`
- um repositório em memória vazio
- uma fábrica de pipelines a partir de definições em dict

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Pipelines são construídos pelo parser canônico, não por mocks
    - Colaboradores externos (repositório, graph builder) usam as
      implementações em memória do próprio pacote
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture depende do diretório de trabalho do processo
    - Nenhuma fixture compartilha estado entre testes

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def lineage_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
substitution:
  unresolved: drop
repository:
  include_deleted: true
analyzer:
  follow_sub_pipelines: false
  max_depth: 5
document:
  namespace: etl-prod
"""


@pytest.fixture
def lineage_config_local_yaml() -> str:
    """YAML de overrides locais: política estrita e recursão ligada."""
    return """\
substitution:
  unresolved: fail
analyzer:
  follow_sub_pipelines: true
"""


# =====================================================
# Contexto de análise
# =====================================================

@pytest.fixture
def scope(tmp_path):
    """
    AnalysisContext com VFS padrão e diretório de trabalho em `tmp_path`.

    Caminhos relativos resolvidos neste contexto nunca dependem do cwd
    do processo que executa os testes.
    """
    from atlas_lineage.core.context import AnalysisContext

    return AnalysisContext.create(working_directory=str(tmp_path), run_id="test-run")


@pytest.fixture
def repository():
    from atlas_lineage.core.lineage.repository import InMemoryRepository

    return InMemoryRepository()


@pytest.fixture
def make_pipeline():
    """
    Fábrica de `PipelineMeta` a partir de uma definição em dict.

    Uso:
        parent = make_pipeline({"name": "p", "steps": [...]}, repository=repo)
    """
    from atlas_lineage.core.lineage.definitions import parse_pipeline_definition

    def _make(data, **kwargs):
        return parse_pipeline_definition(data, **kwargs)

    return _make
