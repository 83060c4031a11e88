# tests/core/engine/test_analyzer.py
"""
Testes do analyzer de referência (PipelineAnalyzer).

Os testes asseguram que:
- cada Step produz um `StepAnalysis` com status explícito
- um sub-pipeline não resolvido é registrado no Step que o referencia,
  sem interromper a análise dos demais Steps
- falhas soft deixam o Step `partial`
- o documento do pipeline e as arestas descobertas chegam ao graph builder
- a recursão em sub-pipelines respeita configuração, profundidade e ciclos
"""

import json

import pytest

try:
    from atlas_lineage.core.context import AnalysisContext
    from atlas_lineage.core.engine.analyzer import PipelineAnalyzer, StepAnalysisStatus
    from atlas_lineage.core.errors import RESOURCE_EXTRACTION_FAILED, SUB_PIPELINE_UNRESOLVED
    from atlas_lineage.core.lineage.definitions import load_pipeline_definition
    from atlas_lineage.core.lineage.document import InMemoryGraphBuilder
except Exception as e:  # noqa: BLE001
    PipelineAnalyzer = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


PARENT_YAML = """\
name: parent
steps:
  - name: Read
    reads: [/data/in.csv]
  - name: Write
    writes: [/data/out.csv, /data/out.csv]
  - name: Call child
    sub_pipeline: {method: filename, file_name: child.yaml}
  - name: Call missing
    sub_pipeline: {method: filename, file_name: /nowhere/missing.ktr}
"""

CHILD_YAML = """\
name: child
steps:
  - name: Read child input
    reads: [/data/child.csv]
"""

LOOP_YAML = """\
name: loop
steps:
  - name: Call self
    sub_pipeline: {method: filename, file_name: loop.yaml}
"""


def _require_imports():
    """
    Garante que o analyzer e suas dependências estejam disponíveis.

    Falha imediatamente quando `PipelineAnalyzer` ou o graph builder em
    memória não podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing analyzer. Implement:\n"
            "- src/atlas_lineage/core/engine/analyzer.py (PipelineAnalyzer, StepAnalysisStatus)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _ctx(**config):
    ctx = AnalysisContext.create(config=config, run_id="analyzer-test")
    memory = ctx.vfs.memory()
    memory.write_text("/etl/parent.yaml", PARENT_YAML)
    memory.write_text("/etl/child.yaml", CHILD_YAML)
    memory.write_text("/etl/loop.yaml", LOOP_YAML)
    return ctx


def test_unresolved_sub_pipeline_is_recorded_against_step():
    """
    Verifica que a falha de um sub-pipeline não aborta a análise.

    Invariantes:
        - O Step com referência quebrada termina `failed` com payload
          `SUB_PIPELINE_UNRESOLVED`
        - Os demais Steps continuam sendo analisados
        - O caminho declarado ainda identifica a aresta
    """
    _require_imports()
    ctx = _ctx()
    pipeline = load_pipeline_definition(ctx, "ram:///etl/parent.yaml")

    result = PipelineAnalyzer(ctx).analyze(pipeline)

    assert list(result.steps) == ["Read", "Write", "Call child", "Call missing"]
    assert result.failed_steps == ["Call missing"]

    missing = result.steps["Call missing"]
    assert missing.status is StepAnalysisStatus.FAILED
    assert missing.error["type"] == SUB_PIPELINE_UNRESOLVED
    assert missing.error["details"]["step"] == "Call missing"
    assert len(missing.error["details"]["attempts"]) == 3
    assert missing.sub_pipeline_path == "/nowhere/missing.ktr"

    assert result.steps["Read"].status is StepAnalysisStatus.RESOLVED
    assert len(result.steps["Write"].resources) == 1
    assert result.steps["Call child"].sub_pipeline_path == "ram:///etl/child.yaml"
    assert result.steps["Call child"].sub_pipeline is None
    assert {r.location for r in result.resources} == {"/data/in.csv", "/data/out.csv"}

    errors = ctx.events_at("ERROR")
    assert [e["step_id"] for e in errors] == ["Call missing"]
    assert result.document is None


def test_document_and_links_reach_builder():
    _require_imports()
    ctx = _ctx(document={"namespace": "etl-prod"})
    builder = InMemoryGraphBuilder()
    pipeline = load_pipeline_definition(ctx, "ram:///etl/parent.yaml")

    result = PipelineAnalyzer(ctx, builder).analyze(pipeline)

    assert builder.documents == [result.document]
    assert result.document.string_id == "ram:///etl/parent.yaml"
    assert result.document.get_property("namespace") == "etl-prod"

    source = "ram:///etl/parent.yaml"
    assert (source, "reads", "/data/in.csv") in builder.links
    assert (source, "writes", "/data/out.csv") in builder.links
    assert (source, "executes", "ram:///etl/child.yaml") in builder.links


def test_reader_writer_step_links_by_direction(make_pipeline, scope):
    _require_imports()
    builder = InMemoryGraphBuilder()
    pipeline = make_pipeline(
        {"name": "p", "steps": [{"name": "copy", "reads": ["/in.csv"], "writes": ["/out.csv"]}]},
        filename="/etl/p.ktr",
    )

    result = PipelineAnalyzer(scope, builder).analyze(pipeline)

    (read,) = [r for r in result.resources if r.location == "/in.csv"]
    assert read.is_input
    assert ("/etl/p.ktr", "reads", "/in.csv") in builder.links
    assert ("/etl/p.ktr", "writes", "/out.csv") in builder.links
    assert ("/etl/p.ktr", "writes", "/in.csv") not in builder.links


def test_follow_sub_pipelines_recursively():
    _require_imports()
    ctx = _ctx(analyzer={"follow_sub_pipelines": True})
    pipeline = load_pipeline_definition(ctx, "ram:///etl/parent.yaml")

    result = PipelineAnalyzer(ctx).analyze(pipeline)

    child = result.steps["Call child"].sub_pipeline
    assert child is not None
    assert child.depth == 1
    assert child.pipeline_name == "child"
    (resource,) = child.steps["Read child input"].resources
    assert resource.location == "/data/child.csv"
    assert resource.pipeline_name == "child"


def test_max_depth_stops_recursion():
    _require_imports()
    ctx = _ctx(analyzer={"follow_sub_pipelines": True, "max_depth": 0})
    pipeline = load_pipeline_definition(ctx, "ram:///etl/parent.yaml")

    step = PipelineAnalyzer(ctx).analyze(pipeline).steps["Call child"]

    assert step.sub_pipeline is None
    assert step.status is StepAnalysisStatus.PARTIAL
    assert step.warnings


def test_cycle_is_detected():
    _require_imports()
    ctx = _ctx(analyzer={"follow_sub_pipelines": True})
    pipeline = load_pipeline_definition(ctx, "ram:///etl/loop.yaml")

    step = PipelineAnalyzer(ctx).analyze(pipeline).steps["Call self"]

    assert step.sub_pipeline is None
    assert step.status is StepAnalysisStatus.PARTIAL


def test_soft_failure_marks_step_partial(make_pipeline, scope):
    _require_imports()
    pipeline = make_pipeline({"name": "p", "steps": [{"name": "cloud", "reads": ["s3://bucket/a.csv"]}]})

    step = PipelineAnalyzer(scope).analyze(pipeline).steps["cloud"]

    assert step.status is StepAnalysisStatus.PARTIAL
    assert {r.location for r in step.resources} == {"s3://bucket/a.csv"}


def test_unexpected_exception_becomes_payload(make_pipeline, scope, monkeypatch):
    _require_imports()
    import atlas_lineage.core.engine.analyzer as analyzer_module

    def _boom(scope, step, declared_paths):
        raise RuntimeError("boom")

    monkeypatch.setattr(analyzer_module, "extract_static_resources", _boom)
    pipeline = make_pipeline({"name": "p", "steps": [{"name": "a", "reads": ["/x"]}, {"name": "b"}]})

    result = PipelineAnalyzer(scope).analyze(pipeline)

    assert result.steps["a"].error["type"] == RESOURCE_EXTRACTION_FAILED
    assert result.steps["a"].error["details"]["exc_type"] == "RuntimeError"
    assert result.failed_steps == ["a", "b"]


def test_result_is_json_serializable():
    _require_imports()
    ctx = _ctx(analyzer={"follow_sub_pipelines": True})
    pipeline = load_pipeline_definition(ctx, "ram:///etl/parent.yaml")
    payload = PipelineAnalyzer(ctx).analyze(pipeline).to_dict()
    assert json.loads(json.dumps(payload))["steps"]["Call missing"]["status"] == "failed"
