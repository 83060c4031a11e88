# src/atlas_lineage/core/lineage/dictionary.py
"""
Vocabulário canônico de lineage.

Constantes textuais estáveis compartilhadas entre o Document Builder,
os extratores e o graph builder. Os valores são persistidos por
consumidores externos e não devem mudar entre versões.
"""

# Contexto de execução
CONTEXT_RUNTIME = "runtime"

# Propriedades de documento
PROPERTY_NAME = "name"
PROPERTY_PATH = "path"
PROPERTY_NAMESPACE = "namespace"

# Tipos de recurso
RESOURCE_FILE = "file"

# Tipos de pipeline
KIND_TRANSFORMATION = "transformation"
KIND_JOB = "job"

# Extensões padrão por tipo de pipeline
DEFAULT_EXTENSIONS = {
    KIND_TRANSFORMATION: "ktr",
    KIND_JOB: "kjb",
}
