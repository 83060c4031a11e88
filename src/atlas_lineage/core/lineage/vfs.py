# src/atlas_lineage/core/lineage/vfs.py
"""
Virtual filesystem mínimo do Atlas Lineage.

Este módulo resolve caminhos textuais em `FileHandle`s cientes de esquema,
delegando para providers registrados por esquema.

Providers embutidos:
    - file → filesystem local (caminhos sem esquema e `file://`)
    - ram  → armazenamento em memória (`ram://`), para ambientes sem disco

Decisões arquiteturais:
    - Caminhos relativos são resolvidos contra um diretório base explícito;
      sem base, o diretório de trabalho do processo é usado (apenas `file`)
    - Um diretório base com esquema faz caminhos relativos herdarem o esquema
    - Esquemas desconhecidos são erro (`FileResolutionError`), nunca
      tratados como caminho local

Limites explícitos:
    - Não faz cache de handles entre chamadas
    - Não gerencia conexões remotas nem timeouts
"""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from ..exceptions import FileResolutionError


SCHEME_FILE = "file"
SCHEME_RAM = "ram"

# Pelo menos dois caracteres antes de "://", para não confundir "C:" com esquema.
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]+)://")


@dataclass(frozen=True)
class FileHandle:
    """Caminho resolvido: esquema + caminho absoluto dentro do provider."""
    scheme: str
    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path.replace(os.sep, "/"))


class FileProvider(Protocol):
    scheme: str

    def normalize(self, path: str, base_directory: Optional[str]) -> str:
        ...

    def exists(self, path: str) -> bool:
        ...

    def read_text(self, path: str) -> str:
        ...

    def public_location(self, path: str) -> str:
        ...


class LocalFileProvider:
    scheme = SCHEME_FILE

    def normalize(self, path: str, base_directory: Optional[str]) -> str:
        if base_directory and not os.path.isabs(path):
            path = os.path.join(base_directory, path)
        return os.path.abspath(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def public_location(self, path: str) -> str:
        posix = Path(path).as_posix()
        if not posix.startswith("/"):
            posix = "/" + posix
        return f"{SCHEME_FILE}://{posix}"


class MemoryFileProvider:
    """Provider `ram://`: arquivos de texto mantidos em um dicionário."""

    scheme = SCHEME_RAM

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self._files: Dict[str, str] = {}
        for path, text in (files or {}).items():
            self.write_text(path, text)

    def normalize(self, path: str, base_directory: Optional[str]) -> str:
        if base_directory and not path.startswith("/"):
            path = posixpath.join(base_directory, path)
        normalized = posixpath.normpath("/" + path.lstrip("/"))
        return normalized

    def exists(self, path: str) -> bool:
        return path in self._files

    def read_text(self, path: str) -> str:
        if path not in self._files:
            raise FileNotFoundError(path)
        return self._files[path]

    def write_text(self, path: str, text: str) -> None:
        self._files[self.normalize(path, None)] = text

    def public_location(self, path: str) -> str:
        return f"{SCHEME_RAM}://{path}"


class VirtualFileSystem:
    """
    Resolve caminhos e URIs para `FileHandle`s e lê seu conteúdo.

    O VFS é a única capacidade de acesso a arquivos usada pelos
    resolvedores; cada `AnalysisContext` carrega a sua instância.
    """

    def __init__(self, providers: Optional[Dict[str, FileProvider]] = None):
        self._providers: Dict[str, FileProvider] = {}
        for provider in (providers or {}).values():
            self.register(provider)
        if SCHEME_FILE not in self._providers:
            self.register(LocalFileProvider())
        if SCHEME_RAM not in self._providers:
            self.register(MemoryFileProvider())

    def register(self, provider: FileProvider) -> None:
        self._providers[provider.scheme.lower()] = provider

    def provider(self, scheme: str) -> FileProvider:
        key = (scheme or "").lower()
        if key not in self._providers:
            raise FileResolutionError(
                message=f"Esquema não suportado: {scheme}",
                details={"scheme": scheme, "supported": sorted(self._providers)},
            )
        return self._providers[key]

    @staticmethod
    def starts_with_scheme(path: Optional[str]) -> bool:
        return bool(path) and _SCHEME_RE.match(path) is not None

    @staticmethod
    def split_scheme(path: str) -> Tuple[Optional[str], str]:
        match = _SCHEME_RE.match(path)
        if match is None:
            return None, path
        return match.group(1).lower(), path[match.end():]

    # -----------------------------
    # Resolução
    # -----------------------------
    def resolve(self, path: Optional[str], base_directory: Optional[str] = None) -> FileHandle:
        """
        Resolve `path` (com ou sem esquema) em um handle absoluto.

        Raises:
            FileResolutionError: caminho vazio ou esquema desconhecido.
        """
        if path is None or not str(path).strip():
            raise FileResolutionError(
                message="Caminho vazio não pode ser resolvido",
                details={"path": path},
            )

        scheme, rest = self.split_scheme(path)
        base_rest: Optional[str] = None
        if base_directory:
            base_scheme, base_rest = self.split_scheme(base_directory)
            if scheme is None:
                scheme = base_scheme
            elif (base_scheme or SCHEME_FILE) != scheme:
                base_rest = None

        provider = self.provider(scheme or SCHEME_FILE)
        try:
            normalized = provider.normalize(rest, base_rest)
        except (OSError, ValueError) as e:
            raise FileResolutionError(
                message="Falha ao normalizar caminho",
                details={"path": path, "reason": str(e)},
            ) from e
        return FileHandle(scheme=provider.scheme, path=normalized)

    def handle_from_uri(self, uri: str) -> FileHandle:
        if not self.starts_with_scheme(uri):
            raise FileResolutionError(
                message="URI sem esquema",
                details={"uri": uri},
            )
        return self.resolve(uri)

    # -----------------------------
    # Acesso
    # -----------------------------
    def exists(self, handle: FileHandle) -> bool:
        return self.provider(handle.scheme).exists(handle.path)

    def read_text(self, handle: FileHandle) -> str:
        try:
            return self.provider(handle.scheme).read_text(handle.path)
        except OSError as e:
            raise FileResolutionError(
                message="Arquivo não pôde ser lido",
                details={"location": self.public_location(handle), "reason": str(e)},
            ) from e

    def public_location(self, handle: FileHandle) -> str:
        return self.provider(handle.scheme).public_location(handle.path)

    def canonical_path(self, handle: FileHandle) -> str:
        """Caminho local absoluto para `file`, URI pública para os demais esquemas."""
        if handle.scheme == SCHEME_FILE:
            return handle.path
        return self.public_location(handle)

    def memory(self) -> MemoryFileProvider:
        provider = self.provider(SCHEME_RAM)
        if not isinstance(provider, MemoryFileProvider):
            raise FileResolutionError(
                message="Provider ram:// não é em memória",
                details={"provider": type(provider).__name__},
            )
        return provider
