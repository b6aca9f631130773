"""Rendering of the generated PHP loader files."""

from __future__ import annotations

from .assembler import ArtifactAssembler, AssemblyContext, FileInclude

__all__ = ["ArtifactAssembler", "AssemblyContext", "FileInclude"]
