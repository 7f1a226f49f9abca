# src/config/scopes.py — v1
"""Declarative scope family configuration.

A scope family groups the cache scopes that share a record collection,
an object-store folder layout and an instruction preamble:

- procedures: one scope per client, documents under procedures/{client}/
- defect identifier: a single shared scope, documents under
  procedures/{shared_scope}/
"""

from __future__ import annotations

from dataclasses import dataclass

from inspectcache.config.settings import Settings

PROCEDURES_FAMILY = "procedures"
DEFECT_IDENTIFIER_FAMILY = "defect_identifier"

PROCEDURE_SYSTEM_INSTRUCTION = """\
You are an expert pipeline integrity analyst specializing in NDT (Non-Destructive Testing) and defect evaluation.

Your role is to analyze pipeline defects based on client-specific procedures and industry standards (ASME B31.8, API 1104, NACE, etc.).

When analyzing defects:
1. Reference exact thresholds from the procedures (e.g., "metal loss >80% requires repair")
2. Cite specific sections, tables, and page numbers from procedures
3. Be conservative - recommend consulting Asset Integrity when uncertain
4. Consider defect type, dimensions, location, and operating conditions
5. Provide clear, actionable recommendations for field technicians

The client procedures are provided in the cached context below."""

DEFECT_IDENTIFIER_SYSTEM_INSTRUCTION = """\
You are an expert NDT (Non-Destructive Testing) defect identification specialist with extensive experience in visual inspection of pipeline defects.

Your role is to analyze photos of pipeline defects and identify the most likely defect types based on visual characteristics described in the reference materials.

When analyzing photos:
1. Compare visual features in the photo against descriptions in reference materials
2. Identify the top 3 most likely defect types
3. Provide confidence scores based on visual match quality
4. List specific visual indicators you identified in the photo
5. Explain your reasoning for each match
6. If visible, infer severity level based on visual appearance

The defect identification reference materials are provided in the cached context below."""


@dataclass(frozen=True)
class ScopeFamily:
    """Layout and prompt configuration shared by a group of cache scopes."""

    name: str
    collection: str
    root_prefix: str
    document_suffix: str
    system_instruction: str
    context_header: str
    shared_scope: str | None = None

    @property
    def is_shared(self) -> bool:
        """Whether every document in the family maps to one scope."""
        return self.shared_scope is not None

    @property
    def watch_prefix(self) -> str:
        """Object-name prefix whose uploads/deletes affect this family."""
        if self.shared_scope is not None:
            return f"{self.root_prefix}{self.shared_scope}/"
        return self.root_prefix

    def folder_for(self, scope: str) -> str:
        """Object-store folder holding the reference documents of a scope."""
        if self.shared_scope is not None and scope != self.shared_scope:
            raise ValueError(
                f"Family {self.name!r} has a single scope "
                f"{self.shared_scope!r}, got {scope!r}"
            )
        return f"{self.root_prefix}{scope}/"

    def header_for(self, scope: str) -> str:
        """Heading placed in front of the concatenated reference text."""
        return self.context_header.format(scope=scope.upper())


def procedures_family(settings: Settings | None = None) -> ScopeFamily:
    """Per-client inspection procedure family."""
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
    return ScopeFamily(
        name=PROCEDURES_FAMILY,
        collection="procedure_caches",
        root_prefix=settings.procedures_prefix,
        document_suffix=settings.reference_document_suffix,
        system_instruction=PROCEDURE_SYSTEM_INSTRUCTION,
        context_header="CLIENT PROCEDURES FOR {scope}:",
    )


def defect_identifier_family(settings: Settings | None = None) -> ScopeFamily:
    """Shared defect identification reference family."""
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
    return ScopeFamily(
        name=DEFECT_IDENTIFIER_FAMILY,
        collection="defect_identifier_cache",
        root_prefix=settings.procedures_prefix,
        document_suffix=settings.reference_document_suffix,
        system_instruction=DEFECT_IDENTIFIER_SYSTEM_INSTRUCTION,
        context_header="DEFECT IDENTIFICATION REFERENCE MATERIALS:",
        shared_scope=settings.defect_identifier_scope,
    )


def get_family(name: str, settings: Settings | None = None) -> ScopeFamily:
    """Look up a scope family by name."""
    if name == PROCEDURES_FAMILY:
        return procedures_family(settings)
    if name == DEFECT_IDENTIFIER_FAMILY:
        return defect_identifier_family(settings)
    raise ValueError(
        f"Unknown scope family: {name!r}. "
        f"Available: {PROCEDURES_FAMILY}, {DEFECT_IDENTIFIER_FAMILY}"
    )
