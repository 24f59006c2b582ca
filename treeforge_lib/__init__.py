"""
treeforge: generate project directory layouts from a declarative specification
without ever destroying code a developer has written.

Public API:
- load_spec(path, default_name=None) -> SpecTree
- validate(data, default_name=None) -> SpecTree
- generate(spec, working_root, options=None) -> GenerationReport
- scan_directory(input_dir, lang, name=None) -> list[dict]
- write_spec(document, output_path) -> None

Files are protected in three tiers:
- code files are created once and never rewritten
- management files (mod.rs, __init__.py, index.ts, ...) have a marker-delimited
  region that is refreshed on every run; text outside the markers is kept
- config files (Cargo.toml, go.mod, package.json, ...) are created once
"""
from .errors import ExternalFetchWarning, GenerationError, MarkerCorruptionError, TreeforgeError, ValidationError
from .generator import GenerationOptions, Mode, generate
from .models import GenerationReport, Outcome, Status
from .scanner import scan_directory, write_spec
from .validator import load_spec, validate

__all__ = [
    "ExternalFetchWarning",
    "GenerationError",
    "GenerationOptions",
    "GenerationReport",
    "MarkerCorruptionError",
    "Mode",
    "Outcome",
    "Status",
    "TreeforgeError",
    "ValidationError",
    "generate",
    "load_spec",
    "scan_directory",
    "validate",
    "write_spec",
]
