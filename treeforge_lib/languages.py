"""
Per-language capability tables.

Each supported language is one LanguageStrategy instance holding its
tables as data: default extension, the extensions counted as source
modules, management and config filenames, and the small templates that
differ between languages. The set is closed; look variants up with
get_strategy().
"""
import json
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .content_updater import markers_for


class ChildModule(NamedTuple):
    """A child of a directory as seen by an aggregation block."""

    name: str  # base name, extension stripped for files
    filename: str  # resolved on-disk name ("" for directories)
    is_package: bool
    visibility: Optional[str] = None


Aggregator = Callable[[Sequence[ChildModule], str], List[str]]


@dataclass(frozen=True)
class LanguageStrategy:
    name: str
    default_extension: str
    code_extensions: frozenset
    comment: str = "//"
    management_files: frozenset = frozenset()
    # management file written into every declared directory, if any
    auto_management: Optional[str] = None
    auto_management_skip: frozenset = frozenset()
    config_files: Tuple[str, ...] = ()
    supports_external: bool = False
    workspace_manifest: Optional[str] = None
    aggregate: Aggregator = field(default=lambda children, target: [], repr=False)

    @property
    def markers(self) -> Tuple[str, str]:
        return markers_for(self.comment)

    def filename_for(self, name: str) -> str:
        if "." in name or not self.default_extension:
            return name
        return name + self.default_extension

    def is_code_file(self, filename: str) -> bool:
        return any(filename.endswith(ext) for ext in self.code_extensions)

    def is_management_file(self, filename: str) -> bool:
        return filename in self.management_files

    def is_config_file(self, filename: str) -> bool:
        return filename in self.config_files

    def boilerplate(self, filename: str, package: str) -> str:
        """Initial content of a freshly created code file."""
        if self.name == "go" and filename.endswith(".go"):
            if filename == "main.go":
                return "package main\n\nfunc main() {\n}\n"
            return f"package {go_package_name(package)}\n"
        return ""

    def management_template(self, filename: str) -> str:
        """Initial content of a fresh management file, before splicing."""
        if self.name == "rust" and filename == "main.rs":
            start, end = self.markers
            return f'{start}\n{end}\n\nfn main() {{\n    println!("Hello, world!");\n}}\n'
        return ""

    def config_content(self, filename: str, project_name: str) -> str:
        return CONFIG_TEMPLATES[filename](self.name, project_name)


def go_package_name(name: str) -> str:
    if not name:
        return "main"
    return name.replace("-", "_").replace(".", "_").lower()


def strip_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[0] if "." in filename else filename


# ---- aggregation blocks ----

RUST_VISIBILITY = {
    "yes": "pub ",
    "no": "",
    "crate": "pub(crate) ",
    "super": "pub(super) ",
}


def _rust_aggregate(children: Sequence[ChildModule], target: str) -> List[str]:
    default = "" if target == "main.rs" else "pub "
    lines = []
    for child in children:
        prefix = RUST_VISIBILITY.get(child.visibility, default)
        lines.append(f"{prefix}mod {child.name};")
    return lines


def _python_aggregate(children: Sequence[ChildModule], target: str) -> List[str]:
    return [f"from .{child.name} import *" for child in children]


def _typescript_aggregate(children: Sequence[ChildModule], target: str) -> List[str]:
    return [f"export * from './{child.name}';" for child in children]


def _javascript_aggregate(children: Sequence[ChildModule], target: str) -> List[str]:
    lines = []
    for child in children:
        if child.is_package:
            lines.append(f"export * from './{child.name}/index.js';")
        else:
            lines.append(f"export * from './{child.filename}';")
    return lines


# ---- config files (created once) ----

def _cargo_toml(lang: str, project_name: str) -> str:
    return (
        "[package]\n"
        f'name = "{project_name}"\n'
        'version = "0.1.0"\n'
        'edition = "2021"\n'
        "\n"
        "[dependencies]\n"
    )


def _go_mod(lang: str, project_name: str) -> str:
    return f"module {project_name}\n\ngo 1.21\n"


def _requirements_txt(lang: str, project_name: str) -> str:
    return "# Add your Python dependencies here\n"


def _package_json(lang: str, project_name: str) -> str:
    if lang == "typescript":
        doc: Dict[str, object] = {
            "name": project_name,
            "version": "1.0.0",
            "main": "dist/index.js",
            "scripts": {"build": "tsc", "start": "node dist/index.js"},
            "devDependencies": {"typescript": "^5.0.0", "@types/node": "^18.0.0"},
            "license": "ISC",
        }
    else:
        doc = {
            "name": project_name,
            "version": "1.0.0",
            "main": "index.js",
            "type": "module",
            "scripts": {"start": "node index.js"},
            "license": "ISC",
        }
    return json.dumps(doc, indent=2) + "\n"


def _tsconfig_json(lang: str, project_name: str) -> str:
    doc = {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "outDir": "./dist",
            "rootDir": "./src",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
        },
        "include": ["src/**/*"],
        "exclude": ["node_modules", "dist"],
    }
    return json.dumps(doc, indent=2) + "\n"


CONFIG_TEMPLATES: Dict[str, Callable[[str, str], str]] = {
    "Cargo.toml": _cargo_toml,
    "go.mod": _go_mod,
    "requirements.txt": _requirements_txt,
    "package.json": _package_json,
    "tsconfig.json": _tsconfig_json,
}


# ---- workspace manifest ----

WORKSPACE_COMMENT = "#"


def workspace_template() -> str:
    start, end = markers_for(WORKSPACE_COMMENT)
    return f'[workspace]\nresolver = "2"\nmembers = [\n{start}\n{end}\n]\n'


def workspace_members(names: Sequence[str]) -> List[str]:
    return [f'    "{name}",' for name in names]


STRATEGIES: Dict[str, LanguageStrategy] = {
    "rust": LanguageStrategy(
        name="rust",
        default_extension=".rs",
        code_extensions=frozenset({".rs"}),
        management_files=frozenset({"mod.rs", "main.rs", "lib.rs"}),
        auto_management="mod.rs",
        auto_management_skip=frozenset({"src"}),
        config_files=("Cargo.toml",),
        workspace_manifest="Cargo.toml",
        aggregate=_rust_aggregate,
    ),
    "go": LanguageStrategy(
        name="go",
        default_extension=".go",
        code_extensions=frozenset({".go"}),
        config_files=("go.mod",),
    ),
    "python": LanguageStrategy(
        name="python",
        default_extension=".py",
        code_extensions=frozenset({".py"}),
        comment="#",
        management_files=frozenset({"__init__.py"}),
        auto_management="__init__.py",
        config_files=("requirements.txt",),
        aggregate=_python_aggregate,
    ),
    "typescript": LanguageStrategy(
        name="typescript",
        default_extension=".ts",
        code_extensions=frozenset({".ts", ".tsx"}),
        management_files=frozenset({"index.ts"}),
        config_files=("package.json", "tsconfig.json"),
        aggregate=_typescript_aggregate,
    ),
    "javascript": LanguageStrategy(
        name="javascript",
        default_extension=".js",
        code_extensions=frozenset({".js", ".jsx", ".mjs"}),
        management_files=frozenset({"index.js"}),
        config_files=("package.json",),
        aggregate=_javascript_aggregate,
    ),
    "any": LanguageStrategy(
        name="any",
        default_extension="",
        code_extensions=frozenset(),
        supports_external=True,
    ),
}


def get_strategy(lang: str) -> LanguageStrategy:
    try:
        return STRATEGIES[lang]
    except KeyError:
        raise ValueError(f"Unsupported language: {lang!r}") from None
