"""Built-in project-type rules.

Order matters: when two rules claim the same target directory in the
same project (Rust and Maven both use ``target/``), the earlier rule
keeps it.
"""

from __future__ import annotations

from diskclean.models.rule import Rule

BUILTIN_RULES: tuple[Rule, ...] = (
    # ── Systems ──
    Rule(
        name="rust",
        icon="🦀",
        markers=("Cargo.toml",),
        targets=("target",),
        tool="cargo clean",
        tool_bin="cargo",
    ),
    Rule(
        name="zig",
        icon="⚡",
        markers=("build.zig",),
        targets=("zig-cache", "zig-out"),
    ),
    Rule(
        name="swift",
        icon="🐦",
        markers=("Package.swift",),
        targets=(".build",),
        tool="swift package clean",
        tool_bin="swift",
    ),
    # ── JVM ──
    Rule(
        name="gradle",
        icon="🐘",
        markers=("build.gradle", "build.gradle.kts"),
        targets=("build", ".gradle"),
        tool="gradle clean",
        tool_bin="gradle",
    ),
    Rule(
        name="maven",
        icon="🪶",
        markers=("pom.xml",),
        targets=("target",),
        tool="mvn clean",
        tool_bin="mvn",
    ),
    # ── Web / Frontend ──
    Rule(
        name="node",
        icon="📦",
        markers=("package.json",),
        targets=("node_modules",),
    ),
    Rule(
        name="composer",
        icon="🎵",
        markers=("composer.json",),
        targets=("vendor",),
    ),
    # ── Mobile ──
    Rule(
        name="flutter",
        icon="🦋",
        markers=("pubspec.yaml",),
        targets=("build", ".dart_tool"),
        tool="flutter clean",
        tool_bin="flutter",
    ),
    # ── Functional ──
    Rule(
        name="haskell",
        icon="λ",
        markers=("stack.yaml",),
        targets=(".stack-work",),
        tool="stack clean",
        tool_bin="stack",
    ),
    Rule(
        name="elixir",
        icon="💧",
        markers=("mix.exs",),
        targets=("_build", "deps"),
        tool="mix clean",
        tool_bin="mix",
    ),
    # ── Nim ──
    Rule(
        name="nim",
        icon="👑",
        markers=("*.nimble",),
        targets=("nimcache",),
    ),
    # ── Python ──
    Rule(
        name="python",
        icon="🐍",
        markers=("pyproject.toml", "setup.py"),
        targets=(".venv", "venv", "dist", ".tox", "__pycache__", ".mypy_cache", ".pytest_cache"),
    ),
)

# Display-only rule for worktree results; never scanned by marker.
WORKTREE_RULE = Rule(
    name="worktree",
    icon="🌳",
    markers=(),
    tool="git worktree remove",
    tool_bin="git",
)
