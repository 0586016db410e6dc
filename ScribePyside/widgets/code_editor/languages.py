"""Language rule registry shared by the folding, bracket, indent and highlight analyzers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)

FOLD_STYLE_BRACE = "brace"
FOLD_STYLE_INDENTATION = "indentation"
FOLD_STYLE_KEYWORD = "keyword"
FOLD_STYLES = (FOLD_STYLE_BRACE, FOLD_STYLE_INDENTATION, FOLD_STYLE_KEYWORD)

PLAINTEXT_ID = "plaintext"

# Exactly seven pairs; the bracket matcher never learns new ones per language.
BRACKET_PAIRS: Mapping[str, str] = MappingProxyType(
    {
        "(": ")",
        "[": "]",
        "{": "}",
        "<": ">",
        '"': '"',
        "'": "'",
        "`": "`",
    }
)


@dataclass(frozen=True, slots=True)
class IndentRuleSet:
    indent_size: int = 4
    use_spaces: bool = True
    increase_after: tuple[str, ...] = ()
    decrease_before: tuple[str, ...] = ()
    align_with_opening: bool = False
    continuation_indent: int = 4


@dataclass(frozen=True, slots=True)
class HighlightRule:
    role: str
    pattern: str
    flags: int = 0


@dataclass(frozen=True, slots=True)
class FoldHeaderRule:
    """A line pattern that opens a foldable region.

    ``finder`` picks the block-end strategy for this header. ``terminator`` is
    only used by the keyword finder and may reference the ``name`` group of
    ``pattern`` as ``{name}``. An empty ``label`` means the matched header text
    is shown.
    """

    kind: str
    pattern: str
    finder: str = FOLD_STYLE_BRACE
    terminator: str = ""
    label: str = ""


@dataclass(frozen=True, slots=True)
class BlockCommentRule:
    start: str
    end: str
    label: str = "comment"


@dataclass(frozen=True, slots=True)
class Language:
    id: str
    display_name: str
    abbreviation: str = ""
    extensions: frozenset[str] = frozenset()
    keywords: tuple[str, ...] = ()
    case_insensitive: bool = False
    highlight_rules: tuple[HighlightRule, ...] = ()
    bracket_pairs: Mapping[str, str] = field(default_factory=lambda: BRACKET_PAIRS, compare=False)
    indent_rules: IndentRuleSet = IndentRuleSet()
    fold_style: str = FOLD_STYLE_BRACE
    fold_headers: tuple[FoldHeaderRule, ...] = ()
    import_prefixes: tuple[str, ...] = ()
    block_comments: tuple[BlockCommentRule, ...] = ()
    line_comment: str = ""
    fold_brace_blocks: bool = False

    @property
    def pattern_flags(self) -> int:
        return re.IGNORECASE if self.case_insensitive else 0

    def is_plain(self) -> bool:
        return self.id == PLAINTEXT_ID


@lru_cache(maxsize=None)
def compile_pattern(source: str, flags: int = 0) -> re.Pattern | None:
    """Compile ``source`` once; a broken pattern is logged and yields ``None``."""
    try:
        return re.compile(source, flags)
    except (re.error, TypeError) as exc:
        logger.warning("Ignoring invalid pattern %r: %s", source, exc)
        return None


@lru_cache(maxsize=None)
def compiled_patterns(sources: tuple[str, ...], flags: int = 0) -> tuple[re.Pattern, ...]:
    out: list[re.Pattern] = []
    for source in sources:
        pattern = compile_pattern(source, flags)
        if pattern is not None:
            out.append(pattern)
    return tuple(out)


def any_pattern_matches(sources: tuple[str, ...], text: str, flags: int = 0) -> bool:
    return any(p.search(text) for p in compiled_patterns(tuple(sources), flags))


def _keyword_rule(keywords: tuple[str, ...], flags: int = 0) -> HighlightRule:
    return HighlightRule("keyword", r"\b(" + "|".join(keywords) + r")\b", flags)


_NUMBER = r"\b\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\b"
_DQ_STRING = r'"(?:[^"\\]|\\.)*"'
_SQ_STRING = r"'(?:[^'\\]|\\.)*'"
_C_BLOCK_COMMENT = BlockCommentRule(r"/\*", r"\*/")

_SWIFT_MODIFIERS = (
    r"(?:(?:private|public|internal|fileprivate|open|static|class|final|override"
    r"|mutating|nonmutating|convenience|required|indirect|@\w+)\s+)*"
)

_SWIFT_KEYWORDS = (
    "func", "var", "let", "if", "else", "for", "while", "repeat", "import", "struct", "class",
    "enum", "protocol", "extension", "return", "private", "public", "internal", "fileprivate",
    "open", "static", "final", "override", "init", "deinit", "mutating", "associatedtype",
    "where", "throws", "rethrows", "try", "catch", "guard", "defer", "switch", "case",
    "default", "break", "continue", "fallthrough", "is", "as", "in", "inout", "indirect",
    "lazy", "weak", "unowned", "some", "any", "Self", "self", "true", "false", "nil",
)

SWIFT = Language(
    id="swift",
    display_name="Swift",
    abbreviation="SWIFT",
    extensions=frozenset({".swift"}),
    keywords=_SWIFT_KEYWORDS,
    highlight_rules=(
        _keyword_rule(_SWIFT_KEYWORDS),
        HighlightRule("string", _DQ_STRING),
        HighlightRule("comment", r"//.*?$", re.MULTILINE),
        HighlightRule("comment", r"/\*.*?\*/", re.DOTALL),
        HighlightRule("number", _NUMBER),
        HighlightRule("annotation", r"@\w+"),
        HighlightRule("type", r"\b[A-Z][a-zA-Z0-9]*\b"),
    ),
    indent_rules=IndentRuleSet(
        indent_size=4,
        use_spaces=True,
        increase_after=(r"\{\s*$", r":\s*$", r"\(\s*$"),
        decrease_before=(r"^\s*\}", r"^\s*\)", r"^\s*case\s+", r"^\s*default\s*:"),
        align_with_opening=True,
        continuation_indent=4,
    ),
    fold_style=FOLD_STYLE_BRACE,
    fold_headers=(
        FoldHeaderRule("function", rf"^\s*{_SWIFT_MODIFIERS}func\s+\w+"),
        FoldHeaderRule("class", rf"^\s*{_SWIFT_MODIFIERS}class\s+\w+"),
        FoldHeaderRule("struct", rf"^\s*{_SWIFT_MODIFIERS}struct\s+\w+"),
        FoldHeaderRule("enum", rf"^\s*{_SWIFT_MODIFIERS}enum\s+\w+"),
        FoldHeaderRule("protocol", rf"^\s*{_SWIFT_MODIFIERS}protocol\s+\w+"),
        FoldHeaderRule("extension", rf"^\s*{_SWIFT_MODIFIERS}extension\s+\w+"),
        FoldHeaderRule("conditional", r"^\s*if\s+", label="if"),
        FoldHeaderRule("loop", r"^\s*for\s+", label="for"),
        FoldHeaderRule("loop", r"^\s*while\s+", label="while"),
        FoldHeaderRule("switch", r"^\s*switch\s+", label="switch"),
    ),
    import_prefixes=("import ",),
    block_comments=(_C_BLOCK_COMMENT,),
    line_comment="//",
    fold_brace_blocks=True,
)

_PYTHON_KEYWORDS = (
    "def", "class", "if", "else", "elif", "for", "while", "import", "from", "as", "in",
    "return", "try", "except", "finally", "with", "lambda", "self", "True", "False", "None",
    "and", "or", "not", "is", "assert", "del", "global", "nonlocal", "raise", "pass", "break",
    "continue", "yield", "async", "await",
)

PYTHON = Language(
    id="python",
    display_name="Python",
    abbreviation="PY",
    extensions=frozenset({".py", ".pyw", ".pyi"}),
    keywords=_PYTHON_KEYWORDS,
    highlight_rules=(
        _keyword_rule(_PYTHON_KEYWORDS),
        HighlightRule("string", r'""".*?"""', re.DOTALL),
        HighlightRule("string", r"'''.*?'''", re.DOTALL),
        HighlightRule("string", _DQ_STRING),
        HighlightRule("string", _SQ_STRING),
        HighlightRule("comment", r"#.*?$", re.MULTILINE),
        HighlightRule("number", _NUMBER),
        HighlightRule("annotation", r"@\w+"),
        HighlightRule("type", r"class\s+(\w+)"),
        HighlightRule("function", r"def\s+(\w+)"),
    ),
    indent_rules=IndentRuleSet(
        indent_size=4,
        use_spaces=True,
        increase_after=(r":\s*$", r"\(\s*$", r"\[\s*$"),
        decrease_before=(
            r"^\s*\)",
            r"^\s*\]",
            r"^\s*except\b",
            r"^\s*finally\s*:",
            r"^\s*elif\s+",
            r"^\s*else\s*:",
        ),
        align_with_opening=True,
        continuation_indent=4,
    ),
    fold_style=FOLD_STYLE_INDENTATION,
    fold_headers=(
        FoldHeaderRule("function", r"^\s*(?:async\s+)?def\s+\w+", FOLD_STYLE_INDENTATION),
        FoldHeaderRule("class", r"^\s*class\s+\w+", FOLD_STYLE_INDENTATION),
        FoldHeaderRule("conditional", r"^\s*if\b", FOLD_STYLE_INDENTATION, label="if"),
        FoldHeaderRule("conditional", r"^\s*elif\b", FOLD_STYLE_INDENTATION, label="elif"),
        FoldHeaderRule("conditional", r"^\s*else\s*:", FOLD_STYLE_INDENTATION, label="else"),
        FoldHeaderRule("loop", r"^\s*(?:async\s+)?for\b", FOLD_STYLE_INDENTATION, label="for"),
        FoldHeaderRule("loop", r"^\s*while\b", FOLD_STYLE_INDENTATION, label="while"),
        FoldHeaderRule("block", r"^\s*(?:async\s+)?with\b", FOLD_STYLE_INDENTATION, label="with"),
        FoldHeaderRule("block", r"^\s*try\s*:", FOLD_STYLE_INDENTATION, label="try"),
        FoldHeaderRule("block", r"^\s*except\b", FOLD_STYLE_INDENTATION, label="except"),
        FoldHeaderRule("block", r"^\s*finally\s*:", FOLD_STYLE_INDENTATION, label="finally"),
        FoldHeaderRule("switch", r"^\s*match\b.*:\s*$", FOLD_STYLE_INDENTATION, label="match"),
    ),
    import_prefixes=("import ", "from "),
    block_comments=(
        BlockCommentRule(r'^\s*[rRuUbB]{0,2}"""', r'"""', "docstring"),
        BlockCommentRule(r"^\s*[rRuUbB]{0,2}'''", r"'''", "docstring"),
    ),
    line_comment="#",
)

_JAVASCRIPT_KEYWORDS = (
    "function", "var", "let", "const", "if", "else", "for", "while", "do", "return", "class",
    "extends", "import", "export", "from", "default", "async", "await", "try", "catch",
    "finally", "throw", "new", "this", "super", "static", "get", "set", "typeof",
    "instanceof", "in", "of", "delete", "void", "true", "false", "null", "undefined",
    "break", "continue", "switch", "case", "debugger", "with", "yield",
)

JAVASCRIPT = Language(
    id="javascript",
    display_name="JavaScript",
    abbreviation="JS",
    extensions=frozenset({".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"}),
    keywords=_JAVASCRIPT_KEYWORDS,
    highlight_rules=(
        _keyword_rule(_JAVASCRIPT_KEYWORDS),
        HighlightRule("string", r"`(?:[^`\\]|\\.)*`"),
        HighlightRule("string", _DQ_STRING),
        HighlightRule("string", _SQ_STRING),
        HighlightRule("comment", r"//.*?$", re.MULTILINE),
        HighlightRule("comment", r"/\*.*?\*/", re.DOTALL),
        HighlightRule("number", _NUMBER),
        HighlightRule("regex", r"(?<![*/])/(?![*/])(?:[^/\\\n]|\\.)+/[gimsuy]*"),
        HighlightRule("function", r"function\s+(\w+)"),
    ),
    indent_rules=IndentRuleSet(
        indent_size=2,
        use_spaces=True,
        increase_after=(r"\{\s*$", r"\(\s*$", r"\[\s*$"),
        decrease_before=(r"^\s*\}", r"^\s*\)", r"^\s*\]"),
        align_with_opening=True,
        continuation_indent=2,
    ),
    fold_style=FOLD_STYLE_BRACE,
    fold_headers=(
        FoldHeaderRule(
            "function",
            r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*\w+",
        ),
        FoldHeaderRule("class", r"^\s*(?:export\s+)?(?:default\s+)?class\s+\w+"),
    ),
    import_prefixes=("import ",),
    block_comments=(_C_BLOCK_COMMENT,),
    line_comment="//",
    fold_brace_blocks=True,
)

_BASH_KEYWORDS = (
    "if", "then", "fi", "for", "while", "do", "done", "case", "esac", "function", "echo",
    "exit", "return", "export", "source", r"\.", "set", "unset", "declare", "local",
    "readonly", "alias", "unalias", "history", "jobs", "kill", "ps", "cd", "pwd", "ls", "cat",
    "grep", "sed", "awk", "sort", "uniq", "wc", "head", "tail", "find", "xargs", "chmod",
    "chown", "mkdir", "rmdir", "rm", "cp", "mv", "ln", "touch", "date", "sleep", "read",
    "test", r"\[", r"\]",
)

BASH = Language(
    id="bash",
    display_name="Bash",
    abbreviation="SH",
    extensions=frozenset({".sh", ".bash", ".zsh"}),
    keywords=_BASH_KEYWORDS,
    highlight_rules=(
        _keyword_rule(_BASH_KEYWORDS),
        HighlightRule("string", _DQ_STRING),
        HighlightRule("string", r"'[^']*'"),
        HighlightRule("comment", r"#.*?$", re.MULTILINE),
        HighlightRule("variable", r"\$\w+"),
        HighlightRule("variable", r"\$\{[^}]+\}"),
        HighlightRule("path", r"(?<![\w$])(?:~|\.{1,2})?/[\w./\-]+"),
        HighlightRule("comment", r"^#!.*?$", re.MULTILINE),
    ),
    indent_rules=IndentRuleSet(
        indent_size=2,
        use_spaces=True,
        increase_after=(r"then\s*$", r"do\s*$", r"\{\s*$"),
        decrease_before=(r"^\s*fi\s*$", r"^\s*done\s*$", r"^\s*\}"),
        align_with_opening=False,
        continuation_indent=2,
    ),
    fold_style=FOLD_STYLE_KEYWORD,
    fold_headers=(
        FoldHeaderRule(
            "function",
            r"^\s*(?:function\s+\w+(?:\s*\(\s*\))?|\w+\s*\(\s*\))",
            FOLD_STYLE_BRACE,
        ),
        FoldHeaderRule("conditional", r"^\s*if\s+", FOLD_STYLE_KEYWORD, "fi", "if"),
        FoldHeaderRule("loop", r"^\s*for\s+", FOLD_STYLE_KEYWORD, "done", "for"),
        FoldHeaderRule("loop", r"^\s*while\s+", FOLD_STYLE_KEYWORD, "done", "while"),
        FoldHeaderRule("loop", r"^\s*until\s+", FOLD_STYLE_KEYWORD, "done", "until"),
        FoldHeaderRule("switch", r"^\s*case\s+", FOLD_STYLE_KEYWORD, "esac", "case"),
    ),
    line_comment="#",
)

_APPLESCRIPT_KEYWORDS = (
    "set", "to", "if", "then", "else", "end", "repeat", "while", "until", "times", "tell",
    "application", "return", "on", "error", "try", "of", "with", "without", "property",
    "script", "handler", "display", "dialog", "choose", "file", "folder", "activate", "get",
    "copy", "exists", "make", "new", "every", "whose", "where", "contains", "begins", "ends",
    "equals", "and", "or", "not", "is", "equal", "true", "false", "missing", "value", "id",
    "name", "class", "item", "the", "my", "me", "its",
)

APPLESCRIPT = Language(
    id="applescript",
    display_name="AppleScript",
    abbreviation="AS",
    extensions=frozenset({".scpt", ".applescript"}),
    keywords=_APPLESCRIPT_KEYWORDS,
    case_insensitive=True,
    highlight_rules=(
        _keyword_rule(_APPLESCRIPT_KEYWORDS, re.IGNORECASE),
        HighlightRule("string", _DQ_STRING),
        HighlightRule("comment", r"--.*?$", re.MULTILINE),
        HighlightRule("comment", r"\(\*.*?\*\)", re.DOTALL),
        HighlightRule("number", r"\b\d+(?:\.\d+)?\b"),
        HighlightRule("type", r'application\s+"[^"]+"'),
    ),
    indent_rules=IndentRuleSet(
        indent_size=4,
        use_spaces=True,
        increase_after=(r"then\s*$", r"repeat\s+", r"tell\s+"),
        decrease_before=(r"^\s*end\s+", r"^\s*else\s*$"),
        align_with_opening=False,
        continuation_indent=4,
    ),
    fold_style=FOLD_STYLE_KEYWORD,
    fold_headers=(
        FoldHeaderRule(
            "function",
            r"^\s*(?:on|to)\s+(?!error\b)(?P<name>\w+)",
            FOLD_STYLE_KEYWORD,
            "end {name}",
        ),
        FoldHeaderRule("block", r"^\s*tell\s+", FOLD_STYLE_KEYWORD, "end tell", "tell"),
        FoldHeaderRule("conditional", r"^\s*if\b.*\bthen\s*$", FOLD_STYLE_KEYWORD, "end if", "if"),
        FoldHeaderRule("loop", r"^\s*repeat\b", FOLD_STYLE_KEYWORD, "end repeat", "repeat"),
        FoldHeaderRule("block", r"^\s*try\s*$", FOLD_STYLE_KEYWORD, "end try", "try"),
    ),
    block_comments=(BlockCommentRule(r"\(\*", r"\*\)"),),
    line_comment="--",
)

PLAIN = Language(
    id=PLAINTEXT_ID,
    display_name="Plain Text",
    fold_style=FOLD_STYLE_BRACE,
    fold_brace_blocks=True,
)

LANGUAGES: Mapping[str, Language] = MappingProxyType(
    {lang.id: lang for lang in (SWIFT, PYTHON, JAVASCRIPT, BASH, APPLESCRIPT, PLAIN)}
)

EXT_TO_LANG: Mapping[str, str] = MappingProxyType(
    {ext: lang.id for lang in LANGUAGES.values() for ext in sorted(lang.extensions)}
)


def _normalize_extension(extension: str | None) -> str:
    ext = str(extension or "").strip().lower()
    if not ext:
        return ""
    if not ext.startswith("."):
        ext = f".{ext}"
    return ext


def resolve(extension: str | None) -> Language:
    """Return the language for a file extension (``"py"`` or ``".py"``); unknown means plain text."""
    lang_id = EXT_TO_LANG.get(_normalize_extension(extension))
    if lang_id is None:
        return PLAIN
    return LANGUAGES[lang_id]


def get_language(language_id: str | None) -> Language:
    return LANGUAGES.get(str(language_id or "").strip().lower(), PLAIN)


def language_for_path(file_path: str | Path | None) -> Language:
    text = str(file_path or "").strip()
    if not text:
        return PLAIN
    return resolve(Path(text).suffix)


def coerce_language(language: Language | str | None) -> Language:
    if isinstance(language, Language):
        return language
    return get_language(language)


def language_ids() -> list[str]:
    return list(LANGUAGES.keys())


__all__ = [
    "FOLD_STYLE_BRACE",
    "FOLD_STYLE_INDENTATION",
    "FOLD_STYLE_KEYWORD",
    "FOLD_STYLES",
    "PLAINTEXT_ID",
    "BRACKET_PAIRS",
    "IndentRuleSet",
    "HighlightRule",
    "FoldHeaderRule",
    "BlockCommentRule",
    "Language",
    "compile_pattern",
    "compiled_patterns",
    "any_pattern_matches",
    "SWIFT",
    "PYTHON",
    "JAVASCRIPT",
    "BASH",
    "APPLESCRIPT",
    "PLAIN",
    "LANGUAGES",
    "EXT_TO_LANG",
    "resolve",
    "get_language",
    "language_for_path",
    "coerce_language",
    "language_ids",
]
