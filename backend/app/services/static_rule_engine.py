"""
Static rule engine (deterministic, offline, line-oriented).

Design intent:
- Fast pattern detectors for script, stylesheet and Liquid template files.
- No parser dependency: every check is a regex or string scan over one file.
- Total: an unrecognised file category yields an empty list, never an error.

Each finding is a RuleViolation anchored to verbatim text from the file so the
builder can turn it into an applicable Suggestion.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..models.linting import RuleSeverity, RuleViolation
from .file_types import CSS, JAVASCRIPT, LIQUID, resolve_category

logger = logging.getLogger(__name__)

MAX_LIQUID_NESTING = 3

# filter name -> (CSS-based replacement, reason)
DEPRECATED_LIQUID_FILTERS: Dict[str, Tuple[str, str]] = {
    "color_to_rgb": (
        "rgb(var(--color-rgb))",
        "expose the color as an RGB custom property and use rgb() in CSS",
    ),
    "color_to_hsl": (
        "hsl(from var(--color) h s l)",
        "use CSS relative color syntax instead of converting in Liquid",
    ),
    "hex_to_rgba": (
        "rgb(from var(--color) r g b / 0.5)",
        "use CSS relative color syntax with an alpha channel",
    ),
    "color_lighten": (
        "color-mix(in srgb, var(--color), white 20%)",
        "mix with white in CSS via color-mix()",
    ),
    "color_darken": (
        "color-mix(in srgb, var(--color), black 20%)",
        "mix with black in CSS via color-mix()",
    ),
    "color_saturate": (
        "hsl(from var(--color) h calc(s + 20) l)",
        "raise saturation with CSS relative color syntax",
    ),
    "color_desaturate": (
        "hsl(from var(--color) h calc(s - 20) l)",
        "lower saturation with CSS relative color syntax",
    ),
    "color_modify": (
        "rgb(from var(--color) r g b / var(--alpha))",
        "adjust individual channels with CSS relative color syntax",
    ),
    "color_mix": (
        "color-mix(in srgb, var(--color-a), var(--color-b))",
        "blend colors in CSS via color-mix()",
    ),
}


def _line_and_column(content: str, offset: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based line and 0-based column."""
    line_start = content.rfind("\n", 0, offset) + 1
    return content.count("\n", 0, offset) + 1, offset - line_start


class StaticRuleEngine:
    """Per-language pattern detectors behind a single file-type router."""

    # Script
    _CONSOLE_LOG_RE = re.compile(r"\bconsole\.log\s*\(")
    _VAR_RE = re.compile(r"\bvar\s+[A-Za-z_$]")
    _VAR_KEYWORD_RE = re.compile(r"\bvar\b")
    _LOOSE_EQUALITY_RE = re.compile(r"(?<![=!])(==|!=)(?!=)")

    # Stylesheet
    _IMPORTANT_RE = re.compile(r"!\s*important\b", re.IGNORECASE)
    _IMPORTANT_STRIP_RE = re.compile(r"\s*!\s*important\b", re.IGNORECASE)
    _BLOCK_RE = re.compile(r"\{([^{}]*)\}")
    _DECLARATION_RE = re.compile(r"^\s*(?P<prop>-{0,2}[A-Za-z_][\w-]*)\s*:")
    _UNIVERSAL_SELECTOR_RE = re.compile(r"(?:^|(?<=[\s,>+~(]))\*(?=[\s,{>+~:.\[#)]|$)")

    # Liquid
    _LIQUID_BLOCK_TAG_RE = re.compile(
        r"(?P<close>\{%-?\s*end(?:if|unless)\s*-?%\})|(?P<open>\{%-?\s*(?:if|unless)\b)"
    )
    _LIQUID_TAG_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}")
    _IMG_TAG_RE = re.compile(r"<img\b(?P<attrs>[^>]*)>", re.IGNORECASE)
    _ALT_ATTR_RE = re.compile(r"\balt\s*=", re.IGNORECASE)

    def __init__(self, deprecated_filters: Optional[Dict[str, Tuple[str, str]]] = None):
        self.deprecated_filters = dict(deprecated_filters or DEPRECATED_LIQUID_FILTERS)
        self._filter_patterns = {
            name: re.compile(r"\|\s*" + re.escape(name) + r"\b")
            for name in self.deprecated_filters
        }

    def analyze_file(self, content: str, file_type: Optional[str], file_name: Optional[str] = None) -> List[RuleViolation]:
        """
        Run every detector registered for the file's category.

        Args:
            content: Full file text
            file_type: Declared type (tried first)
            file_name: File name whose extension is the fallback for the category

        Returns:
            Violations ordered by (line, column); empty for unknown categories.
        """
        category = resolve_category(file_type, file_name)
        content = content or ""

        if category == JAVASCRIPT:
            violations = self._check_javascript(content)
        elif category == CSS:
            violations = self._check_css(content)
        elif category == LIQUID:
            violations = self._check_liquid(content)
        else:
            return []

        violations.sort(key=lambda v: (v.line, v.column))
        logger.debug(f"Static rules: {len(violations)} violation(s) in {file_name or '<unnamed>'} ({category})")
        return violations

    # ------------------------------------------------------------------
    # Script
    # ------------------------------------------------------------------

    def _check_javascript(self, content: str) -> List[RuleViolation]:
        violations: List[RuleViolation] = []

        for idx, line in enumerate(content.split("\n"), start=1):
            stripped = line.strip()
            # Blank and comment lines are skipped before any check runs
            if not stripped or stripped.startswith("//"):
                continue

            m = self._VAR_RE.search(line)
            if m:
                violations.append(
                    RuleViolation(
                        line=idx,
                        column=m.start(),
                        rule="js/no-var",
                        message="'var' is function-scoped; prefer const (or let when reassigned)",
                        original_code=stripped,
                        suggested_code=self._VAR_KEYWORD_RE.sub("const", stripped, count=1),
                        severity=RuleSeverity.WARNING,
                    )
                )

            m = self._CONSOLE_LOG_RE.search(line)
            if m:
                violations.append(
                    RuleViolation(
                        line=idx,
                        column=m.start(),
                        rule="js/no-console-log",
                        message="Unexpected console.log; remove it or route through a logger before shipping",
                        original_code=stripped,
                        suggested_code=f"// {stripped}",
                        severity=RuleSeverity.WARNING,
                    )
                )

            m = self._LOOSE_EQUALITY_RE.search(line)
            if m:
                violations.append(
                    RuleViolation(
                        line=idx,
                        column=m.start(),
                        rule="js/eqeqeq",
                        message=f"Loose equality '{m.group(1)}' coerces types; use strict equality",
                        original_code=stripped,
                        suggested_code=self._LOOSE_EQUALITY_RE.sub(lambda eq: eq.group(1) + "=", stripped),
                        severity=RuleSeverity.WARNING,
                    )
                )

        return violations

    # ------------------------------------------------------------------
    # Stylesheet
    # ------------------------------------------------------------------

    def _check_css(self, content: str) -> List[RuleViolation]:
        violations: List[RuleViolation] = []
        lines = content.split("\n")

        for idx, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped:
                continue

            m = self._IMPORTANT_RE.search(line)
            if m:
                violations.append(
                    RuleViolation(
                        line=idx,
                        column=m.start(),
                        rule="css/no-important",
                        message="!important overrides the cascade; raise selector specificity instead",
                        original_code=stripped,
                        suggested_code=self._IMPORTANT_STRIP_RE.sub("", stripped),
                        severity=RuleSeverity.WARNING,
                    )
                )

            # Only the selector part of a line can hold a universal selector
            if "{" in stripped:
                selector = stripped.split("{", 1)[0]
                m = self._UNIVERSAL_SELECTOR_RE.search(selector)
                if m:
                    indent = len(line) - len(line.lstrip())
                    violations.append(
                        RuleViolation(
                            line=idx,
                            column=indent + m.start(),
                            rule="css/no-universal-selector",
                            message="Universal selector '*' matches every element; scope it to a container",
                            original_code=stripped,
                            suggested_code=stripped[:m.start()] + ".container *" + stripped[m.end():],
                            severity=RuleSeverity.INFO,
                        )
                    )

        violations.extend(self._check_duplicate_properties(content, lines))
        return violations

    def _check_duplicate_properties(self, content: str, lines: List[str]) -> List[RuleViolation]:
        violations: List[RuleViolation] = []

        for block in self._BLOCK_RE.finditer(content):
            body_start = block.start(1)
            first_seen: Dict[str, int] = {}

            pos = 0
            body = block.group(1)
            for segment in body.split(";"):
                seg_offset = body_start + pos
                pos += len(segment) + 1

                m = self._DECLARATION_RE.match(segment)
                if not m:
                    continue
                prop = m.group("prop").lower()
                decl_offset = seg_offset + m.start("prop")

                if prop not in first_seen:
                    first_seen[prop] = decl_offset
                    continue

                line_no, column = _line_and_column(content, decl_offset)
                line = lines[line_no - 1]
                declaration = segment.strip()
                has_semicolon = seg_offset + len(segment) < block.end(1)
                if has_semicolon:
                    declaration += ";"

                cleaned = re.sub(r"\s{2,}", " ", line[:column] + line[column + len(declaration):]).strip()
                if cleaned:
                    original_code, suggested_code = line.strip(), cleaned
                else:
                    original_code, suggested_code = self._anchor_with_previous_line(lines, line_no)

                first_line, _ = _line_and_column(content, first_seen[prop])
                violations.append(
                    RuleViolation(
                        line=line_no,
                        column=column,
                        rule="css/no-duplicate-properties",
                        message=f"Duplicate property '{prop}' in the same block (first declared on line {first_line})",
                        original_code=original_code,
                        suggested_code=suggested_code,
                        severity=RuleSeverity.WARNING,
                    )
                )

        return violations

    @staticmethod
    def _anchor_with_previous_line(lines: List[str], line_no: int) -> Tuple[str, str]:
        """
        Anchor a removal of a whole line on the nearest non-blank line above it.

        The original code spans both lines verbatim and the suggestion keeps only
        the line above, so the replacement text is never empty and undo can find it.
        """
        prev = line_no - 2
        while prev > 0 and not lines[prev].strip():
            prev -= 1
        return "\n".join(lines[prev:line_no]), lines[prev]

    # ------------------------------------------------------------------
    # Liquid
    # ------------------------------------------------------------------

    def _enclosing_tag(self, line: str, offset: int) -> Optional[str]:
        """Return the `{{ ... }}` or `{% ... %}` tag on the line that contains offset."""
        for m in self._LIQUID_TAG_RE.finditer(line):
            if m.start() <= offset < m.end():
                return m.group(0)
        return None

    def _check_liquid(self, content: str) -> List[RuleViolation]:
        violations: List[RuleViolation] = []
        depth = 0

        for idx, line in enumerate(content.split("\n"), start=1):
            stripped = line.strip()

            for name, pattern in self._filter_patterns.items():
                m = pattern.search(line)
                if not m:
                    continue
                replacement, reason = self.deprecated_filters[name]
                violations.append(
                    RuleViolation(
                        line=idx,
                        column=m.start(),
                        rule="liquid/deprecated-filter",
                        message=f"Filter '{name}' is deprecated; {reason}",
                        original_code=self._enclosing_tag(line, m.start()) or stripped,
                        suggested_code=replacement,
                        severity=RuleSeverity.WARNING,
                    )
                )

            # Tags are processed in position order so `{% endif %}{% if %}` nets to zero
            flagged = False
            for m in self._LIQUID_BLOCK_TAG_RE.finditer(line):
                if m.group("close"):
                    depth = max(0, depth - 1)
                    continue
                depth += 1
                if depth > MAX_LIQUID_NESTING and not flagged:
                    flagged = True
                    violations.append(
                        RuleViolation(
                            line=idx,
                            column=m.start(),
                            rule="liquid/deep-nesting",
                            message=f"Conditional nested {depth} levels deep (max {MAX_LIQUID_NESTING}); "
                                    "extract conditions into assign variables or use case/when",
                            original_code=stripped,
                            suggested_code="Extract nested conditions into assign variables or use case/when",
                            severity=RuleSeverity.WARNING,
                        )
                    )

        for m in self._IMG_TAG_RE.finditer(content):
            if self._ALT_ATTR_RE.search(m.group("attrs")):
                continue
            line_no, column = _line_and_column(content, m.start())
            tag = m.group(0)
            violations.append(
                RuleViolation(
                    line=line_no,
                    column=column,
                    rule="liquid/missing-alt",
                    message="<img> without alt text is inaccessible to screen readers",
                    original_code=tag,
                    suggested_code=tag[:4] + ' alt=""' + tag[4:],
                    severity=RuleSeverity.ERROR,
                )
            )

        return violations
