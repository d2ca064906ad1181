# =============================================================================
# core/readme_parser.py  —  README Usage-Example Extractor
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns raw README markdown into things an agent can use directly:
#     - parse_usage_examples(): titled code snippets from "usage" sections
#     - extract_description():  the first real paragraph
#     - clean_markdown():       README text without badge/relative-link noise
#
# HOW THE EXTRACTOR WORKS (the pipeline):
#   1. Segment: walk the lines, open a section at a usage-intent header
#      ("## Usage", "### Quick Start", ...), close it at the next header
#      of the same or shallower depth.  Deeper headers stay inside.
#   2. Extract: every fenced block in a section becomes a candidate,
#      with a title (guessed from language + first line), an optional
#      description (the prose line right above it) and a normalized
#      language tag.
#   3. Deduplicate on whitespace-collapsed code, keep the first copy.
#   4. Cap at MAX_EXAMPLES, in document order.
#
# These are heuristics, and the exact pattern set and priority order below
# are pinned by tests.  Change them only together with the tests.
#
# FAILURE POLICY:
#   Nothing in here raises.  A README that trips the parser degrades to
#   [] / "No description available" / the unchanged text.
# =============================================================================

import logging
import re

from core.models import UsageExample

logger = logging.getLogger(__name__)

MAX_EXAMPLES = 10
NO_DESCRIPTION = "No description available"

_HEADER = re.compile(r"^#{1,6}\s")
_HEADER_LEVEL = re.compile(r"^#+")
_USAGE_HEADER = re.compile(
    r"^#{1,6}\s*(usage|use|using|how to use|getting started|quick start|examples?"
    r"|basic usage|running|docker run)\s*:?\s*$",
    re.IGNORECASE,
)

_CODE_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```", re.ASCII)

_CODE_INDICATORS = [
    re.compile(r"^\s*[{}\[\]();,]"),                      # starts like code
    re.compile(r"[{}\[\]();,]\s*$"),                      # ends like code
    re.compile(r"^\s*(FROM|RUN|COPY|ADD|EXPOSE|CMD|ENTRYPOINT)\s+", re.IGNORECASE),
    re.compile(r"^\s*docker\s+"),
    re.compile(r"^\s*\$"),                                # shell prompt
    re.compile(r"^\s*//"),
    re.compile(r"^\s*#"),
]

_BULLET = re.compile(r"^[*-]\s*")
_WHITESPACE = re.compile(r"\s+")

_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
_RELATIVE_LINK = re.compile(r"\[([^\]]+)\]\((?!https?://)([^)]+)\)")
_BLANK_RUN = re.compile(r"\n{3,}")

LANGUAGE_ALIASES = {
    "sh": "bash",
    "shell": "bash",
    "yml": "yaml",
    "md": "markdown",
    "py": "python",
    "js": "javascript",
    "ts": "typescript",
}

_SHELL_LANGUAGES = ("bash", "shell", "sh")


# =============================================================================
# PUBLIC API
# =============================================================================
def parse_usage_examples(content: str, include_examples: bool = True) -> list[UsageExample]:
    """Extract up to MAX_EXAMPLES usage examples from README markdown.

    Args:
        content: Raw README text.
        include_examples: When False, nothing is scanned and [] is returned.

    Returns:
        Unique examples in document order.  Never raises.
    """
    if not include_examples or not content:
        return []

    try:
        examples: list[UsageExample] = []
        for section in _extract_usage_sections(content):
            examples.extend(_extract_code_blocks(section))

        unique = _deduplicate(examples)[:MAX_EXAMPLES]
        logger.debug("Extracted %d usage examples from README", len(unique))
        return unique
    except Exception:
        logger.warning("Failed to parse usage examples from README", exc_info=True)
        return []


def extract_description(content: str) -> str:
    """Return the first substantial paragraph of a README.

    Headers, blank lines and badge/image lines are skipped until a line
    longer than 20 characters starts the description.  Following lines
    (also longer than 20 characters) are appended while the total stays
    under 300 characters.  The next blank line or header ends it.
    """
    try:
        description = ""

        for line in (content or "").split("\n"):
            trimmed = line.strip()

            if not trimmed or trimmed.startswith("#"):
                if description:
                    break
                continue

            if trimmed.startswith("![") or trimmed.startswith("[!["):
                continue

            if len(trimmed) > 20:
                if not description:
                    description = trimmed
                elif len(description) + len(trimmed) < 300:
                    description += " " + trimmed
                else:
                    break

        return description or NO_DESCRIPTION
    except Exception:
        logger.warning("Failed to extract description from README", exc_info=True)
        return NO_DESCRIPTION


def clean_markdown(content: str) -> str:
    """Strip badge images and relative links, squeeze blank-line runs."""
    try:
        cleaned = _IMAGE.sub(lambda m: m.group(1) if len(m.group(1)) > 3 else "", content)
        # Relative links cannot be followed outside the repo: keep the text only.
        cleaned = _RELATIVE_LINK.sub(r"\1", cleaned)
        cleaned = _BLANK_RUN.sub("\n\n", cleaned)
        return cleaned.strip()
    except Exception:
        logger.warning("Failed to clean markdown content", exc_info=True)
        return content


def normalize_language(language: str) -> str:
    normalized = language.lower()
    return LANGUAGE_ALIASES.get(normalized, normalized)


def generate_example_title(code: str, language: str) -> str:
    """Guess a human title from the fence language and the first code line."""
    first_line = code.split("\n")[0].strip()

    if language in _SHELL_LANGUAGES:
        if "docker pull" in first_line:
            return "Pull Image"
        if "docker run" in first_line:
            return "Run Container"
        if "docker build" in first_line:
            return "Build Image"
        return "Command Line Usage"

    if language == "dockerfile":
        return "Dockerfile Example"

    if language in ("yaml", "yml"):
        if "version:" in code and ("services:" in code or "docker" in code):
            return "Docker Compose"
        return "Configuration"

    if language == "json":
        return "Configuration"

    if language in ("javascript", "js"):
        return "JavaScript Integration"

    if language in ("python", "py"):
        return "Python Integration"

    return "Code Example"


def looks_like_code(text: str) -> bool:
    return any(pattern.search(text) for pattern in _CODE_INDICATORS)


# =============================================================================
# Pipeline steps
# =============================================================================
def _is_usage_header(line: str) -> bool:
    return _USAGE_HEADER.match(line) is not None


def _extract_usage_sections(content: str) -> list[str]:
    sections: list[str] = []
    current: list[str] = []
    in_section = False
    section_level = 0

    for line in content.split("\n"):
        if _HEADER.match(line):
            level = len(_HEADER_LEVEL.match(line).group(0))

            if _is_usage_header(line):
                if current:
                    sections.append("\n".join(current))
                current = [line]
                in_section = True
                section_level = level
            elif in_section and level <= section_level:
                if current:
                    sections.append("\n".join(current))
                current = []
                in_section = False
            elif in_section:
                current.append(line)
        elif in_section:
            current.append(line)

    if current:
        sections.append("\n".join(current))

    return sections


def _extract_code_blocks(section: str) -> list[UsageExample]:
    examples = []

    for match in _CODE_BLOCK.finditer(section):
        language = match.group(1) or "text"
        code = match.group(2).strip()
        if not code:
            continue

        examples.append(UsageExample(
            title=generate_example_title(code, language),
            description=_extract_example_description(section, match.start()),
            code=code,
            language=normalize_language(language),
        ))

    return examples


def _extract_example_description(section: str, block_start: int):
    """Nearest prose line above a code block, or None.

    Only the first non-empty, non-header line above the block is
    considered; if it does not qualify there is no description.
    """
    for line in reversed(section[:block_start].split("\n")):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue

        if 10 < len(trimmed) < 200 and not looks_like_code(trimmed):
            return _BULLET.sub("", trimmed)
        break

    return None


def _deduplicate(examples: list[UsageExample]) -> list[UsageExample]:
    seen = set()
    unique = []
    for example in examples:
        fingerprint = _WHITESPACE.sub(" ", example.code).strip()
        if fingerprint not in seen:
            seen.add(fingerprint)
            unique.append(example)
    return unique
