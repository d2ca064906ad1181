"""Tests for core.readme_parser - usage examples, description and cleanup."""
from core.readme_parser import (
    MAX_EXAMPLES,
    NO_DESCRIPTION,
    clean_markdown,
    extract_description,
    generate_example_title,
    looks_like_code,
    normalize_language,
    parse_usage_examples,
)

TWO_BASH_BLOCKS = """# nginx

Some intro text.

## Usage

Start a container with the default configuration:

```bash
docker run -d -p 8080:80 nginx
```

Pull the image first if you prefer:

```bash
docker pull nginx:latest
```
"""


class TestParseUsageExamples:
    def test_two_bash_blocks_in_document_order(self):
        examples = parse_usage_examples(TWO_BASH_BLOCKS)

        assert len(examples) == 2
        assert [e.language for e in examples] == ["bash", "bash"]
        assert examples[0].code == "docker run -d -p 8080:80 nginx"
        assert examples[0].title == "Run Container"
        assert examples[1].title == "Pull Image"

    def test_description_is_prose_line_above_block(self):
        examples = parse_usage_examples(TWO_BASH_BLOCKS)
        assert examples[0].description == "Start a container with the default configuration:"
        assert examples[1].description == "Pull the image first if you prefer:"

    def test_code_like_line_above_block_is_not_a_description(self):
        readme = "## Usage\n\ndocker run --rm -it alpine sh\n\n```sh\necho hi\n```\n"
        [example] = parse_usage_examples(readme)
        assert example.description is None
        assert example.title == "Command Line Usage"
        assert example.language == "bash"

    def test_identical_blocks_modulo_whitespace_collapse(self):
        readme = (
            "## Usage\n\n```bash\ndocker run  nginx\n```\n\n"
            "## Examples\n\n```bash\ndocker   run nginx\n```\n"
        )
        assert len(parse_usage_examples(readme)) == 1

    def test_output_is_capped(self):
        blocks = "\n\n".join(f"```bash\necho {i}\n```" for i in range(15))
        examples = parse_usage_examples(f"## Examples\n\n{blocks}\n")

        assert len(examples) == MAX_EXAMPLES
        assert examples[0].code == "echo 0"
        assert examples[-1].code == "echo 9"

    def test_section_ends_at_header_of_same_level(self):
        readme = (
            "## Usage\n\n```bash\necho inside\n```\n\n"
            "### Advanced\n\n```bash\necho nested\n```\n\n"
            "## License\n\n```text\nMIT\n```\n"
        )
        codes = [e.code for e in parse_usage_examples(readme)]
        assert codes == ["echo inside", "echo nested"]

    def test_blocks_outside_usage_sections_are_ignored(self):
        readme = "# Title\n\n```bash\necho no\n```\n\n## Features\n\n```bash\necho still no\n```\n"
        assert parse_usage_examples(readme) == []

    def test_header_variants_with_trailing_colon(self):
        readme = "### Quick Start:\n\n```yml\nversion: '3'\nservices:\n  web:\n    image: nginx\n```\n"
        [example] = parse_usage_examples(readme)
        assert example.title == "Docker Compose"
        assert example.language == "yaml"

    def test_unlabelled_fence_is_text(self):
        [example] = parse_usage_examples("## Usage\n\n```\nsomething\n```\n")
        assert example.language == "text"
        assert example.title == "Code Example"

    def test_empty_blocks_are_skipped(self):
        assert parse_usage_examples("## Usage\n\n```bash\n   \n```\n") == []

    def test_disabled_or_empty_input(self):
        assert parse_usage_examples(TWO_BASH_BLOCKS, include_examples=False) == []
        assert parse_usage_examples("") == []


class TestTitles:
    def test_shell_titles(self):
        assert generate_example_title("docker build -t app .", "sh") == "Build Image"
        assert generate_example_title("ls -la", "shell") == "Command Line Usage"

    def test_other_languages(self):
        assert generate_example_title("FROM nginx", "dockerfile") == "Dockerfile Example"
        assert generate_example_title("key: value", "yaml") == "Configuration"
        assert generate_example_title('{"a": 1}', "json") == "Configuration"
        assert generate_example_title("fetch()", "js") == "JavaScript Integration"
        assert generate_example_title("import redis", "python") == "Python Integration"
        assert generate_example_title("SELECT 1;", "sql") == "Code Example"

    def test_language_aliases(self):
        assert normalize_language("SH") == "bash"
        assert normalize_language("py") == "python"
        assert normalize_language("Dockerfile") == "dockerfile"


class TestLooksLikeCode:
    def test_indicators(self):
        assert looks_like_code("docker run nginx")
        assert looks_like_code("RUN apt-get update")
        assert looks_like_code("$ make")
        assert looks_like_code("call(x);")
        assert not looks_like_code("Start the server like this")


class TestExtractDescription:
    def test_first_substantial_line(self):
        readme = "# Test\n\nThis is a test image for Docker.\n"
        assert extract_description(readme) == "This is a test image for Docker."

    def test_skips_badges_and_short_lines(self):
        readme = (
            "# Title\n\n[![Build](https://ci/badge.svg)](https://ci)\n"
            "![logo](logo.png)\nShort line\n"
            "The real description starts on this line.\n"
        )
        assert extract_description(readme) == "The real description starts on this line."

    def test_continuation_lines_are_joined(self):
        readme = "A web server that is fast and small.\nIt also works as a reverse proxy.\n\nMore text here that is long enough."
        assert extract_description(readme) == (
            "A web server that is fast and small. It also works as a reverse proxy."
        )

    def test_header_ends_description(self):
        readme = "First paragraph is long enough.\n## Next\nSecond paragraph is long enough too."
        assert extract_description(readme) == "First paragraph is long enough."

    def test_length_limit_stops_continuation(self):
        first = "a" * 250
        readme = f"{first}\n{'b' * 60}\n"
        assert extract_description(readme) == first

    def test_empty_input(self):
        assert extract_description("") == NO_DESCRIPTION
        assert extract_description("# Only headers\n\n## Here") == NO_DESCRIPTION


class TestCleanMarkdown:
    def test_badge_with_long_alt_keeps_alt(self):
        assert clean_markdown("![Badge](https://x/badge.png) Some text") == "Badge Some text"

    def test_badge_with_short_alt_is_removed(self):
        assert clean_markdown("![CI](https://x/ci.png) Some text") == "Some text"

    def test_relative_links_keep_text_only(self):
        text = "See [docs](docs/README.md) and [site](https://nginx.org)."
        assert clean_markdown(text) == "See docs and [site](https://nginx.org)."

    def test_blank_runs_collapse(self):
        assert clean_markdown("\n\nfirst\n\n\n\n\nsecond\n\n") == "first\n\nsecond"
