"""
Unit tests for fenced code block extraction.
"""

import pytest

from databot.utils.fences import extract_code_blocks, strip_fence_languages


class TestExtractCodeBlocks:
    """Test extract_code_blocks."""

    def test_no_fence(self):
        assert extract_code_blocks("I can only answer questions about the data.") == []

    def test_empty_text(self):
        assert extract_code_blocks("") == []

    def test_single_block(self):
        text = "Intent: count users.\n\n```sql\nSELECT COUNT(*) FROM users\n```\n"

        assert extract_code_blocks(text) == ["SELECT COUNT(*) FROM users"]

    def test_multiple_blocks_in_order(self):
        text = "```sql\nA\n```\nthen\n```sql\nB\n```"

        assert extract_code_blocks(text) == ["A", "B"]

    def test_multiline_body(self):
        text = "```sql\nSELECT status,\n  COUNT(*) AS n\nFROM orders\nGROUP BY status\n```"

        assert extract_code_blocks(text) == [
            "SELECT status,\n  COUNT(*) AS n\nFROM orders\nGROUP BY status"
        ]

    def test_other_languages_and_untagged_fences_skipped(self):
        text = "```python\nprint(1)\n```\n```\nplain\n```\n```sql\nSELECT 1\n```"

        assert extract_code_blocks(text) == ["SELECT 1"]

    def test_language_match_is_case_insensitive(self):
        assert extract_code_blocks("```SQL\nSELECT 1\n```") == ["SELECT 1"]

    def test_inline_fence_mention_before_real_block(self):
        text = "I will wrap it in ```sql``` as asked:\n```sql\nSELECT 1\n```"

        assert extract_code_blocks(text) == ["SELECT 1"]

    def test_opening_fence_must_start_a_line(self):
        assert extract_code_blocks("See ```sql\nSELECT 1\n```") == []

    def test_indented_fence(self):
        assert extract_code_blocks("Query:\n  ```sql\n  SELECT 1\n  ```") == ["SELECT 1"]

    def test_trailing_text_after_tag_is_not_a_fence(self):
        assert extract_code_blocks("```sql is what I use\nSELECT 1\n```") == []

    @pytest.mark.parametrize("text", ["```sql\n```", "```sql\n   \n```"])
    def test_empty_block_skipped(self, text):
        assert extract_code_blocks(text) == []

    def test_empty_block_skipped_among_others(self):
        text = "```sql\n```\n```sql\nSELECT 2\n```"

        assert extract_code_blocks(text) == ["SELECT 2"]

    def test_other_language_requested(self):
        text = "```sql\nSELECT 1\n```\n```json\n{}\n```"

        assert extract_code_blocks(text, language="json") == ["{}"]


class TestStripFenceLanguages:
    """Test strip_fence_languages."""

    def test_strips_tags(self):
        assert strip_fence_languages("```sql\nSELECT 1\n```") == "```\nSELECT 1\n```"

    def test_plain_fences_unchanged(self):
        assert strip_fence_languages("```\nx\n```") == "```\nx\n```"
