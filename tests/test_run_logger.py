"""
Tests for the Markdown run log
"""

from feedscrape_core.run_logger import RunLogger, create_run_logger


class TestRunLogger:

    def test_header_and_toc(self, tmp_path):
        run_logger = RunLogger(url="https://example.com", target=10, log_dir=tmp_path, session_id="s1")
        run_logger.log_heading("Configuration")
        run_logger.log_kv("FEEDSCRAPE_STALL_LIMIT", 10)
        run_logger.log_heading("Outcome")

        content = (tmp_path / "run-s1.md").read_text(encoding="utf-8")
        assert content.startswith("# feedscrape Run Log (s1)")
        assert "- **URL**: https://example.com" in content
        assert "- [Configuration](#configuration)\n- [Outcome](#outcome)" in content
        assert "- FEEDSCRAPE_STALL_LIMIT: 10" in content
        assert run_logger.log_path == str(tmp_path / "run-s1.md")

    def test_table(self, tmp_path):
        run_logger = RunLogger(log_dir=tmp_path, session_id="s2")
        run_logger.log_table(["#", "Text"], [[1, "a | b"], [2]], title="Records")

        content = run_logger.path.read_text(encoding="utf-8")
        assert "### Records" in content
        assert "| #" in content
        assert "a \\| b" in content

    def test_json_block(self, tmp_path):
        run_logger = RunLogger(log_dir=tmp_path, session_id="s4")
        run_logger.log_json({"title": "صفحة", "followers": 12000}, "Page profile")

        content = run_logger.path.read_text(encoding="utf-8")
        assert "### Page profile\n\n```json\n{\n  \"title\": \"صفحة\"," in content
        assert content.rstrip().endswith("```")

    def test_finalize(self, tmp_path):
        run_logger = RunLogger(log_dir=tmp_path, session_id="s3")
        run_logger.finalize(False, 120, "navigation failed")

        content = run_logger.path.read_text(encoding="utf-8")
        assert "**Status:** FAILED" in content
        assert "**Error:** navigation failed" in content
        assert "- [Summary](#summary)" in content

    def test_create_in_directory(self, tmp_path):
        run_logger = create_run_logger(url="https://example.com", log_dir=tmp_path / "logs")
        assert (tmp_path / "logs").is_dir()
        assert run_logger.path.exists()
