"""
Run Logger - Markdown log of one extraction run

Writes `run-<session>.md` with:
- Table of Contents (one entry per heading)
- run metadata (URL, target)
- key/value, code and table blocks

Usage:
    run_logger = RunLogger(url="https://example.com/page", target=100)
    run_logger.log_heading("Configuration")
    run_logger.log_kv("FEEDSCRAPE_STALL_LIMIT", "10")
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union


class RunLogger:
    """
    Markdown run logger with a generated table of contents.

    Args:
        url: Page being extracted
        target: Requested number of records
        log_dir: Directory for log files
        session_id: Optional session ID (timestamp when not provided)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        target: Optional[int] = None,
        log_dir: Union[str, Path] = "./logs",
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or datetime.now().strftime('%Y%m%d-%H%M%S')
        self.dir = Path(log_dir)
        self.dir.mkdir(parents=True, exist_ok=True)
        self.path = self.dir / f'run-{self.session_id}.md'

        self._toc_start = "<!-- TOC -->"
        self._toc_end = "<!-- /TOC -->"
        self._toc: List[Tuple[str, str]] = []  # (title, anchor)

        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(f"# feedscrape Run Log ({self.session_id})\n\n")
            f.write("## Navigation\n\n")
            f.write(f"{self._toc_start}\n(no sections yet)\n{self._toc_end}\n\n")
            if url:
                f.write(f"- **URL**: {url}\n")
            if target is not None:
                f.write(f"- **Target**: {target}\n")
            f.write("\n")

    def _write(self, text: str):
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(text)

    def log_heading(self, text: str):
        anchor = self._slugify(text)
        self._write("\n---\n\n")
        self._write(f"## {text}\n\n")
        self._toc.append((text, anchor))
        self._update_toc()

    def log_text(self, text: str):
        self._write(f"{text}\n\n")

    def log_kv(self, key: str, value: Any):
        self._write(f"- {key}: {value}\n")

    def log_code(self, lang: str, code: str):
        self._write(f"```{lang}\n{code}\n```\n\n")

    def log_json(self, data: Any, title: str = "Data"):
        self._write(f"### {title}\n\n")
        self.log_code("json", json.dumps(data, indent=2, ensure_ascii=False))

    def log_table(self, headers: Sequence[str], rows: Sequence[Sequence[Any]], title: str = ""):
        """
        Log a Markdown table.

        Args:
            headers: Column headers
            rows: Rows of cell values; short rows are padded, long ones cut
            title: Optional title above the table
        """
        if title:
            self._write(f"### {title}\n\n")
        if not headers or not rows:
            return

        cells = [[self._cell(c) for c in list(row)[:len(headers)]] for row in rows]
        cells = [row + [""] * (len(headers) - len(row)) for row in cells]
        widths = [len(h) for h in headers]
        for row in cells:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        self._write("| " + " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers)) + " |\n")
        self._write("|" + "|".join("-" * (w + 2) for w in widths) + "|\n")
        for row in cells:
            self._write("| " + " | ".join(c.ljust(widths[i]) for i, c in enumerate(row)) + " |\n")
        self._write("\n")

    def log_error(self, message: str):
        self._write(f"**ERROR:** {message}\n\n")

    def finalize(self, success: bool, duration_ms: int = 0, error: Optional[str] = None):
        self.log_heading("Summary")
        self._write(f"**Status:** {'SUCCESS' if success else 'FAILED'}\n")
        self._write(f"**Duration:** {duration_ms}ms\n")
        if error:
            self._write(f"\n**Error:** {error}\n")
        self._write("\n")

    # --- Helpers ---
    @staticmethod
    def _cell(value: Any) -> str:
        text = "" if value is None else str(value)
        text = " ".join(text.split()).replace("|", "\\|")
        return text[:60] + ("..." if len(text) > 60 else "")

    @staticmethod
    def _slugify(text: str) -> str:
        s = text.strip().lower()
        s = re.sub(r"[^\w\s-]", "", s)
        return re.sub(r"\s+", "-", s)

    def _update_toc(self):
        with open(self.path, 'r', encoding='utf-8') as fr:
            content = fr.read()
        start = content.index(self._toc_start) + len(self._toc_start)
        end = content.index(self._toc_end)
        toc_md = "\n".join(f"- [{title}](#{anchor})" for title, anchor in self._toc)
        content = content[:start] + "\n" + toc_md + "\n" + content[end:]
        with open(self.path, 'w', encoding='utf-8') as fw:
            fw.write(content)

    @property
    def log_path(self) -> str:
        return str(self.path)


def create_run_logger(url: Optional[str] = None, target: Optional[int] = None, log_dir: Union[str, Path, None] = None) -> RunLogger:
    """Create a run logger in the configured log directory."""
    if log_dir is None:
        from .config import config
        log_dir = config.log_dir
    return RunLogger(url=url, target=target, log_dir=log_dir)
