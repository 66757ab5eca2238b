"""Tool definition: doc_tool — read pages from PDFs and plain text documents."""

from enum import Enum
from pathlib import Path
from typing import List

import fitz  # PyMuPDF
from pydantic import BaseModel, Field, field_validator

from agent_tools.actions import ActionRegistry
from agent_tools.dispatch import FacadeTool
from agent_tools.sandbox import Sandbox


class DocAction(str, Enum):
    PDF_READ = "pdf_read"
    TEXT_READ = "text_read"


# Upper bound on pages one request may name, checked before ranges are expanded
MAX_REQUESTED_PAGES = 10000


def parse_page_numbers(spec: str) -> List[int]:
    """Parse "1, 3-5, 10" into [1, 3, 4, 5, 10].

    Order of first appearance is kept and duplicates are dropped.

    Raises:
        ValueError: on empty input, non-numeric parts, pages below 1,
            descending ranges or more than MAX_REQUESTED_PAGES pages.
    """
    pages: List[int] = []
    seen = set()
    span = 0
    for part in str(spec).split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Descending page range: {part}")
            numbers = range(start, end + 1)
        else:
            numbers = range(int(part), int(part) + 1)
        span += len(numbers)
        if span > MAX_REQUESTED_PAGES:
            raise ValueError(f"Too many pages requested (limit {MAX_REQUESTED_PAGES})")
        for n in numbers:
            if n < 1:
                raise ValueError(f"Page numbers start at 1: {part}")
            if n not in seen:
                seen.add(n)
                pages.append(n)
    if not pages:
        raise ValueError("No page numbers given")
    return pages


class DocPathParams(BaseModel):
    doc_path: str = Field(description="Path to the document file.")


class PdfReadParams(DocPathParams):
    page_numbers: str = Field(
        description='Comma-separated page numbers to read (first page is 1). '
                    'Examples: "1", "1, 3, 5", "1-10", "1, 5-8, 15"')

    @field_validator("page_numbers", mode="before")
    @classmethod
    def check_page_numbers(cls, value):
        value = str(value)
        parse_page_numbers(value)
        return value


ACTIONS = ActionRegistry("doc_tool", DocAction)


class DocTool(FacadeTool):
    """Reads documents under a sandbox root."""

    TOOL_NAME = "doc_tool"
    DESCRIPTION = (
        "Read and process documents. `pdf_read` extracts the text of specific "
        "pages from a PDF (page_numbers like \"5\", \"1, 3, 5\" or \"1, 3-5, 10\"). "
        "`text_read` returns the contents of a plain text file (markdown, txt, "
        "source code, etc.)."
    )
    ACTIONS = ACTIONS

    def __init__(self, root=None, max_pages: int = 50, **kwargs):
        super().__init__(**kwargs)
        self.sandbox = Sandbox(root if root is not None else Path.cwd())
        self.max_pages = max_pages

    def _file(self, doc_path: str) -> Path:
        path = self.sandbox.resolve(doc_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {doc_path}")
        if not path.is_file():
            raise IsADirectoryError(f"Not a file: {doc_path}")
        return path

    def read_pdf(self, doc_path: str, page_numbers: str) -> dict:
        path = self._file(doc_path)
        requested = parse_page_numbers(page_numbers)

        with fitz.open(str(path)) as doc:
            total = doc.page_count
            valid = [n for n in requested if n <= total]
            invalid = [n for n in requested if n > total]
            truncated = len(valid) > self.max_pages
            pages = [
                {"page": n, "text": doc.load_page(n - 1).get_text("text")}
                for n in valid[:self.max_pages]
            ]

        self.logger.info(f"Read {len(pages)} of {total} pages from {doc_path}")
        result = {
            "total_pages": total,
            "requested_pages": requested,
            "invalid_pages": invalid,
            "pages": pages,
        }
        if truncated:
            result["truncated"] = True
        return result

    def read_text(self, doc_path: str) -> dict:
        path = self._file(doc_path)
        content = path.read_text()
        self.logger.info(f"Read {len(content.encode())} bytes from {doc_path}")
        return {
            "path": doc_path,
            "extension": path.suffix,
            "size": len(content.encode()),
            "lines": content.count("\n") + 1,
            "content": content,
        }


@ACTIONS.register(DocAction.PDF_READ, PdfReadParams, "read `page_numbers` from the PDF at `doc_path`")
def _pdf_read(tool, p):
    return tool.read_pdf(p.doc_path, p.page_numbers)


@ACTIONS.register(DocAction.TEXT_READ, DocPathParams, "read the text file at `doc_path`")
def _text_read(tool, p):
    return tool.read_text(p.doc_path)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = DocTool.TOOL_NAME

DEPENDENCIES = {"config": "_config"}

SCHEMA = DocTool.schema()

SYSTEM_PROMPT_RULE = (
    "For reading a PDF or text document, call doc_tool. For PDFs, request "
    "only the pages you need."
)

_config = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> DocTool:
    global _tool
    if _tool is None:
        cfg = _config
        _tool = DocTool(
            root=cfg.get("disk.root") if cfg else None,
            max_pages=cfg.get("doc.max_pages", 50) if cfg else 50,
            timeout_seconds=cfg.get("dispatch.timeout_seconds") if cfg else None,
        )
    return _tool


def handler(args: dict):
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
