"""
Compile service client.

Sends sketch source to the compile service and returns the program image.

The service accepts ``POST <url>/compile`` with a JSON body
``{"sourceText": ..., "boardId": ...}`` and answers
``{"success": bool, "hex": str, "stdout": str, "stderr": str}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..config import CompileConfig
from ..exceptions import CompileError

logger = logging.getLogger(__name__)

COMPILE_ENDPOINT = "/compile"


@dataclass
class CompileResult:
    """Outcome of one compile request."""

    success: bool
    hex: str = ""
    stdout: str = ""
    stderr: str = ""
    board: str = ""

    @property
    def program(self) -> Optional[str]:
        """Intel HEX text, or None when the service returned no image."""
        return self.hex or None

    @property
    def diagnostics(self) -> str:
        return self.stderr or self.stdout

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "board": self.board,
            "hex": self.hex,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


class CompileClient:
    """
    HTTP client for the compile service.

    Example::

        client = CompileClient(config.compile)
        result = client.compile(Path("blink.ino").read_text())
        if result.success:
            image = load_hex(result.program)
    """

    DEFAULT_HEADERS = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    def __init__(
        self,
        config: Optional[CompileConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Service URL, default board and timeout
            session: Pre-built requests session (default: created lazily)
        """
        self.config = config or CompileConfig()
        self._session = session

    @property
    def url(self) -> str:
        return self.config.url.rstrip("/") + COMPILE_ENDPOINT

    def _get_session(self) -> requests.Session:
        """Get or create requests session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self.DEFAULT_HEADERS)
        return self._session

    def compile(self, source_text: str, board_id: Optional[str] = None) -> CompileResult:
        """
        Compile a sketch.

        A sketch that fails to build is reported through the result, not
        raised. Transport problems are raised.

        Args:
            source_text: Sketch source code
            board_id: Target board (default: ``compile.board`` from config)

        Raises:
            CompileError: If the service cannot be reached or its reply is
                not a valid compile response
        """
        board = board_id or self.config.board
        payload = {"sourceText": source_text, "boardId": board}

        logger.info(f"Compiling {len(source_text)} chars for board {board}")
        try:
            response = self._get_session().post(
                self.url,
                json=payload,
                timeout=self.config.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise CompileError(
                "Compile service request failed",
                context={"url": self.url, "board": board, "reason": str(e)},
                suggestions=[
                    "Check that the compile service is running",
                    "Verify compile.url in .wiresim.toml",
                ],
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise CompileError(
                "Compile service returned invalid JSON",
                context={"url": self.url, "board": board},
            ) from e

        if not isinstance(data, dict) or "success" not in data:
            raise CompileError(
                "Unexpected compile service response",
                context={"url": self.url, "board": board, "response": str(data)[:200]},
            )

        result = CompileResult(
            success=bool(data.get("success")),
            hex=data.get("hex") or "",
            stdout=data.get("stdout") or "",
            stderr=data.get("stderr") or "",
            board=board,
        )
        if result.success:
            logger.info(f"Compile succeeded ({len(result.hex)} chars of HEX)")
        else:
            logger.warning(f"Compile failed for board {board}")
        return result

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
