from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixture_text():
    def _read(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")

    return _read


def scxml(body: str, attrs: str = "") -> str:
    """Wrap body in a namespaced SCXML 1.0 root."""
    return (
        f'<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0"{attrs}>'
        f"{body}</scxml>"
    )
