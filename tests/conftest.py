"""
Shared pytest fixtures and configuration for FlowSpace tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))


def make_llm(content, usage=None):
    """
    Build a mock chat model whose invoke() returns ``content``.

    Args:
        content: Completion text, or a dict/list that gets JSON-encoded
        usage: Optional usage_metadata dict
    """
    if not isinstance(content, str):
        content = json.dumps(content)

    response = MagicMock()
    response.content = content
    response.usage_metadata = usage

    llm = MagicMock()
    llm.invoke.return_value = response
    return llm


@pytest.fixture
def mock_llm():
    """Fixture returning the make_llm factory."""
    return make_llm


@pytest.fixture
def sample_quiz():
    return [
        {"q": "What does the mitochondria produce?", "a": "ATP"},
        {"q": "Where does photosynthesis happen?", "a": "In the chloroplasts"},
        {"q": "Which gas do plants take in?", "a": "Carbon dioxide"},
    ]


@pytest.fixture
def sample_checkin():
    return {
        "validation": "Feeling tired after a long week makes complete sense.",
        "tiny_step": "Drink a glass of water and stretch for one minute.",
        "reminder": "Rest is allowed. Your worth isn't measured in output.",
    }


@pytest.fixture
def sample_plan():
    return {
        "do_first": [
            {"task": "Read chapter 3 intro", "minutes": 15, "reason": "A small, easy start"}
        ],
        "do_next": [
            {"task": "Calc problem set (first 5)", "minutes": 25, "reason": "Build momentum"}
        ],
        "if_time": [
            {"task": "Tidy notes", "minutes": 10, "reason": "Nice to have"}
        ],
        "summary": "Start tiny with the reading, then ease into calc. Anything else is a bonus.",
    }


@pytest.fixture
def store(tmp_path):
    """Fixture providing a FlowSpaceStore in a temporary directory."""
    from flowspace.utils.persistence import FlowSpaceStore

    return FlowSpaceStore(data_dir=tmp_path / "data")


@pytest.fixture(autouse=True)
def reset_token_tracker():
    """
    Auto-fixture to reset token tracker before each test.

    This ensures tests don't interfere with each other.
    """
    from flowspace.config import token_tracker

    token_tracker.reset()
    yield
    token_tracker.reset()


def build_pdf(text: str = None) -> bytes:
    """
    Build a one-page PDF, optionally with a line of Helvetica text.

    Offsets in the xref table are computed so readers need no recovery.
    """
    content = f"BT /F1 18 Tf 72 720 Td ({text}) Tj ET".encode() if text else b""
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(content)).encode() + b" >>\nstream\n"
        + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    pdf = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += f"xref\n0 {len(objects) + 1}\n".encode()
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += f"{offset:010d} 00000 n \n".encode()
    pdf += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode()
    return pdf


@pytest.fixture
def pdf_bytes():
    """Fixture returning the build_pdf factory."""
    return build_pdf


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
