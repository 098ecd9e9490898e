from __future__ import annotations
from pathlib import Path
from typing import Callable
import pytest
from lxml import etree

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def read_test_file() -> Callable[[str], bytes]:
    def _read(name: str) -> bytes:
        return (DATA_DIR / name).read_bytes()
    return _read


@pytest.fixture(scope="session")
def b2mml_schema() -> etree.XMLSchema:
    return etree.XMLSchema(etree.parse(str(DATA_DIR / "b2mml_subset.xsd")))


@pytest.fixture
def assert_schema_valid(b2mml_schema: etree.XMLSchema) -> Callable[[bytes], None]:
    def _validate(xml_bytes: bytes) -> None:
        doc = etree.fromstring(xml_bytes)
        assert b2mml_schema.validate(doc), str(b2mml_schema.error_log)
    return _validate
