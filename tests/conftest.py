"""Test configuration and fixtures for the utree toolkit.

This module provides shared fixtures that build small tree bundles on disk.
All test files should use the fixtures defined here for consistency.
"""

import pytest
import tempfile
import shutil
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from lxml import etree as ET

from utree_toolkit.config import ConfigManager

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


SAMPLE_PROCESS = """<?xml version="1.0" encoding="UTF-8"?>
<process-definition name="Sample" lang="English">
  <start-state name="start">
    <transition to="textDisplay~Welcome{br}to the tree"/>
  </start-state>
  <task-node name="textDisplay~Welcome{br}to the tree">
    <transition to="radioButtons~Pick a colour"/>
  </task-node>
  <task-node name="radioButtons~Pick a colour">
    <task name="Red"/>
    <task name="Blue"/>
    <transition name="Red" to="textFieldWithAnswer~Two plus two?Answer=4|four"/>
    <transition name="Blue" to="end-blue"/>
  </task-node>
  <task-node name="textFieldWithAnswer~Two plus two?Answer=4|four">
    <transition name="Yes" to="checkList~2~Tick at least two"/>
    <transition name="No" to="end-wrong"/>
  </task-node>
  <task-node name="checkList~2~Tick at least two">
    <task name="One"/>
    <task name="Two"/>
    <task name="Three"/>
    <transition name="Yes" to="end-done"/>
    <transition name="No" to="end-wrong"/>
  </task-node>
  <end-state name="end-blue"/>
  <end-state name="end-wrong"/>
  <end-state name="end-done"/>
</process-definition>
"""

FILIPINO_TRANSLATIONS = {
    "Welcome": "Maligayang pagdating",
    "Pick a colour": "Pumili ng kulay",
    "Red": "Pula",
}


def write_catalog(path: Path, entries: Dict[str, str]) -> Path:
    """Write a ``resources/string[@name]`` catalog with lxml."""
    root = ET.Element("resources")
    for key, value in entries.items():
        element = ET.SubElement(root, "string", name=key)
        element.text = value
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(ET.tostring(root, xml_declaration=True, encoding="utf-8"))
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point user overrides at an empty directory and reset the singleton."""
    config_dir = tmp_path_factory.mktemp("user_config")
    monkeypatch.setenv("UTREE_CONFIG_DIR", str(config_dir))
    ConfigManager._instance = None
    yield config_dir
    ConfigManager._instance = None


@pytest.fixture
def temp_dir():
    """Creates a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def make_bundle(temp_dir):
    """Factory building an unpacked bundle directory.

    Parameters of the returned callable:
    - process_xml: content of ``<name>.xml`` (None to omit the file)
    - name: bundle title (folder is ``<name>.utree``)
    - translations / hints: language -> {key: text}
    - files: relative paths of empty media files to create
    """
    def factory(
        process_xml: Optional[str] = SAMPLE_PROCESS,
        name: str = "Sample",
        translations: Optional[Dict[str, Dict[str, str]]] = None,
        hints: Optional[Dict[str, Dict[str, str]]] = None,
        files: Iterable[str] = (),
    ) -> Path:
        root = temp_dir / f"{name}.utree"
        root.mkdir(parents=True, exist_ok=True)
        if process_xml is not None:
            (root / f"{name}.xml").write_text(process_xml, encoding="utf-8")
        for language, entries in (translations or {}).items():
            write_catalog(root / "trans" / f"{language}.xml", entries)
        for language, entries in (hints or {}).items():
            write_catalog(root / "hints" / f"{language}.xml", entries)
        for relative in files:
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"")
        return root
    return factory


@pytest.fixture
def sample_bundle(make_bundle):
    """The sample tree with a Filipino catalog and English hints."""
    return make_bundle(
        translations={"Filipino": FILIPINO_TRANSLATIONS},
        hints={"English": {"Colour": "A property of light"}},
    )
