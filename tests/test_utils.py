import logging

from proteovariant.utils.file_utils import create_uuid_filename, write_text
from proteovariant.utils.logger import get_logger, setup_logging


def test_create_uuid_filename():
    first = create_uuid_filename("sample-1", ".tsv")
    second = create_uuid_filename("sample-1", ".tsv")
    assert first.startswith("sample-1-")
    assert first.endswith(".tsv")
    assert first != second


def test_write_text_creates_folders(tmp_path):
    path = tmp_path / "a" / "b" / "out.tsv"
    write_text(path, "x\ty\n")
    assert path.read_text(encoding="utf-8") == "x\ty\n"


def test_setup_logging_to_file(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging("DEBUG", log_file=str(log_file))
    get_logger("proteovariant.test").debug("written to file")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "written to file" in log_file.read_text()
    assert "| proteovariant.test |" in log_file.read_text()
    setup_logging("INFO")
