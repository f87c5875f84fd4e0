"""Read arithmetic expressions from text files and archives."""
from pathlib import Path
import tarfile
import tempfile
from typing import List, Tuple
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath

from expression_calculator.common.logger import logger


class ExpressionFileReader(BaseModel):
    """
    Load expressions, one per line, from a plain text file or an archive.

    Supported inputs:
    - .txt files, read directly
    - .zip, .tar.xz and .7z archives, from which the first .txt member is read

    Blank lines are dropped; surrounding whitespace is stripped.
    """

    model_config = ConfigDict(frozen=True)

    encoding: str = Field(default="utf-8", description="Encoding of the expression files")

    def read_expressions(self, input_file: FilePath) -> List[str]:
        """
        Return the non-empty lines of ``input_file``.

        :param FilePath input_file: Path to the input file or archive

        :return: Expressions in file order
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        return [expression for _, expression in self.read_numbered_expressions(input_file)]

    def read_numbered_expressions(self, input_file: FilePath) -> List[Tuple[int, str]]:
        """
        Return the non-empty lines of ``input_file`` with their 1-based line numbers.

        Numbers count the blank lines that were dropped, so they match the file.

        :param FilePath input_file: Path to the input file or archive

        :return: ``(line_number, expression)`` pairs in file order
        :rtype: List[Tuple[int, str]]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        input_file = Path(input_file)
        if input_file.suffix == ".txt":
            content = input_file.read_text(encoding=self.encoding)
        else:
            content = self._extract_archive(input_file)

        expressions = [
            (line_number, line.strip())
            for line_number, line in enumerate(content.splitlines(), start=1)
            if line.strip()
        ]
        logger.info("📄 Read %d expressions from %s", len(expressions), input_file)
        return expressions

    def _extract_archive(self, archive_path: Path) -> str:
        """
        Extract the first .txt file found in a supported archive and return its content as a string.

        :param Path archive_path: Path to the archive file

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        # Extract into a temporary directory so nothing leaks next to the input
        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)

            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    txt_files = [f for f in zf.namelist() if f.endswith(".txt")]
                    if not txt_files:
                        raise ValueError("📄❌ No .txt file found in zip archive")
                    zf.extract(txt_files[0], path=tmpdir_path)
                    return (tmpdir_path / txt_files[0]).read_text(encoding=self.encoding)

            elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    txt_files = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
                    if not txt_files:
                        raise ValueError("📄❌ No .txt file found in tar.xz archive")
                    tf.extract(txt_files[0], path=tmpdir_path, filter="data")
                    return (tmpdir_path / txt_files[0].name).read_text(encoding=self.encoding)

            elif archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    txt_files = [f for f in archive.getnames() if f.endswith(".txt")]
                    if not txt_files:
                        raise ValueError("📄❌ No .txt file found in 7z archive")
                    archive.extract(path=tmpdir_path, targets=[txt_files[0]])
                    return (tmpdir_path / txt_files[0]).read_text(encoding=self.encoding)

            else:
                raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")
