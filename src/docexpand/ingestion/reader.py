"""
Documentation corpus reader.

Loads Markdown/MDX documents below a directory and keys each one by its
POSIX path relative to that directory.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Union

from docexpand.logger import get_default_logger


logger = get_default_logger()


DEFAULT_PATTERNS = ("*.md", "*.mdx")


class CorpusReader:
    """
    Reader for a directory of documentation sources.

    Hidden files and directories (names starting with ".") are skipped.
    """
    
    def __init__(
        self,
        directory: Union[str, Path],
        patterns: Iterable[str] = DEFAULT_PATTERNS,
    ):
        """
        Initialize corpus reader.
        
        Args:
            directory: Corpus root directory
            patterns: Glob patterns of document files (default: *.md, *.mdx)
        
        Raises:
            FileNotFoundError: If the directory doesn't exist
            ValueError: If the path is not a directory
        """
        self.directory = Path(directory)
        self.patterns = tuple(patterns)
        
        if not self.directory.exists():
            raise FileNotFoundError(f"Directory not found: {self.directory}")
        
        if not self.directory.is_dir():
            raise ValueError(f"Not a directory: {self.directory}")
    
    def document_key(self, file_path: Path) -> str:
        """
        Key of a document file.
        
        Example:
            >>> CorpusReader("docs").document_key(Path("docs/guide/quick-start.mdx"))
            'guide/quick-start.mdx'
        """
        return file_path.relative_to(self.directory).as_posix()
    
    def list_files(self) -> List[Path]:
        """List matching document files, sorted by key."""
        files = set()
        for pattern in self.patterns:
            for file_path in self.directory.rglob(pattern):
                relative = file_path.relative_to(self.directory)
                if any(part.startswith(".") for part in relative.parts):
                    continue
                if file_path.is_file():
                    files.add(file_path)
        return sorted(files, key=self.document_key)
    
    def read_documents(self) -> Dict[str, str]:
        """
        Read every document of the corpus.
        
        Line endings are normalized to ``\\n``.
        
        Returns:
            Dictionary mapping document keys to raw text
        
        Raises:
            UnicodeDecodeError: If a document is not valid UTF-8
            OSError: If a document cannot be read
        
        Example:
            >>> documents = CorpusReader("docs").read_documents()
            >>> sorted(documents)
            ['delta-batch.md', 'quick-start.mdx']
        """
        files = self.list_files()
        logger.info(f"Found {len(files)} documents in {self.directory}")
        
        documents = {}
        for file_path in files:
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    documents[self.document_key(file_path)] = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to read {file_path}: {e}")
                raise
        
        logger.info(f"Read {len(documents)} documents")
        return documents


def read_corpus_directory(
    directory: Union[str, Path],
    patterns: Iterable[str] = DEFAULT_PATTERNS,
) -> Dict[str, str]:
    """
    Convenience function to read every document in a directory.
    
    Args:
        directory: Corpus root directory
        patterns: Glob patterns of document files
    
    Returns:
        Dictionary mapping document keys to raw text
    """
    return CorpusReader(directory, patterns).read_documents()
