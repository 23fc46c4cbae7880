"""
Corpus loading and writing.
"""

from docexpand.ingestion.reader import CorpusReader, read_corpus_directory
from docexpand.ingestion.writer import CorpusWriter, write_corpus

__all__ = ["CorpusReader", "CorpusWriter", "read_corpus_directory", "write_corpus"]
