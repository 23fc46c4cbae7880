"""
Assembled document writing.

Writes assembled documents to an output directory mirroring their keys,
optionally under a versioned subdirectory, plus a JSON manifest describing
each document's code-tab groups for downstream renderers.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from docexpand.logger import get_default_logger
from docexpand.models import Document


logger = get_default_logger()


MANIFEST_FILENAME = "manifest.json"


class CorpusWriter:
    """
    Writer for assembled documents.
    """
    
    def __init__(self, output_dir: Union[str, Path], overwrite: bool = False):
        """
        Initialize corpus writer.
        
        Args:
            output_dir: Directory to write documents into
            overwrite: Whether to overwrite existing files
        """
        self.output_dir = Path(output_dir)
        self.overwrite = overwrite
    
    def write(self, document: Document) -> Path:
        """
        Write one document.
        
        Args:
            document: Assembled document
        
        Returns:
            Path of the written file
        
        Raises:
            FileExistsError: If the file exists and overwrite=False
            ValueError: If the key escapes the output directory
        """
        output_path = (self.output_dir / document.key).resolve()
        if self.output_dir.resolve() not in output_path.parents:
            raise ValueError(f"Document key escapes output directory: {document.key}")
        
        if output_path.exists() and not self.overwrite:
            raise FileExistsError(
                f"Output file already exists: {output_path}. "
                f"Use overwrite=True to replace."
            )
        
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(document.text)
        
        logger.debug(f"Wrote {document.key} to {output_path}")
        return output_path
    
    def write_all(self, documents: Mapping[str, Document]) -> List[Path]:
        """Write documents in key order."""
        paths = [self.write(documents[key]) for key in sorted(documents)]
        logger.info(f"Wrote {len(paths)} documents to {self.output_dir}")
        return paths
    
    def write_manifest(self, documents: Mapping[str, Document], version: Optional[str] = None) -> Path:
        """
        Write a JSON manifest of the assembled documents.
        
        Args:
            documents: Assembled documents
            version: Release version the corpus was assembled for
        
        Returns:
            Path to the manifest file
        """
        manifest_path = self.output_dir / MANIFEST_FILENAME
        if manifest_path.exists() and not self.overwrite:
            raise FileExistsError(f"Manifest already exists: {manifest_path}")
        
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(build_manifest(documents, version), f, indent=2, sort_keys=True)
        
        return manifest_path


def build_manifest(documents: Mapping[str, Document], version: Optional[str] = None) -> Dict[str, Any]:
    """
    Describe assembled documents for downstream rendering.
    
    Example:
        >>> build_manifest({})
        {'version': None, 'documents': {}}
    """
    return {
        "version": version,
        "documents": {
            key: {
                "anchors": sorted(documents[key].anchors),
                "tab_groups": [
                    {"line": group.line, "languages": list(group.languages)}
                    for group in documents[key].tab_groups
                ],
            }
            for key in sorted(documents)
        },
    }


def create_versioned_directory(base_path: Union[str, Path], version: str) -> Path:
    """
    Create a versioned output directory.
    
    Example:
        >>> create_versioned_directory("site-src", "3.5.0")
        PosixPath('site-src/3.5.0')
    """
    versioned_path = Path(base_path) / version
    versioned_path.mkdir(parents=True, exist_ok=True)
    
    logger.debug(f"Created versioned directory: {versioned_path}")
    return versioned_path


def write_corpus(
    documents: Mapping[str, Document],
    output_dir: Union[str, Path],
    version: Optional[str] = None,
    versioned: bool = False,
    overwrite: bool = False,
    manifest: bool = True,
) -> List[Path]:
    """
    Convenience function to write assembled documents.
    
    Args:
        documents: Assembled documents keyed by document key
        output_dir: Output directory
        version: Release version (used for the versioned directory and manifest)
        versioned: Write under ``output_dir/version``
        overwrite: Whether to overwrite existing files
        manifest: Whether to write manifest.json
    
    Returns:
        Paths of the written documents
    """
    output_dir = Path(output_dir)
    if versioned:
        if not version:
            raise ValueError("A version is required for versioned output")
        output_dir = create_versioned_directory(output_dir, version)
    
    writer = CorpusWriter(output_dir, overwrite=overwrite)
    paths = writer.write_all(documents)
    if manifest:
        writer.write_manifest(documents, version)
    return paths
