# Path and File Name : /home/datastack/rebuild/datastack_installer/fetch/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Artifact fetch package initialization

"""
Artifact Fetch Package: downloads, extracts and places component archives.
"""

from .artifact_fetcher import ArtifactFetcher

__all__ = ['ArtifactFetcher']
