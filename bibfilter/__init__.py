"""Boolean block-query filtering for BibTeX bibliographies."""

__version__ = "0.3.0"
