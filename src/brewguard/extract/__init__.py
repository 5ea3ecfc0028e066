"""AI extraction and canonical record models, sources and file I/O."""

from brewguard.extract.io import FileCanonicalSource, read_canonical, read_extraction, write_outcome
from brewguard.extract.models import (
    AIExtraction,
    BeerFields,
    BreweryFields,
    CandidateBeer,
    CandidateBrewery,
    CanonicalBrewery,
    CanonicalProduct,
    LabelData,
    WebVerification,
)
from brewguard.extract.sources import CanonicalSource, StaticCanonicalSource

__all__ = [
    "AIExtraction",
    "BeerFields",
    "BreweryFields",
    "CandidateBeer",
    "CandidateBrewery",
    "CanonicalBrewery",
    "CanonicalProduct",
    "CanonicalSource",
    "FileCanonicalSource",
    "LabelData",
    "StaticCanonicalSource",
    "WebVerification",
    "read_canonical",
    "read_extraction",
    "write_outcome",
]
