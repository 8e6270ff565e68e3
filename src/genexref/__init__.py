"""Gene identifier cross-reference.

Loads an HGNC-style table and converts between HGNC IDs, gene symbols and
Entrez, RefSeq, UniProt and Ensembl identifiers, correcting gene symbols
that are not found verbatim.

Usage:
    from genexref import open_dictionary

    hgnc = open_dictionary("hgnc_downloads.txt")
    hgnc.symbol2entrez("ASIC1")   # "41"
    hgnc.convert("entrez", "symbol", "8490")   # "RGS5"
"""

from genexref.context import active, convert, convert_all, converter, set_active, using
from genexref.errors import ConfigurationError, DictionaryNotConfigured, DownloadError
from genexref.loader import LoadStats, load, load_file, open_dictionary
from genexref.matrix import ConverterMatrix
from genexref.resolver import CorrectionLog, CorrectionPolicy, CorrectionResolver
from genexref.schema import IdentifierScheme, SchemaRegistry

__all__ = [
    "ConfigurationError",
    "ConverterMatrix",
    "CorrectionLog",
    "CorrectionPolicy",
    "CorrectionResolver",
    "DictionaryNotConfigured",
    "DownloadError",
    "IdentifierScheme",
    "LoadStats",
    "SchemaRegistry",
    "active",
    "convert",
    "convert_all",
    "converter",
    "load",
    "load_file",
    "open_dictionary",
    "set_active",
    "using",
]
