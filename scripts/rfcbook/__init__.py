"""
rfcbook — mdbook preprocessor and project helper behind `mdbook-rfc`.

Public API:
    from rfcbook.handshake import parse_input, write_output, Context
    from rfcbook.book import Book, Chapter, Separator, PartTitle
    from rfcbook.preprocessor import PREPROCESSORS, RfcPreprocessor
    from rfcbook.version import VersionReq, check_compatibility
    from rfcbook.config import Config, RfcBookConfig
    from rfcbook.project import Project
"""

__version__ = "0.1.0"

# mdbook release this plugin is built against
MDBOOK_VERSION = "0.4.21"
