"""
mdbook configuration: load book.toml and derive mdbook-rfc project settings.

The same Config type wraps the configuration mdbook sends in the
preprocessor handshake and the book.toml read by the project subcommands.
"""

import copy
import os
import tomllib

from rfcbook.errors import ConfigError


CONFIG_FILE = "book.toml"

# Project folders created by `install` (relative to the book root)
DEFAULT_FOLDERS = {
    "text_folder": "text",
    "vendor_folder": "public",
    "template_folder": "template",
}

# mdbook's own default for book.src
DEFAULT_SRC = "src"


class Config:
    """
    mdbook configuration tree.

    Usage:
        config = Config.from_disk(book_root)
        config.book["title"]                 # "My RFCs"
        config.get("book.src", "src")        # dotted lookup
        config.get_preprocessor("rfc")       # {} or None
    """

    def __init__(self, data):
        self._data = data

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        return cls(data)

    @classmethod
    def from_disk(cls, book_root):
        """Load book.toml from a book root directory."""
        toml_path = os.path.join(book_root, CONFIG_FILE)
        if not os.path.exists(toml_path):
            raise ConfigError(f"No {CONFIG_FILE} found in {book_root}")

        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Could not parse {toml_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read {toml_path}: {e}") from e

        return cls(data)

    # ── Access ─────────────────────────────────────────────

    def get(self, key, default=None):
        """Look up a dotted key such as 'book.src' or 'preprocessor.rfc'."""
        node = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    def __eq__(self, other):
        if not isinstance(other, Config):
            return NotImplemented
        return self._data == other._data

    def __repr__(self):
        return f"Config({self._data!r})"

    @property
    def book(self):
        table = self._data.get("book")
        return table if isinstance(table, dict) else {}

    def get_preprocessor(self, name):
        """The [preprocessor.<name>] table, or None if it is not configured."""
        table = self.get(f"preprocessor.{name}")
        return table if isinstance(table, dict) else None

    def to_dict(self):
        return copy.deepcopy(self._data)


class RfcBookConfig:
    """
    Project settings derived from book.toml.

    Usage:
        rfc = RfcBookConfig.from_config(Config.from_disk(root))
        rfc.text_folder     # "text"
        rfc.packages        # ["mdbook-rfc", "mdbook-toc"]
    """

    def __init__(self, text_folder=None, vendor_folder=None, template_folder=None,
                 src_folder=DEFAULT_SRC, preprocessors=None, packages=None):
        self.text_folder = text_folder or DEFAULT_FOLDERS["text_folder"]
        self.vendor_folder = vendor_folder or DEFAULT_FOLDERS["vendor_folder"]
        self.template_folder = template_folder or DEFAULT_FOLDERS["template_folder"]
        self.src_folder = src_folder
        self.preprocessors = list(preprocessors or [])
        self.packages = list(packages or [])

    @classmethod
    def from_config(cls, config):
        """
        Collect preprocessors and the packages that provide them.

        A preprocessor's package is its `command` if one is configured,
        otherwise its table name.
        """
        src = config.get("book.src", DEFAULT_SRC)
        if not isinstance(src, str) or not src:
            raise ConfigError("book.src must be a non-empty string")

        rfc = cls(src_folder=src)

        preprocessors = config.get("preprocessor")
        if preprocessors is None:
            print("Could not find preprocessors to install.")
            return rfc

        if not isinstance(preprocessors, dict):
            raise ConfigError("Could not parse table of preprocessors.")

        for name, params in preprocessors.items():
            package = name
            if isinstance(params, dict) and "command" in params:
                package = params["command"]
                if not isinstance(package, str) or not package:
                    raise ConfigError(
                        f"preprocessor.{name}.command must be a non-empty string"
                    )
            rfc.preprocessors.append(name)
            rfc.packages.append(package)

        return rfc

    @property
    def folders(self):
        """Folders scaffolded by `install`, in creation order."""
        return [self.template_folder, self.text_folder, self.vendor_folder]
