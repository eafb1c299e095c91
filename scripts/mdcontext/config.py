"""
Per-book settings from an optional book.yaml next to SUMMARY.md.

    summary: SUMMARY.md         # manifest, relative to the book directory
    title: ""                   # overrides the manifest's level-1 heading
    toc_macro: mdcontextplacetoc
    footnotes: true
    strict: false
    pdf:
      engine: context
      args: [--batchmode, --purgeall]

Every field is optional; a book without book.yaml builds with DEFAULTS.
"""

import copy
import os

import yaml

from mdcontext.errors import ConfigError


CONFIG_FILENAME = "book.yaml"

# Field defaults; a value given in book.yaml must have the same type
DEFAULTS = {
    "summary": "SUMMARY.md",
    "title": "",
    "toc_macro": "mdcontextplacetoc",
    "footnotes": True,
    "strict": False,
    "pdf": {},
}

PDF_DEFAULTS = {
    "engine": "context",
    "args": ["--batchmode", "--purgeall"],
}


class BookConfig:
    """
    Settings of one book, defaults filled in.

    Fields read as attributes (config.summary, config.pdf["engine"]);
    unknown book.yaml keys are kept and reachable through get().
    """

    def __init__(self, data, book_dir):
        self._data = data
        self.book_dir = book_dir

    @classmethod
    def load(cls, book_dir):
        """Read book.yaml from `book_dir`. Raises ConfigError."""
        yaml_path = os.path.join(book_dir, CONFIG_FILENAME)
        if not os.path.isfile(yaml_path):
            return cls.defaults(book_dir)

        try:
            with open(yaml_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{CONFIG_FILENAME} is not valid YAML: {e}", path=yaml_path) from e
        except OSError as e:
            raise ConfigError(f"failed to read {CONFIG_FILENAME}: {e}", path=yaml_path) from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"{CONFIG_FILENAME} must be a YAML mapping, got {type(data).__name__}",
                path=yaml_path,
            )

        mistyped = [
            key for key, default in DEFAULTS.items()
            if key in data and not isinstance(data[key], type(default))
        ]
        if mistyped:
            raise ConfigError(
                f"{CONFIG_FILENAME} has fields of the wrong type: {', '.join(mistyped)}",
                path=yaml_path,
            )

        return cls(_fill_defaults(data), book_dir)

    @classmethod
    def defaults(cls, book_dir):
        return cls(_fill_defaults({}), book_dir)

    # ── Field access ───────────────────────────────────────

    def __getattr__(self, name):
        # _data itself is looked up here before __init__ has set it
        if name.startswith("_") or name not in self._data:
            raise AttributeError(f"no config field '{name}'")
        return self._data[name]

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    def get(self, key, default=None):
        return self._data.get(key, default)

    def override(self, **values):
        """Apply command-line overrides; None means "not given"."""
        self._data.update({k: v for k, v in values.items() if v is not None})

    # ── Derived values ─────────────────────────────────────

    @property
    def summary_path(self):
        return os.path.join(self.book_dir, self.summary)

    def print_summary(self):
        print(f"\n  Source:  {self.book_dir}")
        print(f"  Summary: {self.summary}")
        if self.title:
            print(f"  Title:   {self.title}")
        if self.strict:
            print("  Mode:    strict")


def _fill_defaults(data):
    """Add missing fields to a book.yaml mapping, copying mutable defaults."""
    for key, default in DEFAULTS.items():
        data.setdefault(key, copy.deepcopy(default))
    for key, default in PDF_DEFAULTS.items():
        data["pdf"].setdefault(key, copy.deepcopy(default))
    return data
