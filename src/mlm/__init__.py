"""mlm — music app backend: database tooling and the user/room store layer."""

__version__ = "0.1.0"
