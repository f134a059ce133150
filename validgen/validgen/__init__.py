"""validgen - compile `validate` struct tags into Go Validate() methods."""

__version__ = "0.1.0"
