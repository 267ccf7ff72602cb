"""context-analyzer: extract the call tree of a Rust function as a context bundle."""

__version__ = "0.1.0"
