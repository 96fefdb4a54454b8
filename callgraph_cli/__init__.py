"""callgraph-cli: render LSP call hierarchies as DOT and Mermaid diagrams."""

from .generator import GraphGenerator

__version__ = "0.3.0"

__all__ = ["GraphGenerator", "__version__"]
