"""dev-workspaces: declarative workspace/project checkouts driven by a YAML tree."""

__version__ = "0.1.0"
