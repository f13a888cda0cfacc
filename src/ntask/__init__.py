"""ntask: schema-aware CLI for task databases on the Notion API."""

__version__ = "0.1.0"
