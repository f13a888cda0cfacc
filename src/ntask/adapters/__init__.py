"""Service and export adapters (Notion REST API, openpyxl)."""
