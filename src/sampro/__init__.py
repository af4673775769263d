"""
SAM Pro — daily-report ledger for textile manufacturing.

All state lives in one JSON document on the local disk: master data
(colors, models, material types, barcodes, items, sizes, categories,
seasons), daily production reports, company settings and users.

Package layout (src/sampro/):
  core/         — config, models, session, reports, backup, spreadsheet
  core/store/   — durable storage, migration engine, persistent value, facade
  cli/          — Click CLI entry point
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
