"""Receipt processing components for the ledger app.

This package contains:
- Receipt text extraction (merchant, amount, date, category)
- PDF attachment decoding
- IMAP mailbox access and ingestion orchestration
- Ledger writing for extracted receipts
- Bank statement CSV parsing and reconciliation matching
"""
