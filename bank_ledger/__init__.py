"""Bank ledger: customers, accounts and atomic money movement."""
