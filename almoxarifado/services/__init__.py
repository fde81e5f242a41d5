"""Business services: catalog, movement ledger, loans, users and audit."""
