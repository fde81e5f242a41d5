"""Almoxarifado: warehouse stock ledger and equipment loans."""
