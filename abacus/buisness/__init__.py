"""
Business layer for the depreciation ledger.
Validation, schedule generation and the asset lifecycle rules live here,
separated from persistence (abacus.data) and HTTP (abacus.presentation).
"""
