"""Dunning Coordinator: overdue balance reconciliation for triPica billing."""
