"""
Subscriptions package - mirrors payment provider subscription state locally.

This package integrates with:
- Dodo Payments: checkout sessions, subscription lookups and cancellation

Provider state reaches the local store three ways: webhooks, on-demand status
queries, and the periodic sweep. All three go through the reconciliation
engine in services/reconciliation.py.
"""
