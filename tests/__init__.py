"""Test suite for the conference service.

Unit tests under ``unit/`` cover the store adapters, the decision
model, the assignment engine and the dashboard aggregations.  The
``integration/`` tests drive the HTTP API through TestClient.  To run
the tests, execute `pytest` from the project root.
"""
