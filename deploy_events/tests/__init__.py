"""
Test suite for deployment event aggregation.

Focus areas:
- Log line translation
- Operation classification against a topology view
- Write-once sparse sequences and range completeness
- Concurrent producers
- Watchers, collector wiring and CLI
"""
