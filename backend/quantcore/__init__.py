"""Core logic for indicator snapshots and trade-outcome evaluation.

This package contains pure business logic with no I/O dependencies
(no database or network access). The service layer (quantdesk/) wires it
to a candle provider and a recommendation store.
"""
