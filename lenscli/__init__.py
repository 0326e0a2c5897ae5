"""
lenscli.

Command-line client for a Kafka-management control plane.

Architecture:
- CLI is a thin presentation layer
- All state lives in the remote control plane
- CLI calls the control plane via HTTP (httpx)
- Every command: validate flags -> resolve payload -> one remote call -> print
"""

__version__ = "0.4.0"
