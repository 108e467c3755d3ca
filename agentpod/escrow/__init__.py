"""
AgentPod Escrow Module

Escrow agreements and their lifecycle.
"""

from .ledger import EscrowLedger, validate_amount

__all__ = ["EscrowLedger", "validate_amount"]
