"""
Checkout finalization split by responsibility: pricing lives in services.pricing,
payment capture in the per-method modules, persistence in order_writer and the
state machine in orchestrator.
"""
