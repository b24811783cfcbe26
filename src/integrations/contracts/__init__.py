"""
Contracts (data models).

This folder defines the request/response shapes for external integrations.
Examples:
- Supplier purchase / balance / cost-price results
- Order payment and fulfillment lifecycles
- Payment gateway webhook payloads

Why this exists:
- Ensures consistent data structures across mock and real supplier clients
- Prevents "guessing" payload formats in multiple places
- The fulfillment service relies on stable models, not on ad-hoc dicts

Both mock and real HTTP clients should use these contracts.
"""
