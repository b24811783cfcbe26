"""
Real HTTP supplier clients.

These clients communicate with the wholesale data suppliers over HTTP:
- DataXpress (clients/real_http/dataxpress.py)
- Hubnet (clients/real_http/hubnet.py)

Important:
- Must implement the same SupplierAdapter interface as the mock clients
- Must return results shaped according to src/integrations/contracts/*
- Each client owns its unit conversion; do not share it between suppliers

Wiring:
Adapters are built from config/storefront.yml in src/api/main.py only.
"""
