"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- Supplier credentials are not available (local development)
- We want to test the fulfillment flow end-to-end without external dependencies

Important:
- Mock clients must follow the SAME SupplierAdapter interface as real HTTP clients.
- Mock clients should return results shaped according to src/integrations/contracts/*

Switching to real:
The sandbox supplier is just another SupplierId; pick the active supplier through
the admin settings endpoint (or the default in config/storefront.yml).
"""
