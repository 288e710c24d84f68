"""
Mock integration backends.

The rental mock is a FastAPI app that answers like the real backend without
any network. It is used when:
- The real backend is not reachable from the development machine
- We want to test the clients end-to-end (URL building, retry, envelope
  validation) without external dependencies

Important:
- The mock serves the SAME endpoints and envelope as the real backend, so the
  real HTTP clients are used unchanged against it.
- Response bodies are shaped according to src/integrations/contracts/*

Switching to real:
Pass no transport to build_rental_api (src/integrations/rental_api.py) and the
clients talk to RENTAL_API_URL instead.
"""
