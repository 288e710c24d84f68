"""
Real HTTP integration clients.

These clients communicate with the rental backend via HTTP:
- rental orders, contracts, annexes, settlements, handover reports
- the public device-model catalog

Important:
- All I/O goes through transport.ApiTransport (retry, headers, timeouts)
- Every response is checked by policy/response_wrappers.validate_envelope
- Must return data shaped according to src/integrations/contracts/*

Switching:
The transport (network or mock backend) is chosen in src/integrations/rental_api.py only.
"""
