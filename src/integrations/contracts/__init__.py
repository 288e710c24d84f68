"""
Contracts (data models).

This folder defines the request/response shapes of the rental backend.
Examples:
- Rental order create/list/search payloads
- Contract, annex and signature formats
- Settlement and handover report formats

Why this exists:
- Ensures consistent data structures across the HTTP clients and the mock backend
- Wire JSON is camelCase, Python attributes are snake_case (ApiModel aliases)

Both the HTTP clients and the mock backend use these contracts.
"""
