"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that every feature uses (settings, DB
wiring, SQL helpers, pagination, response/error envelopes, logging). Keep
feature-specific SQL and business logic in the corresponding feature package
(e.g. `companies/`).
"""
