"""FPD Validator -- schema-driven filtering of ORTB2 first-party data.

Walks the global and per-bidder first-party data trees against a schema
table and returns only the conforming subset, logging a diagnostic for
every field or array element it drops.  Privacy-sensitive fields are
removed whenever the user has opted out.
"""

__version__ = "0.1.0"
