"""
Sourcing requests module.

Scope:
- Requests CRUD (list + create + detail + edit/update + delete)
- Append-only request notes (added with a create/update or on their own)
- Requests belong to the default (seeded demo) customer
"""
