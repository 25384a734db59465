"""
Policy record package.

Defines the canonical stored form of a policy rule and the two pattern
builders that match against it:

- models: CasbinRule codec and the Filter used by filtered loads.
- patterns: regex patterns for client-side filtering and Lua patterns for
  server-side filtered removal.
"""
