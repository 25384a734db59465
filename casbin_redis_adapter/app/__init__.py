"""
Redis adapter implementation.

- adapter: the Casbin adapter operations over one Redis list
- legacy: deprecated constructors translating to AdapterConfig
- rules: record codec, filters and pattern builders
- storage: connection providers and Lua scripts
"""
