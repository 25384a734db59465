"""
Storage package for the Redis adapter.

Provides the connection providers (single connection or pool) and the Lua
scripts used for atomic list mutation.
"""
