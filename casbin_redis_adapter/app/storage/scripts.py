"""
Lua scripts for read-modify-write operations on the rule list.

Each script runs as one EVAL, so Redis executes it without interleaving
commands from other clients. KEYS[1] is always the rule list.
"""

# Marks slots for removal inside a single script run. A stored record equal
# to this literal would be removed too.
DELETED_SENTINEL = "__CASBIN_DELETED__"


# ARGV[1] old record, ARGV[2] new record. Returns 1 if a slot changed.
UPDATE_RULE = """
local key = KEYS[1]
local old = ARGV[1]
local new = ARGV[2]

local r = redis.call('lrange', key, 0, -1)
for i = 1, #r do
    if r[i] == old then
        redis.call('lset', key, i - 1, new)
        return 1
    end
end
return 0
"""

# ARGV[1..n] old records, ARGV[n+1..2n] new records. Returns slots changed.
UPDATE_RULES = """
local key = KEYS[1]
local len = #ARGV / 2

local map = {}
for i = 1, len do
    map[ARGV[i]] = ARGV[i + len]
end

local changed = 0
local r = redis.call('lrange', key, 0, -1)
for i = 1, #r do
    local replacement = map[r[i]]
    if replacement ~= nil then
        redis.call('lset', key, i - 1, replacement)
        changed = changed + 1
    end
end
return changed
"""

# ARGV[1] Lua pattern, ARGV[2] sentinel. Returns slots removed.
REMOVE_FILTERED = """
local key = KEYS[1]
local pattern = ARGV[1]
local sentinel = ARGV[2]

local removed = 0
local r = redis.call('lrange', key, 0, -1)
for i = 1, #r do
    if string.find(r[i], pattern) then
        redis.call('lset', key, i - 1, sentinel)
        removed = removed + 1
    end
end
if removed > 0 then
    redis.call('lrem', key, 0, sentinel)
end
return removed
"""

# ARGV[1] Lua pattern, ARGV[2] sentinel, ARGV[3..] new records.
# Returns the removed records.
UPDATE_FILTERED = """
local key = KEYS[1]
local pattern = ARGV[1]
local sentinel = ARGV[2]

local removed = {}
local r = redis.call('lrange', key, 0, -1)
for i = 1, #r do
    if string.find(r[i], pattern) then
        table.insert(removed, r[i])
        redis.call('lset', key, i - 1, sentinel)
    end
end
if #removed > 0 then
    redis.call('lrem', key, 0, sentinel)
end

for i = 3, #ARGV do
    redis.call('rpush', key, ARGV[i])
end

return removed
"""
