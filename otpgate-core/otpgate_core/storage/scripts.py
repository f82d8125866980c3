"""
Redis Lua Scripts
=================
Server-side scripts that keep multi-step updates atomic.
"""

# Sliding window hit on a sorted set scored by timestamp.
# KEYS[1] window key
# ARGV[1] now, ARGV[2] window seconds, ARGV[3] limit, ARGV[4] unique member
# Returns {allowed, count, oldest} with oldest as a string ("" when empty).
SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)

if count >= limit then
    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    local oldest_score = ''
    if #oldest > 0 then
        oldest_score = oldest[2]
    end
    return {0, count, oldest_score}
end

redis.call('ZADD', key, now, member)
redis.call('PEXPIRE', key, math.ceil(window * 1000))

local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
return {1, count + 1, oldest[2]}
"""
