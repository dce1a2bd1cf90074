"""Scripts Lua executados no Redis.

Cada script roda de forma atômica no servidor: nenhum outro comando sobre a
mesma chave é intercalado durante a execução.
"""

# KEYS[1] = chave prefixada do token
# ARGV[1] = valor sentinela esperado
# Retorna 1 se a chave existia com o sentinela e foi removida, 0 caso contrário.
CHECK_AND_DELETE_SCRIPT = """
local key = KEYS[1]
local expected = ARGV[1]

if redis.call('GET', key) == expected then
    return redis.call('DEL', key)
end

return 0
"""
