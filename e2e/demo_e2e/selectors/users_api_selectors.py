# e2e/demo_e2e/selectors/users_api_selectors.py

USERS_API_URL = "https://api.smaregi.dev/app/users"
TOKEN_VARIABLE = "api_token"

USERS_FIELD = "users"
USER_FIELDS = (
    "contract_id",
    "user_id",
    "email",
    "name",
    "status",
    "created",
    "modified",
)

# 任意のクエリ（limit, offset, contract_id, user_id, email）
QUERY_KEYS = ("limit", "offset", "contract_id", "user_id", "email")
