"""lambda/messages.py — User-facing response strings per deployment language.

RC_LOCALE picks the table (helpers.MSG). Activity-feed labels live with the
formatter in shared/activity.py.
"""

MESSAGES = {
    "zh": {
        "health":             "荣诚商家移动管理端 API 运行正常",
        "missing_login":      "请输入邮箱和密码",
        "account_not_found":  "管理员账户不存在或已被禁用",
        "wrong_password":     "密码错误",
        "login_ok":           "登录成功",
        "auth_required":      "需要认证信息",
        "auth_failed":        "认证失败",
        "list_failed":        "获取用户列表失败",
        "missing_fields":     "请填写所有必填字段",
        "password_too_short": "密码长度至少6位",
        "password_too_long":  "密码长度不能超过72字节",
        "bad_store_limit":    "门店数量上限必须是整数",
        "email_taken":        "邮箱已被使用",
        "create_ok":          "用户创建成功",
        "create_failed":      "创建用户失败",
        "not_found":          "接口不存在",
        "internal":           "服务器内部错误",
        "bad_json":           "请求体不是有效的JSON",
    },
    "en": {
        "health":             "Rongcheng merchant admin API is running",
        "missing_login":      "Please enter email and password",
        "account_not_found":  "Admin account does not exist or has been disabled",
        "wrong_password":     "Wrong password",
        "login_ok":           "Login successful",
        "auth_required":      "Authentication required",
        "auth_failed":        "Authentication failed",
        "list_failed":        "Failed to list users",
        "missing_fields":     "Please fill in all required fields",
        "password_too_short": "Password must be at least 6 characters",
        "password_too_long":  "Password must not exceed 72 bytes",
        "bad_store_limit":    "store_limit must be an integer",
        "email_taken":        "Email is already in use",
        "create_ok":          "User created",
        "create_failed":      "Failed to create user",
        "not_found":          "Endpoint not found",
        "internal":           "Internal server error",
        "bad_json":           "Request body is not valid JSON",
    },
}

ROLE_LABELS = {
    "zh": {"super_admin": "超级管理员", "admin": "管理员", "employee": "员工"},
    "en": {"super_admin": "Super admin", "admin": "Admin", "employee": "Employee"},
}

DEFAULT_LOCALE = "zh"


def messages_for(locale: str) -> dict:
    return MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])


def role_labels_for(locale: str) -> dict:
    return ROLE_LABELS.get(locale, ROLE_LABELS[DEFAULT_LOCALE])
