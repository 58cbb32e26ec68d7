"""Константы для Task Tracker API.

Централизованное хранилище всех магических чисел и строк.
"""

# === HTTP и API ===
TASKS_API_PREFIX = "/api/tasks"
USER_EMAIL_HEADER = "X-User-Email"
REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# === Формат дат в JSON ответах (PHP "Y-m-d H:i:s") ===
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# === Ограничения полей задачи ===
TITLE_MAX_LENGTH = 255

# === Пагинация ===
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Граница int64: query параметры насыщаются до неё, offset страницы тоже в неё помещается
INT64_MAX = 2**63 - 1
MAX_PAGE = INT64_MAX // MAX_PAGE_SIZE

# === Уведомления ===
DEFAULT_PROVIDER_URL = "https://api.sendgrid.com/v3/mail/send"
PROVIDER_ACCEPTED_STATUS = 202
DEFAULT_NOTIFICATION_TIMEOUT = 5.0
DEFAULT_NOTIFICATION_QUEUE_SIZE = 1000
NOTIFICATION_DRAIN_TIMEOUT = 5.0

# === Redis ключи ===
REDIS_TASK_ID_KEY = "tasks:next_id"
REDIS_TASK_KEY = "task:{task_id}"
REDIS_OWNER_INDEX_KEY = "user:{{{owner}}}:tasks"
REDIS_RATE_LIMIT_KEY = "ratelimit:{policy}:{key}"
