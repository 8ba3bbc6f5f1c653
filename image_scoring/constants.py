APP_NAME = "image-scoring"
APP_TITLE = "Image Scoring Service"
PATH_PREFIX = "/scoring"

DEFAULT_DIFY_API_URL = "https://api.dify.ai/v1"
DEFAULT_DIFY_USER = "web-user"

# Dify API paths, relative to the configured base URL
UPLOAD_PATH = "/files/upload"
WORKFLOW_RUN_PATH = "/workflows/run"
PARAMETERS_PATH = "/parameters"
CHAT_MESSAGES_PATH = "/chat-messages"

RESPONSE_MODE_BLOCKING = "blocking"
